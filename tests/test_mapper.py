"""
Tests for mapping upstream payloads into canonical records.
"""

import pytest

from benchmatch.logger import get_logger
from benchmatch.matching import find_matches
from benchmatch.mapper import (
    extract_array,
    map_account,
    map_api_resource,
    map_api_resources,
    map_soft_block,
    map_statistics,
    resolve,
)
from benchmatch.requirements import load_requirements, search_requirements


class TestMapApiResource:
    """Current and legacy payload shapes."""

    def test_current_payload(self, api_resource_payload):
        r = map_api_resource(api_resource_payload)
        assert r.id == "101"
        assert r.employee_id == "EMP-101"
        assert r.name == "Asha Rao"
        assert r.designation == "Senior Engineer"
        assert r.location == "Pune"
        assert r.status == "ATP"
        assert r.availability_date == "2025-03-01"
        assert r.total_experience == 7
        assert r.billing_history.rate == 45
        assert r.billing_history.billable is True
        assert r.ctc == 2400000
        assert r.ctc_currency == "INR"
        assert r.created_at == "2025-03-05T08:00:00Z"

    def test_skills_are_canonicalized(self, api_resource_payload):
        skills = map_api_resource(api_resource_payload).skills
        assert [(s.name, s.level, s.type) for s in skills] == [
            ("React", "expert", "primary"),
            ("Node.js", "intermediate", "primary"),
        ]

    def test_nested_collections(self, api_resource_payload):
        r = map_api_resource(api_resource_payload)
        assert r.certifications[0].name == "AWS SAA"
        assert r.certifications[0].issuer == "Amazon"
        assert r.project_experience[0].project_name == "Retail Portal"
        assert r.project_experience[0].technologies == ["React", "GraphQL"]
        assert r.considerations[0].requirement_id == "REQ-9"
        assert r.considerations[0].interview_status == "pending-feedback"
        assert r.considerations[0].match_score == 81
        assert r.considerations[0].resource_id == "101"

    def test_legacy_payload(self, legacy_resource_payload):
        r = map_api_resource(legacy_resource_payload)
        assert r.id == "E-7"
        assert r.employee_id == "E-7"
        assert r.name == "Ravi Kumar"
        assert r.email == "ravi@example.com"
        assert r.designation == "Data Engineer"
        assert r.location == "Bangalore"
        assert r.status == "soft-blocked"
        assert r.availability_date == "2025-04-15"
        assert r.total_experience == 4
        assert [s.name for s in r.skills] == ["Python", "SQL"]
        assert r.skills[0].level == "advanced"
        assert r.project_experience[0].project_name == "Lakehouse"
        assert r.ctc == 1800000
        assert r.ctc_currency == "EUR"
        assert r.considerations == []
        assert r.created_at == "2024-12-01"
        assert r.updated_at  # defaulted to now

    def test_experience_list_is_projects_not_years(self):
        r = map_api_resource({"id": "1", "experience": [{"projectName": "Old"}]})
        assert r.total_experience is None
        assert r.project_experience[0].project_name == "Old"

    @pytest.mark.parametrize("raw, expected", [
        ("DEPLOYED", "deployed"),
        ("deployed", "deployed"),
        ("INTERVIEW_SCHEDULED", "interview-scheduled"),
        ("interview-scheduled", "interview-scheduled"),
        ("NOTICE", "notice"),
        ("on_bench", "ATP"),
        (None, "ATP"),
        ("", "ATP"),
    ])
    def test_status_canonicalization(self, raw, expected):
        assert map_api_resource({"id": "1", "status": raw}).status == expected

    def test_empty_payload_defaults(self):
        r = map_api_resource({})
        assert r.id == ""
        assert r.name == ""
        assert r.skills == []
        assert r.soft_blocks == []
        assert r.billing_history.billable is False
        assert r.ctc_currency == "INR"

    def test_numeric_ids_become_strings(self):
        r = map_api_resource({"id": 5, "employeeId": 1005})
        assert r.id == "5"
        assert r.employee_id == "1005"

    def test_scalar_text_fields_become_strings(self):
        r = map_api_resource({
            "id": "1",
            "name": 42,
            "designation": 7,
            "location": 411001,
            "currency": 978,
            "projects": [{"projectName": 2024, "role": 3}],
            "considerations": [{"requirementId": "R-1", "requirementTitle": 7, "location": 560001,
                                "domain": 5, "priority": 1, "interviewStatus": 2}],
        })
        assert r.name == "42"
        assert r.designation == "7"
        assert r.location == "411001"
        assert r.ctc_currency == "978"
        assert r.project_experience[0].project_name == "2024"
        c = r.considerations[0]
        assert (c.requirement_title, c.location, c.domain, c.priority) == ("7", "560001", "5", "1")
        assert c.feedback is None

    def test_scalar_fields_flow_through_matching(self, now):
        resources = map_api_resources([{
            "id": "1",
            "status": "ATP",
            "location": 411001,
            "skills": ["Java"],
            "considerations": [{"requirementId": "R-1", "requirementTitle": 7, "location": 411001,
                                "requiredSkills": ["Java"]}],
        }])
        requirements = load_requirements(resources, now)
        assert [r.title for r in search_requirements(requirements, "7")] == ["7"]
        [match] = find_matches(resources, requirements)
        assert match.match_score == 100
        assert "Location match" in match.reasons

    def test_skills_without_names_are_dropped(self):
        r = map_api_resource({"id": "1", "skills": [{"level": "expert"}, {"name": "Go"}, 42]})
        assert [s.name for s in r.skills] == ["Go"]


class TestMapSoftBlock:

    def test_api_shape(self, now):
        block = map_soft_block({"accountId": 7, "accountName": "Globex", "blockedUntil": "2025-06-30"}, "EMP-1")
        assert block.id == "EMP-1-7-2025-06-30"
        assert block.resource_id == "EMP-1"
        assert block.reason == "Globex"
        assert block.end_date == "2025-06-30"
        assert block.blocked_until == "2025-06-30"
        assert block.created_by == "System"
        assert block.start_date  # today

    def test_api_shape_without_account(self):
        block = map_soft_block({"blockedUntil": "2025-06-30"}, "EMP-1")
        assert block.id == "EMP-1-block-2025-06-30"
        assert block.reason == "Soft Block"

    def test_canonical_shape_passes_through(self):
        raw = {"id": "b1", "resourceId": "R9", "reason": "Client hold",
               "startDate": "2025-01-01", "endDate": "2025-02-01", "createdBy": "dm@example.com"}
        block = map_soft_block(raw, "EMP-1")
        assert block.id == "b1"
        assert block.resource_id == "R9"
        assert block.reason == "Client hold"
        assert block.end_date == "2025-02-01"
        assert block.created_by == "dm@example.com"

    def test_resource_uses_alternate_block_fields(self, legacy_resource_payload):
        r = map_api_resource(legacy_resource_payload)
        assert len(r.soft_blocks) == 1
        assert r.soft_blocks[0].reason == "Client hold"


class TestMapApiResources:

    def test_maps_list(self, api_resource_payload, legacy_resource_payload):
        resources = map_api_resources([api_resource_payload, legacy_resource_payload])
        assert [r.name for r in resources] == ["Asha Rao", "Ravi Kumar"]

    def test_non_list_yields_empty(self):
        assert map_api_resources({"data": []}) == []
        assert map_api_resources(None) == []

    def test_bad_entry_degrades_to_minimal_record(self, api_resource_payload):
        before = get_logger().metrics["mapping_fallbacks"]
        resources = map_api_resources([api_resource_payload, "garbage"])
        assert len(resources) == 2
        assert resources[1].id == "unknown-1"
        assert resources[1].skills == []
        assert resources[1].status == "ATP"
        assert get_logger().metrics["mapping_fallbacks"] == before + 1


class TestExtractArray:

    @pytest.mark.parametrize("key", ["data", "content", "results", "items"])
    def test_envelopes(self, key):
        assert extract_array({key: [1, 2]}) == [1, 2]

    def test_bare_list(self):
        assert extract_array([3]) == [3]

    def test_unknown_shape_returned_as_is(self):
        payload = {"value": 1}
        assert extract_array(payload) is payload


class TestResolve:

    def test_first_truthy_wins(self):
        assert resolve({"a": "", "b": None, "c": "x", "d": "y"}, ("a", "b", "c", "d")) == "x"

    def test_nothing_found(self):
        assert resolve({}, ("a",)) is None


class TestAccountsAndStats:

    def test_account(self):
        account = map_account({"id": 3, "name": "Initech", "region": "EU"})
        assert account.id == "3"
        assert account.name == "Initech"
        assert account.extra == {"region": "EU"}

    def test_statistics(self):
        stats = map_statistics({"total": 10, "atp": 4, "deployed": 5, "softBlocked": 1, "notice": 2})
        assert (stats.total, stats.atp, stats.deployed, stats.soft_blocked) == (10, 4, 5, 1)
        assert stats.extra == {"notice": 2}

    def test_statistics_envelope_and_garbage(self):
        assert map_statistics({"data": {"total": 3}}).total == 3
        assert map_statistics("nope").total == 0
