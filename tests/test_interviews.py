"""
Tests for interview tracking.
"""

from benchmatch.interviews import days_until, derive_interviews, filter_interviews, interview_stats
from benchmatch.models import Consideration


def _bench(make_resource, consideration):
    return [
        make_resource(id="r1", employee_id="EMP-1", name="Asha", considerations=[
            consideration,
            Consideration(id="c2", requirement_id="req-7", interview_status="selected", match_score=90),
            Consideration(id="c3", requirement_id="req-8"),
        ]),
        make_resource(id="r2", name="Ravi", considerations=[
            Consideration(requirement_id="req-9", interview_status="pending-feedback",
                          created_at="2025-03-01T10:00:00Z"),
        ]),
        make_resource(id="r3", considerations=None),
    ]


class TestDeriveInterviews:

    def test_only_considerations_with_status(self, make_resource, consideration, now):
        interviews = derive_interviews(_bench(make_resource, consideration), now)
        assert [i.id for i in interviews] == ["r1-c1", "r1-c2", "r2-0"]

    def test_fields(self, make_resource, consideration, now):
        first, second, third = derive_interviews(_bench(make_resource, consideration), now)
        assert first.resource_id == "EMP-1"
        assert first.resource_name == "Asha"
        assert first.requirement_title == "Java Backend Lead"
        assert first.interview_date == "2025-03-12T09:00:00Z"
        assert first.match_score == 72
        assert second.requirement_title == "Requirement req-7"
        assert second.interview_date == now.isoformat()
        assert third.interview_date == "2025-03-01T10:00:00Z"


class TestFilterAndStats:

    def test_filter(self, make_resource, consideration, now):
        interviews = derive_interviews(_bench(make_resource, consideration), now)
        assert len(filter_interviews(interviews)) == 3
        assert len(filter_interviews(interviews, "all")) == 3
        assert [i.id for i in filter_interviews(interviews, "selected")] == ["r1-c2"]

    def test_stats(self, make_resource, consideration, now):
        interviews = derive_interviews(_bench(make_resource, consideration), now)
        assert interview_stats(interviews) == {
            "total": 3, "scheduled": 1, "pending_feedback": 1, "selected": 1,
        }

    def test_days_until(self, make_resource, consideration, now):
        first, _, third = derive_interviews(_bench(make_resource, consideration), now)
        assert days_until(first, now) == 2  # 1 day 21 hours, rounded up
        assert days_until(third, now) == -9
        first.interview_date = "TBD"
        assert days_until(first, now) is None
