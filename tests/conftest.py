"""
Pytest configuration and shared fixtures.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import pytest

from benchmatch.logger import get_logger
from benchmatch.models import BillingHistory, Consideration, Requirement, Resource, Skill


@pytest.fixture(autouse=True)
def quiet_logger():
    """Drop handlers a test (usually the CLI) attached to the global logger."""
    yield
    get_logger().configure(level="INFO", enable_file=False, enable_console=False)


@pytest.fixture
def now() -> datetime:
    """Fixed clock for date-sensitive tests."""
    return datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_resource():
    """Factory for canonical resources with sensible defaults."""
    def _make(
        id: str = "r1",
        name: str = "Asha Rao",
        location: str = "Pune",
        status: str = "ATP",
        skills=("React",),
        **kwargs,
    ) -> Resource:
        if skills is not None:
            skills = [s if isinstance(s, Skill) else Skill(name=s) for s in skills]
        return Resource(
            id=id,
            employee_id=kwargs.pop("employee_id", id),
            name=name,
            location=location,
            status=status,
            skills=skills,
            **kwargs,
        )
    return _make


@pytest.fixture
def make_requirement():
    """Factory for requirements with sensible defaults."""
    def _make(
        id: str = "req-1",
        title: str = "Frontend Engineer",
        location: str = "Pune",
        start_date: str = "2025-01-01",
        required=("React",),
        **kwargs,
    ) -> Requirement:
        if required is not None:
            required = [Skill(name=s) for s in required]
        return Requirement(
            id=id,
            title=title,
            location=location,
            start_date=start_date,
            required_skills=required,
            **kwargs,
        )
    return _make


@pytest.fixture
def consideration():
    """Consideration against requirement req-42 with an embedded description."""
    return Consideration(
        id="c1",
        resource_id="r1",
        requirement_id="req-42",
        interview_status="scheduled",
        interview_date="2025-03-12T09:00:00Z",
        match_score=72,
        requirement_title="Java Backend Lead",
        required_skills=[Skill(name="Java"), Skill(name="Spring")],
        location="Chennai",
        priority="urgent",
    )


@pytest.fixture
def billing():
    return BillingHistory(billable=True, rate=55.0, currency="USD")


@pytest.fixture
def api_resource_payload() -> Dict[str, Any]:
    """A resource exactly as the current API version returns it."""
    return {
        "id": "101",
        "employeeId": "EMP-101",
        "name": "Asha Rao",
        "email": "asha.rao@example.com",
        "designation": "Senior Engineer",
        "location": "Pune",
        "status": "ATP",
        "availabilityDate": "2025-03-01",
        "totalExperience": 7,
        "skills": [
            {"name": "React", "level": "EXPERT", "type": "PRIMARY"},
            {"name": "Node.js"},
        ],
        "certifications": [{"name": "AWS SAA", "issuer": "Amazon", "issueDate": "2023-05-01"}],
        "projectExperience": [
            {"projectName": "Retail Portal", "domain": "Retail", "role": "Lead", "startDate": "2022-01-01",
             "technologies": ["React", "GraphQL"]},
        ],
        "billingHistory": {"billable": True, "rate": 45, "currency": "USD"},
        "ctc": 2400000,
        "softBlocks": [
            {"accountId": 7, "accountName": "Globex", "blockedUntil": "2099-12-31"},
        ],
        "considerations": [
            {"id": "c9", "requirementId": "REQ-9", "requirementTitle": "UI Lead",
             "interviewStatus": "pending-feedback", "matchScore": 81},
        ],
        "createdAt": "2025-03-05T08:00:00Z",
        "updatedAt": "2025-03-06T08:00:00Z",
    }


@pytest.fixture
def legacy_resource_payload() -> Dict[str, Any]:
    """An older payload using the alternate field spellings."""
    return {
        "empId": "E-7",
        "fullName": "Ravi Kumar",
        "emailAddress": "ravi@example.com",
        "role": "Data Engineer",
        "city": "Bangalore",
        "status": "soft_blocked",
        "availableFrom": "2025-04-15",
        "experience": 4,
        "skillSet": [{"name": "Python", "level": "Advanced"}, "SQL"],
        "projects": [{"projectName": "Lakehouse"}],
        "salary": 1800000,
        "currency": "EUR",
        "blocks": [{"id": "b1", "reason": "Client hold", "startDate": "2025-01-01", "endDate": "2025-02-01"}],
        "matches": [],
        "createdDate": "2024-12-01",
    }


@pytest.fixture
def resources_file(tmp_path, api_resource_payload, legacy_resource_payload) -> Path:
    """Paginated API response saved to disk, as --input expects."""
    deployed = {
        "id": "303",
        "employeeId": "EMP-303",
        "name": "Meera Iyer",
        "location": "Chennai",
        "status": "DEPLOYED",
        "skills": [{"name": "Java", "type": "primary"}],
    }
    path = tmp_path / "resources.json"
    path.write_text(json.dumps({
        "data": [api_resource_payload, legacy_resource_payload, deployed],
        "pagination": {"page": 0, "totalItems": 3},
    }))
    return path


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Isolate CLI runs: no .env pickup, logs under tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BENCHMATCH_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("BENCHMATCH_API_URL", "http://bench.test")
    return tmp_path


class FakeResponse:
    """Stand-in for requests.Response with just what the client reads."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: str = None, reason: str = "OK"):
        self.status_code = status_code
        self.reason = reason
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode("utf-8")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Records requests and replays queued responses (or raises queued exceptions)."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession
