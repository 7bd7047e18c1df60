"""Canonical records for resources, requirements and derived views."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

# Resource lifecycle states, in their canonical spelling.
ATP = "ATP"
DEPLOYED = "deployed"
SOFT_BLOCKED = "soft-blocked"
NOTICE = "notice"
LEAVE = "leave"
TRAINEE = "trainee"
INTERVIEW_SCHEDULED = "interview-scheduled"

RESOURCE_STATUSES = (ATP, DEPLOYED, SOFT_BLOCKED, NOTICE, LEAVE, TRAINEE, INTERVIEW_SCHEDULED)

INTERVIEW_STATUSES = ("pending", "scheduled", "selected", "rejected", "pending-feedback")
SKILL_LEVELS = ("beginner", "intermediate", "advanced", "expert")
SKILL_TYPES = ("primary", "secondary")
REQUIREMENT_STATUSES = ("open", "filled", "cancelled")
PRIORITIES = ("low", "medium", "high", "urgent")


@dataclass
class Skill:
    name: str
    level: str = "intermediate"
    type: str = "primary"
    years_of_experience: Optional[float] = None


@dataclass
class Certification:
    name: str
    issuer: str = ""
    issue_date: Optional[str] = None
    expiry_date: Optional[str] = None
    credential_id: Optional[str] = None


@dataclass
class ProjectExperience:
    project_name: str
    domain: str = ""
    role: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    technologies: list[str] = field(default_factory=list)


@dataclass
class BillingHistory:
    billable: bool = False
    rate: Optional[float] = None
    currency: Optional[str] = None
    last_billed_date: Optional[str] = None
    total_billed_hours: Optional[float] = None


@dataclass
class SoftBlock:
    """Reservation of a resource against an account until end_date."""

    id: str = ""
    resource_id: str = ""
    reason: str = "Soft Block"
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    created_by: str = "System"
    created_at: Optional[str] = None
    account_id: Optional[Any] = None
    account_name: Optional[str] = None
    blocked_until: Optional[str] = None


@dataclass
class Consideration:
    """A resource evaluated against a requirement, as the API reports it."""

    id: str = ""
    resource_id: str = ""
    requirement_id: Optional[str] = None
    interview_status: Optional[str] = None
    interview_date: Optional[str] = None
    interviewer: Optional[str] = None
    feedback: Optional[str] = None
    match_score: float = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # Requirement descriptors the API sometimes embeds
    requirement_title: Optional[str] = None
    requirement_description: Optional[str] = None
    required_skills: list[Skill] = field(default_factory=list)
    preferred_skills: list[Skill] = field(default_factory=list)
    experience_level: Optional[str] = None
    location: Optional[str] = None
    domain: Optional[str] = None
    start_date: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    created_by: Optional[str] = None


@dataclass
class Resource:
    id: str
    employee_id: str = ""
    name: str = ""
    email: str = ""
    designation: str = ""
    location: str = ""
    status: str = ATP
    availability_date: Optional[str] = None
    release_date: Optional[str] = None
    total_experience: Optional[float] = None
    skills: Optional[list[Skill]] = field(default_factory=list)
    certifications: list[Certification] = field(default_factory=list)
    project_experience: list[ProjectExperience] = field(default_factory=list)
    billing_history: BillingHistory = field(default_factory=BillingHistory)
    ctc: Optional[float] = None
    ctc_currency: str = "INR"
    soft_blocks: list[SoftBlock] = field(default_factory=list)
    considerations: Optional[list[Consideration]] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Requirement:
    id: str
    title: str = ""
    description: str = ""
    required_skills: Optional[list[Skill]] = field(default_factory=list)
    preferred_skills: Optional[list[Skill]] = field(default_factory=list)
    experience_level: str = "Not specified"
    location: str = ""
    domain: str = "General"
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: str = "open"
    priority: str = "medium"
    created_by: str = "System"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    budget: Optional[float] = None


@dataclass
class MatchRecommendation:
    resource: Resource
    requirement: Requirement
    match_score: int
    skill_gaps: list[str]
    skill_matches: list[str]
    recommended_upskilling: list[str]
    reasons: list[str]
    gross_margin: Optional[int] = None


@dataclass
class Account:
    id: str
    name: str = ""
    extra: dict = field(default_factory=dict)


@dataclass
class ResourceStatistics:
    total: int = 0
    atp: int = 0
    deployed: int = 0
    soft_blocked: int = 0
    extra: dict = field(default_factory=dict)


@dataclass
class Interview:
    id: str
    resource_id: str
    resource_name: str
    requirement_id: str
    requirement_title: str
    interview_date: str
    interview_status: str
    match_score: float = 0
    feedback: Optional[str] = None
    interviewer: Optional[str] = None


@dataclass
class SoftBlockEntry:
    """A soft block together with the resource it reserves."""

    block: SoftBlock
    resource_id: str
    resource_name: str = ""
    resource_designation: str = ""
    resource_location: str = ""


@dataclass
class WeeklyATPSummary:
    week: str
    total_atp: int
    new_atp: int
    deployed: int
    soft_blocked: int
    by_skill: dict[str, int] = field(default_factory=dict)
    by_location: dict[str, int] = field(default_factory=dict)
    top_recommendations: list[MatchRecommendation] = field(default_factory=list)
