"""
Adapters from upstream API payloads to canonical records.

The resource API has shipped several field spellings over time. Each
canonical field lists its accepted upstream names in priority order and
is resolved in one place; call sites only ever see canonical records.
"""

from typing import Any, Dict, List, Optional

from .logger import get_logger
from .models import (
    ATP,
    Account,
    BillingHistory,
    Certification,
    Consideration,
    ProjectExperience,
    Resource,
    ResourceStatistics,
    SoftBlock,
)
from .normalize import normalize_skills, normalize_status, today_iso, utc_now

logger = get_logger()

RESOURCE_FIELDS: Dict[str, tuple] = {
    "name": ("name", "fullName", "resourceName", "employeeName"),
    "employee_id": ("employeeId", "id", "empId", "employeeCode"),
    "email": ("email", "emailAddress", "emailId"),
    "designation": ("designation", "role", "title", "position"),
    "location": ("location", "city", "baseLocation", "officeLocation"),
    "availability_date": ("availabilityDate", "availableFrom", "availability", "availableDate"),
    "release_date": ("releaseDate", "releasedDate", "releaseFrom"),
    "ctc": ("ctc", "salary", "compensation"),
    "ctc_currency": ("ctcCurrency", "currency"),
    "created_at": ("createdAt", "createdDate", "created"),
    "updated_at": ("updatedAt", "updatedDate", "updated"),
}

RESOURCE_LIST_FIELDS: Dict[str, tuple] = {
    "skills": ("skills", "skillSet", "technicalSkills"),
    "certifications": ("certifications", "certificate", "certs"),
    "project_experience": ("projectExperience", "projects", "experience"),
    "soft_blocks": ("softBlocks", "blocks", "blockedDates"),
    "considerations": ("considerations", "consideration", "matches"),
}

# "experience" is a number on some payload versions and a project list on others.
EXPERIENCE_FIELDS = ("totalExperience", "experience", "yearsOfExperience")

ENVELOPE_KEYS = ("data", "content", "results", "items")


def resolve(raw: Dict[str, Any], names: tuple) -> Any:
    """First truthy value among the candidate field names, else None."""
    for name in names:
        value = raw.get(name)
        if value:
            return value
    return None


def resolve_list(raw: Dict[str, Any], names: tuple) -> list:
    """First candidate field that holds a list, else an empty list."""
    for name in names:
        value = raw.get(name)
        if isinstance(value, list):
            return value
    return []


def _text(value: Any, default: str = "") -> str:
    """Upstream scalars as text; None becomes the default."""
    return default if value is None else str(value)


def _opt_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _resolve_number(raw: Dict[str, Any], names: tuple) -> Optional[float]:
    for name in names:
        value = raw.get(name)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value:
            return value
    return None


def extract_array(payload: Any) -> Any:
    """Unwrap a list from a bare array or a data/content/results/items envelope.

    Anything else is returned unchanged.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ENVELOPE_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    logger.warning(
        "Unexpected API response format",
        type=type(payload).__name__,
        keys=sorted(payload.keys()) if isinstance(payload, dict) else None,
    )
    return payload


def map_soft_block(block: Dict[str, Any], employee_id: str) -> SoftBlock:
    """Adapt either the API's account block or an already-canonical block."""
    if block.get("blockedUntil"):
        blocked_until = block["blockedUntil"]
        account_id = block.get("accountId")
        return SoftBlock(
            id=str(block.get("id") or f"{employee_id}-{account_id or 'block'}-{blocked_until}"),
            resource_id=str(block.get("resourceId") or employee_id),
            reason=_text(block.get("accountName") or block.get("reason") or "Soft Block"),
            start_date=block.get("startDate") or today_iso(),
            end_date=blocked_until,
            created_by=_text(block.get("createdBy") or "System"),
            created_at=block.get("createdAt") or utc_now().isoformat(),
            account_id=account_id,
            account_name=_opt_text(block.get("accountName")),
            blocked_until=blocked_until,
        )
    return SoftBlock(
        id=str(block.get("id") or ""),
        resource_id=str(block.get("resourceId") or employee_id),
        reason=_text(block.get("reason") or block.get("accountName") or "Soft Block"),
        start_date=block.get("startDate"),
        end_date=block.get("endDate"),
        created_by=_text(block.get("createdBy") or "System"),
        created_at=block.get("createdAt"),
        account_id=block.get("accountId"),
        account_name=_opt_text(block.get("accountName")),
    )


def map_consideration(raw: Dict[str, Any], resource_id: str) -> Consideration:
    requirement_id = raw.get("requirementId")
    score = raw.get("matchScore")
    return Consideration(
        id=str(raw.get("id") or ""),
        resource_id=str(raw.get("resourceId") or resource_id),
        requirement_id=str(requirement_id) if requirement_id else None,
        interview_status=_opt_text(raw.get("interviewStatus")),
        interview_date=raw.get("interviewDate"),
        interviewer=_opt_text(raw.get("interviewer")),
        feedback=_opt_text(raw.get("feedback")),
        match_score=score if isinstance(score, (int, float)) else 0,
        created_at=raw.get("createdAt"),
        updated_at=raw.get("updatedAt"),
        requirement_title=_opt_text(raw.get("requirementTitle")),
        requirement_description=_opt_text(raw.get("requirementDescription")),
        required_skills=normalize_skills(raw.get("requiredSkills")),
        preferred_skills=normalize_skills(raw.get("preferredSkills")),
        experience_level=_opt_text(raw.get("experienceLevel")),
        location=_opt_text(raw.get("location")),
        domain=_opt_text(raw.get("domain")),
        start_date=raw.get("startDate"),
        status=_opt_text(raw.get("status")),
        priority=_opt_text(raw.get("priority")),
        created_by=_opt_text(raw.get("createdBy")),
    )


def _map_certification(raw: Any) -> Optional[Certification]:
    if isinstance(raw, str):
        return Certification(name=raw)
    if not isinstance(raw, dict) or not raw.get("name"):
        return None
    return Certification(
        name=_text(raw["name"]),
        issuer=_text(raw.get("issuer") or ""),
        issue_date=raw.get("issueDate"),
        expiry_date=raw.get("expiryDate"),
        credential_id=raw.get("credentialId"),
    )


def _map_project(raw: Any) -> Optional[ProjectExperience]:
    if not isinstance(raw, dict):
        return None
    technologies = raw.get("technologies")
    return ProjectExperience(
        project_name=_text(raw.get("projectName") or raw.get("name") or ""),
        domain=_text(raw.get("domain") or ""),
        role=_text(raw.get("role") or ""),
        start_date=raw.get("startDate"),
        end_date=raw.get("endDate"),
        technologies=[str(t) for t in technologies] if isinstance(technologies, list) else [],
    )


def _map_billing(raw: Any) -> BillingHistory:
    if not isinstance(raw, dict) or not raw:
        return BillingHistory()
    rate = raw.get("rate")
    hours = raw.get("totalBilledHours")
    return BillingHistory(
        billable=bool(raw.get("billable")),
        rate=rate if isinstance(rate, (int, float)) and not isinstance(rate, bool) else None,
        currency=raw.get("currency"),
        last_billed_date=raw.get("lastBilledDate"),
        total_billed_hours=hours if isinstance(hours, (int, float)) else None,
    )


def _dicts(items: list) -> list:
    return [item for item in items if isinstance(item, dict)]


def map_api_resource(raw: Dict[str, Any]) -> Resource:
    """Adapt one upstream resource payload to a canonical Resource."""
    employee_id = resolve(raw, RESOURCE_FIELDS["employee_id"]) or ""
    resource_id = raw.get("id") or employee_id or ""
    employee_id = str(employee_id or resource_id)
    resource_id = str(resource_id)
    now = utc_now().isoformat()

    certifications = [
        c for c in map(_map_certification, resolve_list(raw, RESOURCE_LIST_FIELDS["certifications"])) if c
    ]
    projects = [
        p for p in map(_map_project, resolve_list(raw, RESOURCE_LIST_FIELDS["project_experience"])) if p
    ]

    return Resource(
        id=resource_id,
        employee_id=employee_id,
        name=_text(resolve(raw, RESOURCE_FIELDS["name"])),
        email=_text(resolve(raw, RESOURCE_FIELDS["email"])),
        designation=_text(resolve(raw, RESOURCE_FIELDS["designation"])),
        location=_text(resolve(raw, RESOURCE_FIELDS["location"])),
        status=normalize_status(raw.get("status")),
        availability_date=resolve(raw, RESOURCE_FIELDS["availability_date"]),
        release_date=resolve(raw, RESOURCE_FIELDS["release_date"]),
        total_experience=_resolve_number(raw, EXPERIENCE_FIELDS),
        skills=normalize_skills(resolve_list(raw, RESOURCE_LIST_FIELDS["skills"])),
        certifications=certifications,
        project_experience=projects,
        billing_history=_map_billing(raw.get("billingHistory")),
        ctc=resolve(raw, RESOURCE_FIELDS["ctc"]),
        ctc_currency=_text(resolve(raw, RESOURCE_FIELDS["ctc_currency"]) or "INR"),
        soft_blocks=[
            map_soft_block(b, employee_id)
            for b in _dicts(resolve_list(raw, RESOURCE_LIST_FIELDS["soft_blocks"]))
        ],
        considerations=[
            map_consideration(c, resource_id)
            for c in _dicts(resolve_list(raw, RESOURCE_LIST_FIELDS["considerations"]))
        ],
        created_at=resolve(raw, RESOURCE_FIELDS["created_at"]) or now,
        updated_at=resolve(raw, RESOURCE_FIELDS["updated_at"]) or now,
    )


def _fallback_resource(raw: Any, index: int) -> Resource:
    """Minimal record for a payload the adapter could not handle."""
    raw = raw if isinstance(raw, dict) else {}
    now = utc_now().isoformat()
    return Resource(
        id=str(raw.get("id") or raw.get("employeeId") or f"unknown-{index}"),
        employee_id=str(raw.get("employeeId") or raw.get("id") or f"unknown-{index}"),
        name=str(raw.get("name") or raw.get("fullName") or raw.get("resourceName") or ""),
        email=str(raw.get("email") or ""),
        designation=str(raw.get("designation") or ""),
        location=str(raw.get("location") or ""),
        status=normalize_status(raw.get("status")) if raw.get("status") else ATP,
        availability_date=raw.get("availabilityDate"),
        release_date=raw.get("releaseDate"),
        ctc=raw.get("ctc"),
        ctc_currency=raw.get("ctcCurrency") or "INR",
        created_at=raw.get("createdAt") or now,
        updated_at=raw.get("updatedAt") or now,
    )


def map_api_resources(payload: Any) -> List[Resource]:
    """Map a list of resource payloads, degrading bad entries to minimal records."""
    if not isinstance(payload, list):
        logger.warning("Resource payload is not a list", type=type(payload).__name__)
        return []

    resources = []
    for index, raw in enumerate(payload):
        try:
            if not isinstance(raw, dict):
                raise TypeError(f"expected an object, got {type(raw).__name__}")
            resources.append(map_api_resource(raw))
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            logger.error(f"Error mapping resource at index {index}", error=str(e))
            logger.record_mapping_fallback()
            resources.append(_fallback_resource(raw, index))
    return resources


def map_account(raw: Dict[str, Any]) -> Account:
    extra = {k: v for k, v in raw.items() if k not in ("id", "name", "accountName")}
    return Account(
        id=str(raw.get("id") or raw.get("accountId") or ""),
        name=str(raw.get("name") or raw.get("accountName") or ""),
        extra=extra,
    )


def map_statistics(raw: Any) -> ResourceStatistics:
    if isinstance(raw, dict) and isinstance(raw.get("data"), dict):
        raw = raw["data"]
    if not isinstance(raw, dict):
        return ResourceStatistics()

    def count(key):
        value = raw.get(key)
        return int(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else 0

    known = ("total", "atp", "deployed", "softBlocked")
    return ResourceStatistics(
        total=count("total"),
        atp=count("atp"),
        deployed=count("deployed"),
        soft_blocked=count("softBlocked"),
        extra={k: v for k, v in raw.items() if k not in known},
    )
