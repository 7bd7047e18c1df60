from typing import Any, Dict, List, Tuple

from .mapper import RESOURCE_FIELDS, RESOURCE_LIST_FIELDS
from .models import PRIORITIES, REQUIREMENT_STATUSES, Requirement
from .normalize import STATUS_MAP, parse_date

OPTIONAL_STR_FIELDS = ["email", "designation", "location", "status"]
DATE_FIELDS = ["availabilityDate", "releaseDate", "createdAt", "updatedAt"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _has_any(data: Dict[str, Any], names: tuple) -> bool:
    return any(data.get(n) not in (None, "") for n in names)


def validate_resource_payload(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Accepts any of the upstream field spellings the mapper understands.
    """
    if not isinstance(data, dict):
        return ["Resource payload must be a JSON object"]

    errors: List[str] = []

    if not _has_any(data, RESOURCE_FIELDS["employee_id"]):
        errors.append("Missing identifier: one of " + ", ".join(RESOURCE_FIELDS["employee_id"]))
    if not _has_any(data, RESOURCE_FIELDS["name"]):
        errors.append("Missing name: one of " + ", ".join(RESOURCE_FIELDS["name"]))

    for f in OPTIONAL_STR_FIELDS:
        if f in data and data[f] is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    for f in DATE_FIELDS:
        if _is_non_empty_str(data.get(f)) and parse_date(data[f]) is None:
            errors.append(f"Field '{f}' must be an ISO-8601 date")

    for f in RESOURCE_LIST_FIELDS["skills"]:
        if f not in data:
            continue
        if not isinstance(data[f], list):
            errors.append(f"Field '{f}' must be a list")
            continue
        for i, skill in enumerate(data[f]):
            if isinstance(skill, str):
                continue
            if not isinstance(skill, dict) or not _is_non_empty_str(skill.get("name")):
                errors.append(f"Skill at {f}[{i}] needs a non-empty 'name'")

    billing = data.get("billingHistory")
    if billing is not None:
        if not isinstance(billing, dict):
            errors.append("Field 'billingHistory' must be an object")
        elif billing.get("rate") is not None and not isinstance(billing["rate"], (int, float)):
            errors.append("Field 'billingHistory.rate' must be a number")

    return errors


def validate_resource_payload_strict(data: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """Like validate_resource_payload, but unknown statuses are errors too."""
    errors = validate_resource_payload(data)
    status = data.get("status") if isinstance(data, dict) else None
    if _is_non_empty_str(status) and status.strip().upper() not in STATUS_MAP:
        errors.append(f"Unknown status '{status}'")
    return (len(errors) == 0, errors)


def validate_requirement(requirement: Requirement) -> List[str]:
    errors: List[str] = []
    if not _is_non_empty_str(requirement.id):
        errors.append("Requirement needs an id")
    if not _is_non_empty_str(requirement.title):
        errors.append("Requirement needs a title")
    if requirement.status not in REQUIREMENT_STATUSES:
        errors.append(f"Requirement status must be one of {', '.join(REQUIREMENT_STATUSES)}")
    if requirement.priority not in PRIORITIES:
        errors.append(f"Requirement priority must be one of {', '.join(PRIORITIES)}")
    if requirement.start_date and parse_date(requirement.start_date) is None:
        errors.append("Requirement startDate must be an ISO-8601 date")
    return errors


def validate_soft_block_request(resource_id: Any, account_id: Any, blocked_until: Any) -> List[str]:
    errors: List[str] = []
    if not resource_id:
        errors.append("Resource is required")
    if not account_id:
        errors.append("Account is required")
    if not blocked_until:
        errors.append("Blocked-until date is required")
    elif parse_date(blocked_until) is None:
        errors.append("Blocked-until must be an ISO-8601 date (YYYY-MM-DD)")
    return errors
