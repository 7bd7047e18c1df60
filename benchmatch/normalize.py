import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from .models import (
    ATP,
    DEPLOYED,
    INTERVIEW_SCHEDULED,
    LEAVE,
    NOTICE,
    SOFT_BLOCKED,
    TRAINEE,
    Skill,
)

STATUS_MAP = {
    "ATP": ATP,
    "DEPLOYED": DEPLOYED,
    "SOFT_BLOCKED": SOFT_BLOCKED,
    "SOFT-BLOCKED": SOFT_BLOCKED,
    "NOTICE": NOTICE,
    "LEAVE": LEAVE,
    "TRAINEE": TRAINEE,
    "INTERVIEW_SCHEDULED": INTERVIEW_SCHEDULED,
    "INTERVIEW-SCHEDULED": INTERVIEW_SCHEDULED,
}

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_status(status: Any) -> str:
    """Map an upstream status spelling to its canonical value; unknown means ATP."""
    if not status:
        return ATP
    return STATUS_MAP.get(str(status).strip().upper(), ATP)


def normalize_skill(raw: Any) -> Optional[Skill]:
    """Build a Skill from a dict or bare name. Returns None when there is no name."""
    if isinstance(raw, str):
        return Skill(name=raw) if raw.strip() else None
    if not isinstance(raw, dict):
        return None
    name = raw.get("name") or raw.get("skillName") or raw.get("skill")
    if not name:
        return None
    years = raw.get("yearsOfExperience")
    return Skill(
        name=str(name),
        level=str(raw["level"]).lower() if raw.get("level") else "intermediate",
        type=str(raw["type"]).lower() if raw.get("type") else "primary",
        years_of_experience=years if isinstance(years, (int, float)) else None,
    )


def normalize_skills(raw_skills: Any) -> list[Skill]:
    if not isinstance(raw_skills, list):
        return []
    skills = []
    for raw in raw_skills:
        skill = normalize_skill(raw)
        if skill is not None:
            skills.append(skill)
    return skills


def slugify(s: str) -> str:
    return re.sub(r"\s+", "-", s.strip().lower())


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO date or timestamp into an aware UTC datetime.

    Bare dates are midnight UTC; naive timestamps are taken as UTC.
    Returns None for anything unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            if _DATE_ONLY.match(text):
                parsed = datetime.strptime(text, "%Y-%m-%d")
            else:
                parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def days_between(later: datetime, earlier: datetime) -> int:
    """Whole days from earlier to later, rounded up."""
    return math.ceil((later - earlier).total_seconds() / 86400)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_iso(now: Optional[datetime] = None) -> str:
    return (now or utc_now()).date().isoformat()
