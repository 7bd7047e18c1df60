"""
Requirements assembled from resource considerations.

The resource API has no requirements endpoint yet, so open roles are read
off the considerations embedded in each resource. When none exist, a small
demo set is synthesized from the most common primary skills on the bench.
"""

from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .logger import get_logger
from .models import Requirement, Resource, Skill
from .normalize import slugify, today_iso, utc_now

logger = get_logger()

SYNTHETIC_LIMIT = 5
HIGH_PRIORITY_HEADCOUNT = 3


def derive_requirements(resources: Iterable[Resource], now: Optional[datetime] = None) -> List[Requirement]:
    """One requirement per distinct requirement id; the first consideration seen wins."""
    now = now or utc_now()
    stamp = now.isoformat()
    by_id: Dict[str, Requirement] = {}

    for resource in resources:
        if not isinstance(resource.considerations, list):
            continue
        for c in resource.considerations:
            if not c.requirement_id or c.requirement_id in by_id:
                continue
            by_id[c.requirement_id] = Requirement(
                id=c.requirement_id,
                title=c.requirement_title or f"Requirement {c.requirement_id}",
                description=c.requirement_description or "Derived from resource considerations",
                required_skills=list(c.required_skills),
                preferred_skills=list(c.preferred_skills),
                experience_level=c.experience_level or "Not specified",
                location=c.location or resource.location or "Not specified",
                domain=c.domain or "General",
                start_date=c.start_date or today_iso(now),
                status=c.status or "open",
                priority=c.priority or "medium",
                created_by=c.created_by or "System",
                created_at=c.created_at or stamp,
                updated_at=c.updated_at or stamp,
            )

    return list(by_id.values())


def synthesize_requirements(resources: Iterable[Resource], now: Optional[datetime] = None) -> List[Requirement]:
    """Seed requirements for the top primary skills on the bench."""
    now = now or utc_now()
    stamp = now.isoformat()
    counts: Counter = Counter()
    for resource in resources:
        if not isinstance(resource.skills, list):
            continue
        for skill in resource.skills:
            if skill.type == "primary":
                counts[skill.name] += 1

    requirements = []
    # Counter.most_common keeps first-seen order among equal counts.
    for skill, count in counts.most_common(SYNTHETIC_LIMIT):
        requirements.append(Requirement(
            id=f"req-{slugify(skill)}",
            title=f"Senior {skill} Developer",
            description=f"Looking for an experienced {skill} developer. {count} available resources with this skill.",
            required_skills=[Skill(name=skill, level="advanced", type="primary")],
            preferred_skills=[],
            experience_level="5+ years",
            location="Multiple",
            domain="Technology",
            start_date=today_iso(now),
            status="open",
            priority="high" if count > HIGH_PRIORITY_HEADCOUNT else "medium",
            created_by="System",
            created_at=stamp,
            updated_at=stamp,
        ))
    return requirements


def load_requirements(resources: Iterable[Resource], now: Optional[datetime] = None) -> List[Requirement]:
    """Derived requirements, or synthesized ones when the bench has none."""
    resources = list(resources)
    requirements = derive_requirements(resources, now)
    if requirements:
        return requirements
    synthetic = synthesize_requirements(resources, now)
    if synthetic:
        logger.info("No considerations found; using skill-based sample requirements", count=len(synthetic))
    return synthetic


def search_requirements(requirements: Iterable[Requirement], term: str = "") -> List[Requirement]:
    term = (term or "").lower()
    return [
        r for r in requirements
        if term in r.title.lower() or term in r.description.lower() or term in r.domain.lower()
    ]


def requirement_counts(requirements: Iterable[Requirement]) -> Dict[str, int]:
    requirements = list(requirements)
    return {
        "open": sum(1 for r in requirements if r.status == "open"),
        "filled": sum(1 for r in requirements if r.status == "filled"),
        "urgent": sum(1 for r in requirements if r.priority == "urgent"),
    }
