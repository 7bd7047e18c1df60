"""
Bench reporting: weekly ATP summary, headline statistics and the
bench directory filter.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .matching import find_matches
from .models import ATP, DEPLOYED, SOFT_BLOCKED, Resource, ResourceStatistics, WeeklyATPSummary
from .normalize import parse_date, round_half_up, utc_now
from .requirements import load_requirements

WEEK = timedelta(days=7)
TOP_RECOMMENDATIONS = 5

STATUS_LABELS = {
    ATP: "ATP",
    DEPLOYED: "Deployed",
    SOFT_BLOCKED: "Soft Blocked",
    "notice": "Notice",
    "leave": "Leave",
    "trainee": "Trainee",
    "interview-scheduled": "Interview Scheduled",
}


def _primary_skill_counts(resources: Iterable[Resource]) -> Counter:
    counts: Counter = Counter()
    for resource in resources:
        for skill in resource.skills or []:
            if skill.type == "primary" and skill.name:
                counts[skill.name] += 1
    return counts


def _changed_since(timestamp: Optional[str], cutoff: datetime) -> bool:
    parsed = parse_date(timestamp)
    return parsed is not None and parsed >= cutoff


def weekly_atp_summary(
    resources: Iterable[Resource],
    now: Optional[datetime] = None,
    top: int = TOP_RECOMMENDATIONS,
) -> WeeklyATPSummary:
    """ATP movement over the last seven days, broken down by skill and location."""
    now = now or utc_now()
    resources = list(resources)
    week_ago = now - WEEK
    atp = [r for r in resources if r.status == ATP]

    by_location: Counter = Counter()
    for resource in atp:
        if resource.location:
            by_location[resource.location] += 1

    matches = find_matches(resources, load_requirements(resources, now))

    return WeeklyATPSummary(
        week=now.date().isoformat(),
        total_atp=len(atp),
        new_atp=sum(1 for r in atp if _changed_since(r.created_at, week_ago)),
        deployed=sum(1 for r in resources if r.status == DEPLOYED and _changed_since(r.updated_at, week_ago)),
        soft_blocked=sum(1 for r in atp if r.soft_blocks),
        by_skill=dict(_primary_skill_counts(atp)),
        by_location=dict(by_location),
        top_recommendations=matches[:top],
    )


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def resource_statistics(
    resources: Iterable[Resource],
    api_stats: Optional[ResourceStatistics] = None,
) -> Dict[str, int]:
    """Headline counts; values reported by the API win over local counts when non-zero."""
    resources = list(resources)
    api_stats = api_stats or ResourceStatistics()

    def local(status):
        return sum(1 for r in resources if r.status == status)

    stats = {
        "total": api_stats.total or len(resources),
        "atp": api_stats.atp or local(ATP),
        "deployed": api_stats.deployed or local(DEPLOYED),
        "soft_blocked": api_stats.soft_blocked or local(SOFT_BLOCKED),
    }
    stats["utilization_rate"] = _percent(stats["deployed"], stats["total"])
    stats["atp_rate"] = _percent(stats["atp"], stats["total"])
    return stats


def status_distribution(resources: Iterable[Resource]) -> List[Tuple[str, int]]:
    """(label, count) per status, in first-seen order."""
    counts: Counter = Counter(r.status for r in resources if r.status)
    return [(STATUS_LABELS.get(status, status), n) for status, n in counts.items()]


def top_skills(resources: Iterable[Resource], limit: int = 10) -> List[Tuple[str, int]]:
    return _primary_skill_counts(resources).most_common(limit)


def filter_resources(
    resources: Iterable[Resource],
    search: str = "",
    status: Optional[str] = None,
    location: Optional[str] = None,
    skill: Optional[str] = None,
    min_experience: Optional[float] = None,
) -> List[Resource]:
    """Bench directory filter. Every criterion left as None/'all' is ignored."""
    term = (search or "").strip().lower()
    result = []
    for r in resources:
        skills = r.skills or []
        if term and not (
            term in (r.name or "").lower()
            or term in (r.email or "").lower()
            or term in (r.designation or "").lower()
            or any(term in (s.name or "").lower() for s in skills)
        ):
            continue
        if status and status != "all" and r.status != status:
            continue
        if location and location != "all" and r.location != location:
            continue
        if skill and skill != "all" and not any(s.name == skill for s in skills):
            continue
        if min_experience is not None and (r.total_experience is None or r.total_experience < min_experience):
            continue
        result.append(r)
    return result
