"""Interview tracking derived from resource considerations."""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .models import Interview, Resource
from .normalize import days_between, parse_date, utc_now


def derive_interviews(resources: Iterable[Resource], now: Optional[datetime] = None) -> List[Interview]:
    """Every consideration that carries an interview status becomes an interview."""
    stamp = (now or utc_now()).isoformat()
    interviews = []
    for resource in resources:
        if not isinstance(resource.considerations, list):
            continue
        for index, c in enumerate(resource.considerations):
            if not c.interview_status:
                continue
            interviews.append(Interview(
                id=f"{resource.id}-{c.id or index}",
                resource_id=resource.employee_id or resource.id,
                resource_name=resource.name,
                requirement_id=c.requirement_id or "unknown",
                requirement_title=c.requirement_title or f"Requirement {c.requirement_id}",
                interview_date=c.interview_date or c.created_at or stamp,
                interview_status=c.interview_status,
                match_score=c.match_score or 0,
                feedback=c.feedback,
                interviewer=c.interviewer,
            ))
    return interviews


def filter_interviews(interviews: Iterable[Interview], status: Optional[str] = None) -> List[Interview]:
    if not status or status == "all":
        return list(interviews)
    return [i for i in interviews if i.interview_status == status]


def interview_stats(interviews: Iterable[Interview]) -> Dict[str, int]:
    interviews = list(interviews)

    def count(status):
        return sum(1 for i in interviews if i.interview_status == status)

    return {
        "total": len(interviews),
        "scheduled": count("scheduled"),
        "pending_feedback": count("pending-feedback"),
        "selected": count("selected"),
    }


def days_until(interview: Interview, now: Optional[datetime] = None) -> Optional[int]:
    """Days until the interview, rounded up; None if the date is unreadable."""
    when = parse_date(interview.interview_date)
    if when is None:
        return None
    return days_between(when, now or utc_now())
