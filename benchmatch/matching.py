"""
Match scoring between bench resources and requirements.

Responsibilities:
- Compute a deterministic 0-100 score for a (resource, requirement) pair.
- Rank eligible pairs and explain each recommendation.

Non-Responsibilities:
- No API access.
- No requirement derivation.

Invariant:
Given identical inputs, scores, ordering and explanations are identical.
Malformed input never raises; it lowers the affected factor instead.
"""

from typing import Iterable, List, Optional

from .logger import get_logger
from .models import ATP, DEPLOYED, MatchRecommendation, Requirement, Resource
from .normalize import days_between, parse_date, round_half_up

logger = get_logger()

SKILL_WEIGHT = 40
LOCATION_WEIGHT = 20
AVAILABILITY_WEIGHT = 20
STATUS_WEIGHT = 20

MATCH_THRESHOLD = 50
GROSS_MARGIN_FACTOR = 0.4


def _skill_names(skills) -> Optional[List[str]]:
    """Lowercased skill names, or None when the collection is missing."""
    if not isinstance(skills, list):
        return None
    return [s.name.lower() for s in skills if getattr(s, "name", None)]


def skills_overlap(resource_skill: str, required_skill: str) -> bool:
    # Loose on purpose: "react" matches "react.js", and "java" matches "javascript".
    return required_skill in resource_skill or resource_skill in required_skill


def split_skills(resource: Resource, requirement: Requirement):
    """Return (matched, gaps) over the requirement's lowercased required-skill names."""
    resource_names = _skill_names(resource.skills) or []
    required_names = _skill_names(requirement.required_skills) or []
    matched, gaps = [], []
    for skill in required_names:
        if any(skills_overlap(rs, skill) for rs in resource_names):
            matched.append(skill)
        else:
            gaps.append(skill)
    return matched, gaps


def _availability_points(resource: Resource, requirement: Requirement) -> int:
    if not resource.availability_date:
        return AVAILABILITY_WEIGHT

    available = parse_date(resource.availability_date)
    starts = parse_date(requirement.start_date)
    if available is None or starts is None:
        # No comparable dates: neither "on time" nor within any gap bucket.
        return 5
    if available <= starts:
        return AVAILABILITY_WEIGHT

    gap = days_between(available, starts)
    if gap <= 30:
        return 15
    if gap <= 60:
        return 10
    return 5


def score_breakdown(resource: Resource, requirement: Requirement) -> dict:
    """Points earned and weight consumed per factor, plus the final score."""
    factors = {}

    resource_names = _skill_names(resource.skills)
    required_names = _skill_names(requirement.required_skills)
    if resource_names is not None and required_names is not None:
        matched = [
            skill for skill in required_names
            if any(skills_overlap(rs, skill) for rs in resource_names)
        ]
        ratio = len(matched) / len(required_names) if required_names else 0
        factors["skills"] = (ratio * SKILL_WEIGHT, SKILL_WEIGHT)

    if resource.location and requirement.location:
        have = resource.location.lower()
        want = requirement.location.lower()
        if have == want:
            points = LOCATION_WEIGHT
        elif want in have or have in want:
            points = LOCATION_WEIGHT // 2
        else:
            points = 0
        factors["location"] = (points, LOCATION_WEIGHT)

    factors["availability"] = (_availability_points(resource, requirement), AVAILABILITY_WEIGHT)

    if resource.status == ATP:
        status_points = STATUS_WEIGHT
    elif resource.status == DEPLOYED:
        status_points = 5
    else:
        status_points = 0
    factors["status"] = (status_points, STATUS_WEIGHT)

    earned = sum(points for points, _ in factors.values())
    weight = sum(w for _, w in factors.values())
    score = round_half_up(earned / weight * 100) if weight > 0 else 0
    return {"factors": factors, "earned": earned, "weight": weight, "score": score}


def calculate_match_score(resource: Resource, requirement: Requirement) -> int:
    """Score a resource against a requirement, 0 to 100.

    Only factors with comparable data count toward the denominator, so the
    score is relative to whatever could be compared.
    """
    return score_breakdown(resource, requirement)["score"]


def is_eligible(resource: Resource) -> bool:
    """ATP resources, or anyone already under consideration somewhere."""
    if resource.status == ATP:
        return True
    return isinstance(resource.considerations, list) and len(resource.considerations) > 0


def gross_margin(resource: Resource) -> Optional[int]:
    # The rate cancels out, so this is always 40; kept to match existing reports.
    rate = resource.billing_history.rate if resource.billing_history else None
    if not rate:
        return None
    return round_half_up(rate * GROSS_MARGIN_FACTOR / rate * 100)


def build_reasons(resource: Resource, requirement: Requirement, matched: List[str]) -> List[str]:
    reasons = []
    if matched:
        reasons.append(
            f"Strong match on {len(matched)} required skill(s): {', '.join(matched[:3])}"
        )
    if resource.location == requirement.location:
        reasons.append("Location match")
    if resource.status == ATP:
        reasons.append("Resource is available (ATP)")
    if resource.availability_date:
        available = parse_date(resource.availability_date)
        starts = parse_date(requirement.start_date)
        if available is not None and starts is not None and available <= starts:
            reasons.append("Available before requirement start date")
    else:
        reasons.append("Immediate availability")
    projects = resource.project_experience
    if isinstance(projects, list) and projects:
        reasons.append(f"{len(projects)} project(s) of relevant experience")
    return reasons or ["Potential match based on profile"]


def recommend(resource: Resource, requirement: Requirement, score: int) -> MatchRecommendation:
    matched, gaps = split_skills(resource, requirement)
    return MatchRecommendation(
        resource=resource,
        requirement=requirement,
        match_score=score,
        skill_gaps=gaps,
        skill_matches=matched,
        recommended_upskilling=[f"Training on {gap}" for gap in gaps],
        reasons=build_reasons(resource, requirement, matched),
        gross_margin=gross_margin(resource),
    )


def find_matches(
    resources: Iterable[Resource],
    requirements: Iterable[Requirement],
) -> List[MatchRecommendation]:
    """Recommendations scoring at least 50, best first; ties keep input order."""
    requirements = list(requirements)
    matches = []

    for resource in resources:
        if not is_eligible(resource):
            continue
        for requirement in requirements:
            score = calculate_match_score(resource, requirement)
            if score >= MATCH_THRESHOLD:
                matches.append(recommend(resource, requirement, score))

    matches.sort(key=lambda m: m.match_score, reverse=True)
    logger.debug("Computed match recommendations", count=len(matches))
    logger.record_matches(len(matches))
    return matches


def filter_matches(
    matches: Iterable[MatchRecommendation],
    requirement_id: Optional[str] = None,
    location: Optional[str] = None,
) -> List[MatchRecommendation]:
    """Narrow recommendations to one requirement and/or one resource location."""
    result = list(matches)
    if requirement_id:
        result = [m for m in result if m.requirement.id == requirement_id]
    if location:
        result = [m for m in result if m.resource.location == location]
    return result
