from datetime import datetime
from typing import Iterable, List, Optional

from .logger import get_logger
from .models import Resource, SoftBlockEntry
from .normalize import parse_date, utc_now
from .schema import validate_soft_block_request

logger = get_logger()


def collect_soft_blocks(resources: Iterable[Resource]) -> List[SoftBlockEntry]:
    """Flatten every resource's soft blocks, tagged with who they reserve."""
    entries = []
    for resource in resources:
        for block in resource.soft_blocks or []:
            entries.append(SoftBlockEntry(
                block=block,
                resource_id=block.resource_id or resource.employee_id or resource.id,
                resource_name=resource.name,
                resource_designation=resource.designation,
                resource_location=resource.location,
            ))
    return entries


def is_active(entry: SoftBlockEntry, now: Optional[datetime] = None) -> Optional[bool]:
    """True while the end date is in the future, False once passed, None if unknown."""
    end = parse_date(entry.block.end_date or entry.block.blocked_until)
    if end is None:
        return None
    return end > (now or utc_now())


def active_blocks(entries: Iterable[SoftBlockEntry], now: Optional[datetime] = None) -> List[SoftBlockEntry]:
    now = now or utc_now()
    return [e for e in entries if is_active(e, now) is True]


def expired_blocks(entries: Iterable[SoftBlockEntry], now: Optional[datetime] = None) -> List[SoftBlockEntry]:
    now = now or utc_now()
    return [e for e in entries if is_active(e, now) is False]


def filter_blocks(
    entries: Iterable[SoftBlockEntry],
    active: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> List[SoftBlockEntry]:
    """All blocks when active is None, otherwise only active or only expired ones."""
    entries = list(entries)
    if active is None:
        return entries
    return active_blocks(entries, now) if active else expired_blocks(entries, now)


def create_soft_block(client, resource_id: str, account_id: str, blocked_until: str):
    """Validate and submit a soft block request through the API client.

    Raises:
        ValueError: If a field is missing or blocked_until is not an ISO date
    """
    errors = validate_soft_block_request(resource_id, account_id, blocked_until)
    if errors:
        raise ValueError("; ".join(errors))
    result = client.soft_block_resource(resource_id, account_id, blocked_until)
    logger.info("Soft block created", resource_id=resource_id, account_id=account_id, blocked_until=blocked_until)
    return result
