"""
Tests for soft block listing and creation.
"""

import pytest
from benchmatch.models import SoftBlock
from benchmatch.softblocks import (
    active_blocks,
    collect_soft_blocks,
    create_soft_block,
    expired_blocks,
    filter_blocks,
    is_active,
)


@pytest.fixture
def blocked_bench(make_resource):
    return [
        make_resource(id="a", employee_id="EMP-A", name="Asha", designation="Engineer", soft_blocks=[
            SoftBlock(id="s1", end_date="2025-04-01"),
            SoftBlock(id="s2", end_date="2025-02-01"),
        ]),
        make_resource(id="b", name="Ravi", soft_blocks=[
            SoftBlock(id="s3", resource_id="R-B", blocked_until="2025-03-11"),
            SoftBlock(id="s4"),
        ]),
        make_resource(id="c", soft_blocks=[]),
    ]


class FakeClient:

    def __init__(self):
        self.calls = []

    def soft_block_resource(self, resource_id, account_id, blocked_until):
        self.calls.append((resource_id, account_id, blocked_until))
        return {"status": "ok"}


class TestCollect:

    def test_flattens_with_resource_details(self, blocked_bench):
        entries = collect_soft_blocks(blocked_bench)
        assert [e.block.id for e in entries] == ["s1", "s2", "s3", "s4"]
        assert entries[0].resource_id == "EMP-A"
        assert entries[0].resource_name == "Asha"
        assert entries[0].resource_designation == "Engineer"
        assert entries[2].resource_id == "R-B"


class TestActivity:

    def test_is_active(self, blocked_bench, now):
        entries = collect_soft_blocks(blocked_bench)
        assert [is_active(e, now) for e in entries] == [True, False, True, None]

    def test_partitions(self, blocked_bench, now):
        entries = collect_soft_blocks(blocked_bench)
        assert [e.block.id for e in active_blocks(entries, now)] == ["s1", "s3"]
        assert [e.block.id for e in expired_blocks(entries, now)] == ["s2"]

    def test_block_ending_now_is_expired(self, make_resource, now):
        resource = make_resource(soft_blocks=[SoftBlock(id="edge", end_date="2025-03-10T12:00:00Z")])
        [entry] = collect_soft_blocks([resource])
        assert is_active(entry, now) is False
        assert [e.block.id for e in expired_blocks([entry], now)] == ["edge"]
        assert active_blocks([entry], now) == []

    def test_filter(self, blocked_bench, now):
        entries = collect_soft_blocks(blocked_bench)
        assert len(filter_blocks(entries, None, now)) == 4
        assert [e.block.id for e in filter_blocks(entries, True, now)] == ["s1", "s3"]
        assert [e.block.id for e in filter_blocks(entries, False, now)] == ["s2"]


class TestCreateSoftBlock:

    def test_submits_valid_request(self):
        client = FakeClient()
        assert create_soft_block(client, "101", "7", "2025-06-30") == {"status": "ok"}
        assert client.calls == [("101", "7", "2025-06-30")]

    def test_rejects_invalid_request(self):
        client = FakeClient()
        with pytest.raises(ValueError, match="Account is required; Blocked-until date is required"):
            create_soft_block(client, "101", "", "")
        assert client.calls == []
