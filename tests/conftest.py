"""Shared fakes for fleet-dns tests."""

from __future__ import annotations

from typing import Dict, List, Sequence

import pytest

from fleet_dns.config import AppConfig
from fleet_dns.models import (
    CurrentRecord,
    InventoryInstance,
    MutationApplyError,
    RecordFetchError,
    RecordMutation,
    Zone,
    ensure_absolute,
)


class FakeDnsProvider:
    """In-memory zone service that records every call."""

    def __init__(self, zones: List[Zone], records: Dict[str, List[CurrentRecord]] | None = None):
        self.zones = zones
        self.records: Dict[str, Dict[str, CurrentRecord]] = {zone.id: {} for zone in zones}
        for zone_id, zone_records in (records or {}).items():
            for record in zone_records:
                self.records.setdefault(zone_id, {})[record.canonical_name()] = record
        self.fetch_calls: List[str] = []
        self.apply_calls: List[tuple[str, list[RecordMutation]]] = []
        self.failing_fetch: set[str] = set()
        self.failing_apply: set[str] = set()

    def list_zones(self) -> list[Zone]:
        return list(self.zones)

    def list_address_records(self, zone_id: str) -> list[CurrentRecord]:
        self.fetch_calls.append(zone_id)
        if zone_id in self.failing_fetch:
            raise RecordFetchError(f"cannot list {zone_id}")
        return list(self.records.get(zone_id, {}).values())

    def apply_changes(self, zone_id: str, mutations: Sequence[RecordMutation]) -> None:
        if zone_id in self.failing_apply:
            raise MutationApplyError(f"cannot apply to {zone_id}")
        self.apply_calls.append((zone_id, list(mutations)))
        zone_records = self.records.setdefault(zone_id, {})
        for mutation in mutations:
            zone_records[mutation.canonical_name()] = CurrentRecord(
                name=ensure_absolute(mutation.name),
                type=mutation.type,
                ttl=mutation.ttl,
                values=frozenset(mutation.values),
            )


class FakeInventory:
    """Static instance inventory."""

    def __init__(self, instances: List[InventoryInstance]):
        self.instances = instances

    def list_instances(self) -> list[InventoryInstance]:
        return list(self.instances)


def make_instance(
    instance_id: str,
    hostnames: str | None,
    private: str | None = "10.0.0.1",
    public: str | None = None,
) -> InventoryInstance:
    """Build an inventory instance with an optional hostnames tag."""
    tags = {"Name": instance_id}
    if hostnames is not None:
        tags["hostnames"] = hostnames
    return InventoryInstance(id=instance_id, tags=tags, private_address=private, public_address=public)


def make_config(**overrides) -> AppConfig:
    """Return a configuration with test defaults."""
    values = {
        "aws_region": "ap-southeast-1",
        "dns_ttl": 300,
        "ignore_zones": frozenset(),
        "hostnames_tag": "hostnames",
        "dry_run": False,
        "log_level": "INFO",
    }
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture
def zones() -> list[Zone]:
    return [
        Zone(id="ZCOM", domain="example.com"),
        Zone(id="ZINT", domain="internal.example.com"),
        Zone(id="ZORG", domain="example.org"),
    ]
