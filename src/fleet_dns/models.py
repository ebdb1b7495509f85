"""Core data models used by fleet-dns."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping

UPSERT = "UPSERT"
ADDRESS_TYPE = "A"


def ensure_absolute(name: str) -> str:
    """Return a fully qualified name with a trailing dot."""
    stripped = name.strip()
    if not stripped:
        return "."
    return stripped if stripped.endswith(".") else f"{stripped}."


def canonical_name(name: str) -> str:
    """Return the canonical form used to compare record owner names."""
    return ensure_absolute(name).lower()


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicates while keeping first-seen order."""
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True)
class Zone:
    """A hosted zone, identified by id and its domain suffix (no trailing dot)."""

    id: str
    domain: str


@dataclass(frozen=True)
class InventoryInstance:
    """Raw instance shape returned by the instance lister."""

    id: str
    tags: Mapping[str, str]
    private_address: str | None
    public_address: str | None = None


@dataclass(frozen=True)
class InstanceDescriptor:
    """Normalised instance with its tagged hostnames."""

    id: str
    hostnames: tuple[str, ...]
    private_address: str
    public_address: str | None = None


@dataclass(frozen=True)
class HostnameClass:
    """Classification of a single hostname."""

    hostname: str
    cluster_key: str | None = None
    individual: bool = True


@dataclass
class ClusterGroup:
    """Addresses of every instance sharing a cluster key."""

    key: str
    zone_id: str
    private_addresses: list[str] = field(default_factory=list)
    public_addresses: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RecordMutation:
    """A single UPSERT of an address record set."""

    name: str
    ttl: int
    values: tuple[str, ...]
    type: str = ADDRESS_TYPE
    action: str = UPSERT

    def __post_init__(self) -> None:
        values = _unique(value for value in self.values if value)
        if not values:
            raise ValueError(f"Record mutation for {self.name} has no values.")
        object.__setattr__(self, "values", values)

    def canonical_name(self) -> str:
        """Return the canonical fully qualified owner name."""
        return canonical_name(self.name)

    def value_key(self) -> tuple[str, ...]:
        """Return the order-independent value set used for comparisons."""
        return tuple(sorted(set(self.values)))


@dataclass(frozen=True)
class CurrentRecord:
    """An address record set as currently published in a zone."""

    name: str
    type: str
    ttl: int | None
    values: frozenset[str]

    def canonical_name(self) -> str:
        """Return the canonical fully qualified owner name."""
        return canonical_name(self.name)

    def value_key(self) -> tuple[str, ...]:
        """Return the order-independent value set used for comparisons."""
        return tuple(sorted(self.values))


ZoneChangeSet = Dict[str, List[RecordMutation]]


@dataclass
class DesiredState:
    """Desired mutations per zone together with the cluster groups behind them."""

    changes: ZoneChangeSet = field(default_factory=dict)
    clusters: dict[str, ClusterGroup] = field(default_factory=dict)

    def total(self) -> int:
        """Return the number of desired mutations across all zones."""
        return sum(len(mutations) for mutations in self.changes.values())


@dataclass(frozen=True)
class ReportRow:
    """One line of the change summary."""

    zone: str
    name: str
    type: str
    ttl: int
    values: tuple[str, ...]


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation run."""

    dry_run: bool
    changes: ZoneChangeSet = field(default_factory=dict)
    applied: list[str] = field(default_factory=list)

    def has_changes(self) -> bool:
        """Return True when at least one mutation survived the diff."""
        return any(self.changes.values())

    def total(self) -> int:
        """Return the number of surviving mutations."""
        return sum(len(mutations) for mutations in self.changes.values())

    def rows(self) -> Iterator[ReportRow]:
        """Yield a report row per surviving mutation, zone by zone."""
        for zone_id, mutations in self.changes.items():
            for mutation in mutations:
                yield ReportRow(
                    zone=zone_id,
                    name=mutation.name,
                    type=mutation.type,
                    ttl=mutation.ttl,
                    values=mutation.values,
                )


class FleetDnsError(Exception):
    """Base exception for fleet-dns."""


class ConfigLoadError(FleetDnsError):
    """Raised when the configuration override file cannot be used."""


class InventoryFetchError(FleetDnsError):
    """Raised when listing zones or instances fails."""


class RecordFetchError(FleetDnsError):
    """Raised when listing the current records of a zone fails."""


class MutationApplyError(FleetDnsError):
    """Raised when a change batch is rejected by the zone service."""


class ReconcileAborted(FleetDnsError):
    """Raised when the caller asks the run to stop between zones."""
