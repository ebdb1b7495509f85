"""Build the desired record sets for a fleet."""

from __future__ import annotations

import logging
from typing import AbstractSet, Iterable

from .hostnames import classify
from .models import ClusterGroup, DesiredState, InstanceDescriptor, RecordMutation, Zone
from .zones import ZoneIndex

LOG = logging.getLogger("fleet_dns")

PRIVATE_PREFIX = "private."


def is_ignored(zone: Zone, ignore_zones: AbstractSet[str]) -> bool:
    """Return True when the zone is excluded by domain or id."""
    return zone.domain in ignore_zones or zone.id in ignore_zones


def _add_to_cluster(
    clusters: dict[str, ClusterGroup],
    key: str,
    zone: Zone,
    descriptor: InstanceDescriptor,
) -> None:
    """Record an instance's addresses under its cluster key."""
    group = clusters.get(key)
    if group is None:
        group = clusters[key] = ClusterGroup(key=key, zone_id=zone.id)
    group.private_addresses.append(descriptor.private_address)
    if descriptor.public_address:
        group.public_addresses.append(descriptor.public_address)


def _cluster_mutations(group: ClusterGroup, ttl: int) -> list[RecordMutation]:
    """Return the record sets published for a cluster group."""
    mutations: list[RecordMutation] = []
    if group.public_addresses:
        mutations.append(RecordMutation(name=group.key, ttl=ttl, values=tuple(group.public_addresses)))
    mutations.append(
        RecordMutation(name=f"{PRIVATE_PREFIX}{group.key}", ttl=ttl, values=tuple(group.private_addresses))
    )
    return mutations


def build_desired_state(
    descriptors: Iterable[InstanceDescriptor],
    zone_index: ZoneIndex,
    ttl: int,
    ignore_zones: AbstractSet[str] = frozenset(),
) -> DesiredState:
    """Aggregate individual and cluster record sets per zone.

    Instances and their hostnames are processed in input order. Cluster
    record sets are appended after every individual record set, in the
    order their keys were first seen.
    """
    state = DesiredState()
    for descriptor in descriptors:
        for hostname in descriptor.hostnames:
            zone = zone_index.resolve(hostname)
            if zone is None:
                LOG.debug("No hosted zone for %s; skipping.", hostname)
                continue
            if is_ignored(zone, ignore_zones):
                LOG.debug("Zone %s (%s) is ignored; skipping %s.", zone.domain, zone.id, hostname)
                continue
            changes = state.changes.setdefault(zone.id, [])
            if descriptor.public_address:
                changes.append(RecordMutation(name=hostname, ttl=ttl, values=(descriptor.public_address,)))
            changes.append(
                RecordMutation(name=f"{PRIVATE_PREFIX}{hostname}", ttl=ttl, values=(descriptor.private_address,))
            )
            cluster_key = classify(hostname).cluster_key
            if cluster_key is not None:
                _add_to_cluster(state.clusters, cluster_key, zone, descriptor)

    for group in state.clusters.values():
        state.changes.setdefault(group.zone_id, []).extend(_cluster_mutations(group, ttl))
    return state
