"""Hostname extraction and classification."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from .models import HostnameClass, InstanceDescriptor, InventoryInstance

LOG = logging.getLogger("fleet_dns")

CLUSTER_PATTERN = re.compile(r"[0-9]{4}\.(?P<key>.+)")


def split_hostnames(value: str | None) -> tuple[str, ...]:
    """Split a comma separated tag value into trimmed, non-empty hostnames."""
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def parse_cluster_key(hostname: str) -> str | None:
    """Return the cluster key of an ordinal hostname such as ``0007.worker.example.com``."""
    match = CLUSTER_PATTERN.fullmatch(hostname)
    if not match:
        return None
    return match.group("key")


def classify(hostname: str) -> HostnameClass:
    """Classify a hostname into its individual record and optional cluster."""
    return HostnameClass(hostname=hostname, cluster_key=parse_cluster_key(hostname))


def extract_descriptor(instance: InventoryInstance, tag_key: str) -> InstanceDescriptor | None:
    """Normalise a raw instance; returns None when it has nothing to publish."""
    hostnames = split_hostnames(instance.tags.get(tag_key))
    if not hostnames:
        LOG.debug("Instance %s has no %s tag; skipping.", instance.id, tag_key)
        return None
    if not instance.private_address:
        LOG.warning("Instance %s has no private address; skipping.", instance.id)
        return None
    return InstanceDescriptor(
        id=instance.id,
        hostnames=hostnames,
        private_address=instance.private_address,
        public_address=instance.public_address or None,
    )


def extract_descriptors(instances: Iterable[InventoryInstance], tag_key: str) -> list[InstanceDescriptor]:
    """Return descriptors for every instance carrying hostnames, in input order."""
    descriptors: list[InstanceDescriptor] = []
    for instance in instances:
        descriptor = extract_descriptor(instance, tag_key)
        if descriptor is not None:
            descriptors.append(descriptor)
    return descriptors
