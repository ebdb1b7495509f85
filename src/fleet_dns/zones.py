"""Hosted zone lookup by hostname suffix."""

from __future__ import annotations

from typing import Iterable

from .models import Zone


def zone_from_name(zone_id: str, name: str) -> Zone:
    """Build a zone from a service id and fully qualified name."""
    identifier = zone_id.split("/")[-1]
    domain = name[:-1] if name.endswith(".") else name
    return Zone(id=identifier, domain=domain)


class ZoneIndex:
    """Known zones for one run, resolved by longest matching suffix."""

    def __init__(self, zones: Iterable[Zone]):
        self._zones = tuple(zones)
        self._by_id = {zone.id: zone for zone in self._zones}

    def __len__(self) -> int:
        return len(self._zones)

    def get(self, zone_id: str) -> Zone | None:
        """Return the zone with the given id, if known."""
        return self._by_id.get(zone_id)

    def resolve(self, hostname: str) -> Zone | None:
        """Return the most specific zone whose domain ends ``hostname``.

        The suffix test is literal and not label aligned. When two matching
        zones have domains of equal length the later one wins.
        """
        best: Zone | None = None
        for zone in self._zones:
            if not hostname.endswith(zone.domain):
                continue
            if best is None or len(best.domain) <= len(zone.domain):
                best = zone
        return best
