"""Diff utilities for address record sets."""

from __future__ import annotations

import logging
from typing import Dict, Iterable

from .models import CurrentRecord, RecordMutation

LOG = logging.getLogger("fleet_dns")


def _build_name_map(current: Iterable[CurrentRecord]) -> Dict[str, CurrentRecord]:
    """Index current records by canonical owner name; the first one wins."""
    index: Dict[str, CurrentRecord] = {}
    for record in current:
        index.setdefault(record.canonical_name(), record)
    return index


def diff_mutations(
    zone_id: str,
    desired: Iterable[RecordMutation],
    current: Iterable[CurrentRecord],
) -> list[RecordMutation]:
    """Return the desired mutations that would change the published records."""
    current_map = _build_name_map(current)
    changed: list[RecordMutation] = []
    unchanged = 0
    for mutation in desired:
        record = current_map.get(mutation.canonical_name())
        if record is None:
            changed.append(mutation)
        elif record.value_key() != mutation.value_key():
            changed.append(mutation)
        else:
            unchanged += 1
    LOG.debug("Zone %s: %s changed, %s unchanged.", zone_id, len(changed), unchanged)
    return changed
