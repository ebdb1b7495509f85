"""Utilities to serialise reconciliation results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .models import ReconcileResult, RecordMutation


def _mutation_to_dict(mutation: RecordMutation) -> dict[str, Any]:
    """Convert a mutation into a serialisable dictionary."""
    return {
        "action": mutation.action,
        "name": mutation.name,
        "type": mutation.type,
        "ttl": mutation.ttl,
        "values": list(mutation.values),
    }


def result_to_dict(result: ReconcileResult) -> dict[str, Any]:
    """Create a dictionary describing the run."""
    return {
        "dry_run": result.dry_run,
        "total": result.total(),
        "applied": list(result.applied),
        "zones": {
            zone_id: [_mutation_to_dict(mutation) for mutation in mutations]
            for zone_id, mutations in result.changes.items()
        },
    }


def result_to_yaml(result: ReconcileResult) -> str:
    """Return YAML representation of a result."""
    return yaml.safe_dump(result_to_dict(result), sort_keys=False)


def result_to_json(result: ReconcileResult) -> str:
    """Return JSON representation of a result."""
    return json.dumps(result_to_dict(result), indent=2)


def write_result(path: Path, content: str) -> None:
    """Write content to the given path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
