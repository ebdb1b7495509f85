"""AWS Lambda entry point."""

from __future__ import annotations

import logging
from typing import Any

from .config import load_config
from .controller import build_reconciler, configure_logging

LOG = logging.getLogger("fleet_dns")

# Stop before the next zone when less time than this remains.
ABORT_MARGIN_MS = 10_000


def handler(event: dict[str, Any] | None, context: Any) -> dict[str, Any]:
    """Run one reconciliation and return a short summary."""
    config = load_config()
    configure_logging(config.log_level)
    reconciler = build_reconciler(config)

    def should_abort() -> bool:
        remaining = getattr(context, "get_remaining_time_in_millis", None)
        return remaining is not None and remaining() < ABORT_MARGIN_MS

    result = reconciler.run(should_abort=should_abort)
    LOG.info("Reconciliation finished with %s changed record sets", result.total())
    return {
        "dryRun": result.dry_run,
        "changes": result.total(),
        "zones": sorted(result.changes),
        "applied": list(result.applied),
    }
