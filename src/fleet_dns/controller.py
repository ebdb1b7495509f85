"""High-level orchestration for fleet-dns."""

from __future__ import annotations

import logging
import sys
from typing import Callable, TextIO

from .aws import DnsProvider, InstanceInventory, build_collaborators
from .config import AppConfig
from .diffing import diff_mutations
from .hostnames import extract_descriptors
from .models import ReconcileAborted, ReconcileResult
from .planner import build_desired_state
from .renderer import render_summary
from .zones import ZoneIndex

LOG = logging.getLogger("fleet_dns")


class Reconciler:
    """Converges hosted zone records onto the tagged fleet."""

    def __init__(
        self,
        config: AppConfig,
        dns: DnsProvider,
        inventory: InstanceInventory,
        output: TextIO | None = None,
    ):
        """Store configuration and collaborators for subsequent runs."""
        self.config = config
        self.dns = dns
        self.inventory = inventory
        self.output = output

    def run(
        self,
        dry_run: bool | None = None,
        should_abort: Callable[[], bool] | None = None,
    ) -> ReconcileResult:
        """Plan, diff and (unless dry run) apply record changes zone by zone.

        Zones are handled one at a time in the order their first mutation was
        planned. A failure while fetching or applying a zone propagates and
        leaves later zones untouched; zones already applied are not rolled back.
        """
        if dry_run is None:
            dry_run = self.config.dry_run

        LOG.info("Querying hosted zones")
        zone_index = ZoneIndex(self.dns.list_zones())
        LOG.info("Found %s hosted zones", len(zone_index))

        LOG.info("Querying running instances tagged %r", self.config.hostnames_tag)
        descriptors = extract_descriptors(self.inventory.list_instances(), self.config.hostnames_tag)
        LOG.info("Found %s instances with hostnames", len(descriptors))

        desired = build_desired_state(descriptors, zone_index, self.config.dns_ttl, self.config.ignore_zones)
        LOG.info(
            "Planned %s record sets across %s zones (%s clusters)",
            desired.total(),
            len(desired.changes),
            len(desired.clusters),
        )

        result = ReconcileResult(dry_run=dry_run)
        for zone_id, mutations in desired.changes.items():
            if not mutations:
                continue
            if should_abort is not None and should_abort():
                raise ReconcileAborted(f"Run aborted before zone {zone_id}.")
            current = self.dns.list_address_records(zone_id)
            changed = diff_mutations(zone_id, mutations, current)
            zone = zone_index.get(zone_id)
            LOG.info(
                "Zone %s (%s): %s of %s record sets need changes",
                zone.domain if zone else "?",
                zone_id,
                len(changed),
                len(mutations),
            )
            if not changed:
                continue
            result.changes[zone_id] = changed
            if dry_run:
                LOG.info("Dry run; not applying changes to %s", zone_id)
                continue
            self.dns.apply_changes(zone_id, changed)
            result.applied.append(zone_id)
            LOG.info("%s records modified in %s", len(changed), zone_id)

        summary = render_summary(result)
        if summary:
            (self.output or sys.stdout).write(summary)
        else:
            LOG.info("No changes detected.")
        return result


def build_reconciler(config: AppConfig, output: TextIO | None = None) -> Reconciler:
    """Create a reconciler wired to Route 53 and EC2."""
    dns, inventory = build_collaborators(config.aws_region, config.hostnames_tag)
    return Reconciler(config, dns, inventory, output=output)


def configure_logging(level: str) -> None:
    """Configure logging output.

    ``basicConfig`` is a no-op when the root logger already has handlers (as
    under the Lambda runtime), so the package logger level is set as well.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    LOG.setLevel(numeric_level)
