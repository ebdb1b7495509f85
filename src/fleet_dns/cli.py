"""Command-line entry point for fleet-dns."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import AppConfig, load_config
from .controller import Reconciler, build_reconciler, configure_logging
from .exporter import result_to_json, result_to_yaml, write_result
from .hostnames import classify
from .models import FleetDnsError
from .planner import is_ignored
from .zones import ZoneIndex


def _build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser."""
    parser = argparse.ArgumentParser(description="Keep Route 53 address records in line with tagged EC2 instances.")
    parser.add_argument("--log-level", help="Override log level (default from LOG_LEVEL).")
    parser.add_argument("--config", help="Path to the override file (default from FLEET_DNS_CONFIG).")

    subparsers = parser.add_subparsers(dest="command", required=True)
    sync_parser = subparsers.add_parser("sync", help="Reconcile records, applying changes unless DRY_RUN is set.")
    sync_parser.add_argument("--dry-run", action="store_true", help="Report changes without applying them.")

    plan_parser = subparsers.add_parser("plan", help="Report the changes a sync would make.")
    plan_parser.add_argument("--output", help="Optional path to write the planned changes.")
    plan_parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Serialization format for --output.",
    )

    resolve_parser = subparsers.add_parser("resolve", help="Show the zone and cluster a hostname maps to.")
    resolve_parser.add_argument("hostname", help="Hostname to resolve.")

    return parser


def _run_sync(reconciler: Reconciler, config: AppConfig, args: argparse.Namespace) -> None:
    """Execute the sync command."""
    reconciler.run(dry_run=config.dry_run or args.dry_run)


def _run_plan(reconciler: Reconciler, args: argparse.Namespace) -> None:
    """Execute the plan command."""
    result = reconciler.run(dry_run=True)
    if args.output:
        content = result_to_json(result) if args.format == "json" else result_to_yaml(result)
        write_result(Path(args.output), content)
        print(f"Wrote planned changes to {args.output}")


def _run_resolve(reconciler: Reconciler, args: argparse.Namespace) -> None:
    """Execute the resolve command."""
    zone_index = ZoneIndex(reconciler.dns.list_zones())
    zone = zone_index.resolve(args.hostname)
    cluster_key = classify(args.hostname).cluster_key
    if zone is None:
        print(f"{args.hostname}: no hosted zone")
    else:
        ignored = is_ignored(zone, reconciler.config.ignore_zones)
        print(f"{args.hostname}: zone {zone.domain} ({zone.id}){' [ignored]' if ignored else ''}")
    print(f"cluster: {cluster_key or '-'}")


def main() -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()
    try:
        config = load_config(args.config)
        configure_logging(args.log_level or config.log_level)
        reconciler = build_reconciler(config)
        if args.command == "sync":
            _run_sync(reconciler, config, args)
        elif args.command == "plan":
            _run_plan(reconciler, args)
        elif args.command == "resolve":
            _run_resolve(reconciler, args)
        else:  # pragma: no cover - argparse ensures we never reach here
            parser.error(f"Unsupported command {args.command}")
    except FleetDnsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as exc:  # noqa: BLE001
        print(f"Unexpected error: {exc}", file=sys.stderr)
        sys.exit(3)


if __name__ == "__main__":
    main()
