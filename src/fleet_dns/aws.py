"""Route 53 and EC2 collaborators built on boto3."""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .models import (
    ADDRESS_TYPE,
    CurrentRecord,
    InventoryFetchError,
    InventoryInstance,
    MutationApplyError,
    RecordFetchError,
    RecordMutation,
    Zone,
)
from .zones import zone_from_name

LOG = logging.getLogger("fleet_dns")

CHANGE_COMMENT = "fleet-dns reconciliation"


class DnsProvider(Protocol):
    """Zone, record listing and record mutation operations."""

    def list_zones(self) -> list[Zone]:
        ...

    def list_address_records(self, zone_id: str) -> list[CurrentRecord]:
        ...

    def apply_changes(self, zone_id: str, mutations: Sequence[RecordMutation]) -> None:
        ...


class InstanceInventory(Protocol):
    """Source of running, tagged instances."""

    def list_instances(self) -> list[InventoryInstance]:
        ...


def _to_change(mutation: RecordMutation) -> dict[str, Any]:
    """Convert a mutation into a Route 53 change entry."""
    return {
        "Action": mutation.action,
        "ResourceRecordSet": {
            "Name": mutation.name,
            "Type": mutation.type,
            "TTL": mutation.ttl,
            "ResourceRecords": [{"Value": value} for value in mutation.values],
        },
    }


def _to_current_record(record_set: dict[str, Any]) -> CurrentRecord:
    """Convert a Route 53 record set into a current record."""
    return CurrentRecord(
        name=record_set["Name"],
        type=record_set["Type"],
        ttl=record_set.get("TTL"),
        values=frozenset(item["Value"] for item in record_set.get("ResourceRecords", [])),
    )


def _to_instance(instance: dict[str, Any]) -> InventoryInstance:
    """Convert an EC2 instance description into an inventory instance."""
    tags = {tag["Key"]: tag["Value"] for tag in instance.get("Tags", [])}
    return InventoryInstance(
        id=instance["InstanceId"],
        tags=tags,
        private_address=instance.get("PrivateIpAddress"),
        public_address=instance.get("PublicIpAddress"),
    )


class Route53Gateway:
    """Hosted zone access through a boto3 Route 53 client."""

    def __init__(self, client: Any):
        self.client = client

    def list_zones(self) -> list[Zone]:
        """Return every hosted zone in the account."""
        zones: list[Zone] = []
        try:
            for page in self.client.get_paginator("list_hosted_zones").paginate():
                for hosted_zone in page["HostedZones"]:
                    zones.append(zone_from_name(hosted_zone["Id"], hosted_zone["Name"]))
        except (BotoCoreError, ClientError) as exc:
            raise InventoryFetchError(f"Failed to list hosted zones: {exc}") from exc
        return zones

    def list_address_records(self, zone_id: str) -> list[CurrentRecord]:
        """Return the A record sets currently published in a zone."""
        records: list[CurrentRecord] = []
        try:
            paginator = self.client.get_paginator("list_resource_record_sets")
            for page in paginator.paginate(HostedZoneId=zone_id):
                for record_set in page["ResourceRecordSets"]:
                    if record_set["Type"] == ADDRESS_TYPE:
                        records.append(_to_current_record(record_set))
        except (BotoCoreError, ClientError) as exc:
            raise RecordFetchError(f"Failed to list records for zone {zone_id}: {exc}") from exc
        return records

    def apply_changes(self, zone_id: str, mutations: Sequence[RecordMutation]) -> None:
        """Submit all mutations for a zone as a single change batch."""
        batch = {
            "Comment": CHANGE_COMMENT,
            "Changes": [_to_change(mutation) for mutation in mutations],
        }
        try:
            response = self.client.change_resource_record_sets(HostedZoneId=zone_id, ChangeBatch=batch)
        except (BotoCoreError, ClientError) as exc:
            raise MutationApplyError(f"Change batch for zone {zone_id} failed: {exc}") from exc
        LOG.info("Submitted change %s for zone %s", response["ChangeInfo"]["Id"], zone_id)


class Ec2Inventory:
    """Running instances carrying the hostnames tag, through a boto3 EC2 client."""

    def __init__(self, client: Any, tag_key: str):
        self.client = client
        self.tag_key = tag_key

    def filters(self) -> list[dict[str, Any]]:
        """Return the describe_instances filters."""
        return [
            {"Name": "tag-key", "Values": [self.tag_key]},
            {"Name": "instance-state-name", "Values": ["running"]},
        ]

    def list_instances(self) -> list[InventoryInstance]:
        """Return running instances that carry the hostnames tag."""
        instances: list[InventoryInstance] = []
        try:
            paginator = self.client.get_paginator("describe_instances")
            for page in paginator.paginate(Filters=self.filters()):
                for reservation in page["Reservations"]:
                    for instance in reservation.get("Instances", []):
                        instances.append(_to_instance(instance))
        except (BotoCoreError, ClientError) as exc:
            raise InventoryFetchError(f"Failed to describe instances: {exc}") from exc
        return instances


def build_collaborators(region: str, tag_key: str) -> tuple[Route53Gateway, Ec2Inventory]:
    """Return the boto3-backed zone service and inventory for a region."""
    session = boto3.Session(region_name=region)
    return Route53Gateway(session.client("route53")), Ec2Inventory(session.client("ec2"), tag_key)
