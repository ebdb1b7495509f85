"""Environment-driven configuration loader."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import ConfigLoadError

LOG = logging.getLogger("fleet_dns")

DEFAULT_CONFIG_PATH = "config.yaml"


class AwsSpec(BaseModel):
    """Schema for the ``aws`` section."""

    model_config = ConfigDict(extra="forbid")

    region: str = "ap-southeast-1"


class DnsSpec(BaseModel):
    """Schema for the ``dns`` section."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    ttl: int = Field(default=300, ge=0)
    ignore_zones: list[str] = Field(default_factory=list, alias="ignoreZones")
    hostnames_tag: str = Field(default="hostnames", alias="hostnamesTag", min_length=1)

    @field_validator("ignore_zones")
    @classmethod
    def _strip_root(cls, value: list[str]) -> list[str]:
        """Drop the trailing root dot so entries compare against zone domains."""
        return [entry.strip().rstrip(".") for entry in value if entry.strip()]


class SettingsSpec(BaseModel):
    """Schema for the override document."""

    model_config = ConfigDict(extra="forbid")

    aws: AwsSpec = Field(default_factory=AwsSpec)
    dns: DnsSpec = Field(default_factory=DnsSpec)


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration values."""

    aws_region: str
    dns_ttl: int
    ignore_zones: frozenset[str]
    hostnames_tag: str
    dry_run: bool
    log_level: str


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Return a boolean parsed from a string."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def merge_overrides(data: dict[str, Any] | None) -> SettingsSpec:
    """Merge an override mapping onto the defaults, section by section."""
    try:
        return SettingsSpec.model_validate(data or {})
    except ValidationError as exc:
        raise ConfigLoadError(f"Invalid configuration: {exc}") from exc


def read_overrides(path: Path) -> dict[str, Any]:
    """Read the override file; JSON documents are accepted as YAML."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"Failed to read {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:  # noqa: BLE001
        raise ConfigLoadError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigLoadError(f"{path} must contain a mapping at the top level.")
    return data


def load_settings(path: Path) -> SettingsSpec:
    """Return validated settings, falling back to defaults on any problem."""
    if not path.is_file():
        LOG.debug("No configuration file at %s; using defaults.", path)
        return SettingsSpec()
    try:
        return merge_overrides(read_overrides(path))
    except ConfigLoadError as exc:
        LOG.warning("Ignoring configuration file: %s", exc)
        return SettingsSpec()


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration values from the override file and the environment (and .env)."""
    load_dotenv()
    config_path = Path(path or os.getenv("FLEET_DNS_CONFIG", DEFAULT_CONFIG_PATH))
    settings = load_settings(config_path)
    return AppConfig(
        aws_region=settings.aws.region,
        dns_ttl=settings.dns.ttl,
        ignore_zones=frozenset(settings.dns.ignore_zones),
        hostnames_tag=settings.dns.hostnames_tag,
        dry_run=_parse_bool(os.getenv("DRY_RUN")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
