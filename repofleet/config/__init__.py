"""Configuration — environment-driven settings and validation."""

from .settings import ConfigStatus, FleetSettings, check_settings

__all__ = ["ConfigStatus", "FleetSettings", "check_settings"]
