"""Configuration for the scheduler and system context."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SystemConfig:
    """Scheduler settings."""

    pump_name: str = "Input Manager"
    pump_description: str = "Consumes and provides user and peripheral input."
