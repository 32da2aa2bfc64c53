"""Clinic appointment urgency enum."""

from __future__ import annotations

from enum import StrEnum


class AppointmentType(StrEnum):
    """Urgency tiers recorded on clinic appointments."""

    URGENT = "Urgent"
    REGULAR = "Regular"
