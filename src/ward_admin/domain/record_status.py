"""Status enums for admission and consultation records."""

from __future__ import annotations

from enum import StrEnum


class AdmissionStatus(StrEnum):
    """Lifecycle statuses of one admission episode."""

    ACTIVE = "Active"
    DISCHARGED = "Discharged"


class ConsultationStatus(StrEnum):
    """Lifecycle statuses of one consultation request."""

    ACTIVE = "Active"
    COMPLETED = "Completed"
