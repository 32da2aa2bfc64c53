"""Explicit record kind tag for merged admission/consultation listings."""

from __future__ import annotations

from enum import StrEnum


class RecordKind(StrEnum):
    """Which collection a normalized ward record was ingested from."""

    ADMISSION = "admission"
    CONSULTATION = "consultation"
