"""Enumerated ward specialties used as the statistics iteration domain."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class Specialty(StrEnum):
    """Clinical specialties that admissions and consultations are filed under."""

    GENERAL_INTERNAL_MEDICINE = "General Internal Medicine"
    RESPIRATORY_MEDICINE = "Respiratory Medicine"
    INFECTIOUS_DISEASES = "Infectious Diseases"
    NEUROLOGY = "Neurology"
    GASTROENTEROLOGY = "Gastroenterology"
    RHEUMATOLOGY = "Rheumatology"
    HEMATOLOGY = "Hematology"
    THROMBOSIS_MEDICINE = "Thrombosis Medicine"
    IMMUNOLOGY_AND_ALLERGY = "Immunology & Allergy"
    SAFETY_ADMISSION = "Safety Admission"
    MEDICAL_CONSULTATIONS = "Medical Consultations"


# Canonical display and aggregation order.
SPECIALTIES: Final[tuple[Specialty, ...]] = tuple(Specialty)
