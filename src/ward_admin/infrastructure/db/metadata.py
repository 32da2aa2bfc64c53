"""SQLAlchemy metadata definitions for ward administration tables."""

from __future__ import annotations

import sqlalchemy as sa

metadata = sa.MetaData()
sqlite_bigint = sa.BigInteger().with_variant(sa.Integer(), "sqlite")

patients = sa.Table(
    "patients",
    metadata,
    sa.Column("admission_id", sqlite_bigint, primary_key=True, autoincrement=True),
    sa.Column("mrn", sa.Text(), nullable=False),
    sa.Column("patient_name", sa.Text(), nullable=False),
    sa.Column("age", sa.Integer(), nullable=True),
    sa.Column("gender", sa.Text(), nullable=True),
    sa.Column("specialty", sa.Text(), nullable=False),
    sa.Column(
        "patient_status",
        sa.Text(),
        nullable=False,
        server_default=sa.text("'Active'"),
    ),
    sa.Column("diagnosis", sa.Text(), nullable=True),
    sa.Column("assigned_doctor", sa.Text(), nullable=True),
    sa.Column(
        "admission_date",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    sa.Column("discharge_date", sa.Date(), nullable=True),
    sa.Column("discharge_time", sa.Time(), nullable=True),
    sa.Column("discharge_note", sa.Text(), nullable=True),
    sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
)

sa.Index("ix_patients_mrn", patients.c.mrn)
sa.Index(
    "ux_patients_mrn_active",
    patients.c.mrn,
    unique=True,
    sqlite_where=sa.text("patient_status = 'Active'"),
    postgresql_where=sa.text("patient_status = 'Active'"),
)
sa.Index("ix_patients_specialty_status", patients.c.specialty, patients.c.patient_status)
sa.Index("ix_patients_updated_at", patients.c.updated_at)
sa.Index("ix_patients_admission_date", patients.c.admission_date)

consultations = sa.Table(
    "consultations",
    metadata,
    sa.Column("consultation_id", sqlite_bigint, primary_key=True, autoincrement=True),
    sa.Column("mrn", sa.Text(), nullable=False),
    sa.Column("patient_name", sa.Text(), nullable=False),
    sa.Column("age", sa.Integer(), nullable=True),
    sa.Column("gender", sa.Text(), nullable=True),
    sa.Column("consultation_specialty", sa.Text(), nullable=False),
    sa.Column(
        "status",
        sa.Text(),
        nullable=False,
        server_default=sa.text("'Active'"),
    ),
    sa.Column("requesting_department", sa.Text(), nullable=True),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
)

sa.Index("ix_consultations_mrn", consultations.c.mrn)
sa.Index(
    "ux_consultations_mrn_active",
    consultations.c.mrn,
    unique=True,
    sqlite_where=sa.text("status = 'Active'"),
    postgresql_where=sa.text("status = 'Active'"),
)
sa.Index(
    "ix_consultations_specialty_status",
    consultations.c.consultation_specialty,
    consultations.c.status,
)
sa.Index("ix_consultations_updated_at", consultations.c.updated_at)
sa.Index("ix_consultations_created_at", consultations.c.created_at)

clinic_appointments = sa.Table(
    "clinic_appointments",
    metadata,
    sa.Column("appointment_id", sa.Uuid(), primary_key=True, nullable=False),
    sa.Column("patient_name", sa.Text(), nullable=False),
    sa.Column("patient_medical_number", sa.Text(), nullable=False),
    sa.Column("clinic_specialty", sa.Text(), nullable=False),
    sa.Column("appointment_type", sa.Text(), nullable=False),
    sa.Column("notes", sa.Text(), nullable=True),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    sa.CheckConstraint(
        "appointment_type IN ('Urgent', 'Regular')",
        name="ck_clinic_appointments_type",
    ),
)

sa.Index("ix_clinic_appointments_created_at", clinic_appointments.c.created_at)

daily_reports = sa.Table(
    "daily_reports",
    metadata,
    sa.Column("report_id", sa.Uuid(), primary_key=True, nullable=False),
    sa.Column("patient_mrn", sa.Text(), nullable=False),
    sa.Column("report_date", sa.Date(), nullable=False),
    sa.Column("report_content", sa.Text(), nullable=False),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
)

sa.Index("ix_daily_reports_report_date", daily_reports.c.report_date)
sa.Index("ix_daily_reports_patient_mrn", daily_reports.c.patient_mrn)
