"""Initial schema for patients, consultations, clinic appointments, and daily reports."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa

from alembic import op

sqlite_bigint = sa.BigInteger().with_variant(sa.Integer(), "sqlite")

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp_column(name: str) -> sa.Column[datetime]:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "patients",
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
        _timestamp_column("admission_date"),
        sa.Column("discharge_date", sa.Date(), nullable=True),
        sa.Column("discharge_time", sa.Time(), nullable=True),
        sa.Column("discharge_note", sa.Text(), nullable=True),
        _timestamp_column("updated_at"),
    )
    op.create_index("ix_patients_mrn", "patients", ["mrn"], unique=False)
    op.create_index(
        "ux_patients_mrn_active",
        "patients",
        ["mrn"],
        unique=True,
        sqlite_where=sa.text("patient_status = 'Active'"),
        postgresql_where=sa.text("patient_status = 'Active'"),
    )
    op.create_index(
        "ix_patients_specialty_status",
        "patients",
        ["specialty", "patient_status"],
        unique=False,
    )
    op.create_index("ix_patients_updated_at", "patients", ["updated_at"], unique=False)
    op.create_index("ix_patients_admission_date", "patients", ["admission_date"], unique=False)

    op.create_table(
        "consultations",
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
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
    )
    op.create_index("ix_consultations_mrn", "consultations", ["mrn"], unique=False)
    op.create_index(
        "ux_consultations_mrn_active",
        "consultations",
        ["mrn"],
        unique=True,
        sqlite_where=sa.text("status = 'Active'"),
        postgresql_where=sa.text("status = 'Active'"),
    )
    op.create_index(
        "ix_consultations_specialty_status",
        "consultations",
        ["consultation_specialty", "status"],
        unique=False,
    )
    op.create_index(
        "ix_consultations_updated_at",
        "consultations",
        ["updated_at"],
        unique=False,
    )
    op.create_index(
        "ix_consultations_created_at",
        "consultations",
        ["created_at"],
        unique=False,
    )

    op.create_table(
        "clinic_appointments",
        sa.Column("appointment_id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("patient_name", sa.Text(), nullable=False),
        sa.Column("patient_medical_number", sa.Text(), nullable=False),
        sa.Column("clinic_specialty", sa.Text(), nullable=False),
        sa.Column("appointment_type", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _timestamp_column("created_at"),
        sa.CheckConstraint(
            "appointment_type IN ('Urgent', 'Regular')",
            name="ck_clinic_appointments_type",
        ),
    )
    op.create_index(
        "ix_clinic_appointments_created_at",
        "clinic_appointments",
        ["created_at"],
        unique=False,
    )

    op.create_table(
        "daily_reports",
        sa.Column("report_id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("patient_mrn", sa.Text(), nullable=False),
        sa.Column("report_date", sa.Date(), nullable=False),
        sa.Column("report_content", sa.Text(), nullable=False),
        _timestamp_column("created_at"),
    )
    op.create_index(
        "ix_daily_reports_report_date",
        "daily_reports",
        ["report_date"],
        unique=False,
    )
    op.create_index(
        "ix_daily_reports_patient_mrn",
        "daily_reports",
        ["patient_mrn"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_daily_reports_patient_mrn", table_name="daily_reports")
    op.drop_index("ix_daily_reports_report_date", table_name="daily_reports")
    op.drop_table("daily_reports")

    op.drop_index("ix_clinic_appointments_created_at", table_name="clinic_appointments")
    op.drop_table("clinic_appointments")

    op.drop_index("ix_consultations_created_at", table_name="consultations")
    op.drop_index("ix_consultations_updated_at", table_name="consultations")
    op.drop_index("ix_consultations_specialty_status", table_name="consultations")
    op.drop_index("ux_consultations_mrn_active", table_name="consultations")
    op.drop_index("ix_consultations_mrn", table_name="consultations")
    op.drop_table("consultations")

    op.drop_index("ix_patients_admission_date", table_name="patients")
    op.drop_index("ix_patients_updated_at", table_name="patients")
    op.drop_index("ix_patients_specialty_status", table_name="patients")
    op.drop_index("ux_patients_mrn_active", table_name="patients")
    op.drop_index("ix_patients_mrn", table_name="patients")
    op.drop_table("patients")
