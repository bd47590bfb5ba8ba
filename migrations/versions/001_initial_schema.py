"""Initial schema: doctors, patients, appointment_statuses, appointments.

Revision ID: 001_initial
Revises:
Create Date: 2025-07-10

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUS_NAMES = ["Confirmed", "Cancelled", "Postponed", "Completed", "Missed"]


def upgrade() -> None:
    lifecycle = sa.Enum("ACTIVE", "DELETED", name="lifecycle")
    for table in ("doctors", "patients"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("full_name", sa.String(), nullable=False),
            sa.Column("lifecycle", lifecycle, nullable=False, server_default="ACTIVE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f(f"ix_{table}_lifecycle"), table, ["lifecycle"], unique=False)

    statuses = op.create_table(
        "appointment_statuses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_appointment_statuses_name"), "appointment_statuses", ["name"], unique=True)
    op.bulk_insert(statuses, [{"name": name} for name in STATUS_NAMES])

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(), nullable=False),
        sa.Column("status_id", sa.Integer(), nullable=False),
        sa.Column("is_confirmed", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["doctor_id"], ["doctors.id"]),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"]),
        sa.ForeignKeyConstraint(["status_id"], ["appointment_statuses.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_appointments_doctor_id"), "appointments", ["doctor_id"], unique=False)
    op.create_index(op.f("ix_appointments_patient_id"), "appointments", ["patient_id"], unique=False)
    op.create_index(op.f("ix_appointments_scheduled_at"), "appointments", ["scheduled_at"], unique=False)
    op.create_index(
        "uq_appointments_doctor_slot_confirmed",
        "appointments",
        ["doctor_id", "scheduled_at"],
        unique=True,
        postgresql_where=sa.text("is_confirmed"),
        sqlite_where=sa.text("is_confirmed"),
    )


def downgrade() -> None:
    op.drop_index("uq_appointments_doctor_slot_confirmed", table_name="appointments")
    op.drop_index(op.f("ix_appointments_scheduled_at"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_patient_id"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_doctor_id"), table_name="appointments")
    op.drop_table("appointments")
    op.drop_index(op.f("ix_appointment_statuses_name"), table_name="appointment_statuses")
    op.drop_table("appointment_statuses")
    for table in ("patients", "doctors"):
        op.drop_index(op.f(f"ix_{table}_lifecycle"), table_name=table)
        op.drop_table(table)
    sa.Enum(name="lifecycle").drop(op.get_bind(), checkfirst=True)
