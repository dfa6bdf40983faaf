"""create contract events tables

Revision ID: 3f9a1c2d7e41
Revises:
Create Date: 2026-10-12 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f9a1c2d7e41"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "contract_events",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("contract_id", sa.String(length=36), nullable=False),
        sa.Column("line_id", sa.String(length=255), nullable=False),
        sa.Column("event_type", sa.String(length=20), nullable=False),
        sa.Column("billing_sub_type", sa.String(length=20), nullable=True),
        sa.Column("label", sa.String(length=255), nullable=True),
        sa.Column("sequence_number", sa.Integer(), nullable=False),
        sa.Column("total_occurrences", sa.Integer(), nullable=False),
        sa.Column("original_date", sa.Date(), nullable=False),
        sa.Column("override_date", sa.Date(), nullable=True),
        sa.Column("amount", sa.Numeric(precision=12, scale=4), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("assigned_to", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_overdue", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_contract_events_contract_id"), "contract_events", ["contract_id"], unique=False
    )
    op.create_index(
        op.f("ix_contract_events_event_type"), "contract_events", ["event_type"], unique=False
    )
    op.create_index(op.f("ix_contract_events_status"), "contract_events", ["status"], unique=False)
    op.create_index(
        op.f("ix_contract_events_assigned_to"), "contract_events", ["assigned_to"], unique=False
    )

    op.create_table(
        "event_status_definitions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("event_type", sa.String(length=20), nullable=False),
        sa.Column("code", sa.String(length=30), nullable=False),
        sa.Column("label", sa.String(length=100), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "event_type", "code", name="uq_event_status_definitions_type_code"
        ),
    )
    op.create_index(
        op.f("ix_event_status_definitions_event_type"),
        "event_status_definitions",
        ["event_type"],
        unique=False,
    )

    op.create_table(
        "event_status_transitions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("event_type", sa.String(length=20), nullable=False),
        sa.Column("from_status", sa.String(length=30), nullable=False),
        sa.Column("to_status", sa.String(length=30), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "event_type",
            "from_status",
            "to_status",
            name="uq_event_status_transitions_edge",
        ),
    )
    op.create_index(
        op.f("ix_event_status_transitions_event_type"),
        "event_status_transitions",
        ["event_type"],
        unique=False,
    )

    op.create_table(
        "service_tickets",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("contract_id", sa.String(length=36), nullable=False),
        sa.Column("ticket_number", sa.String(length=50), nullable=False),
        sa.Column("assigned_to_name", sa.String(length=255), nullable=True),
        sa.Column("evidence_count", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("event_count", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_service_tickets_contract_id"), "service_tickets", ["contract_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_service_tickets_contract_id"), table_name="service_tickets")
    op.drop_table("service_tickets")
    op.drop_index(
        op.f("ix_event_status_transitions_event_type"), table_name="event_status_transitions"
    )
    op.drop_table("event_status_transitions")
    op.drop_index(
        op.f("ix_event_status_definitions_event_type"), table_name="event_status_definitions"
    )
    op.drop_table("event_status_definitions")
    op.drop_index(op.f("ix_contract_events_assigned_to"), table_name="contract_events")
    op.drop_index(op.f("ix_contract_events_status"), table_name="contract_events")
    op.drop_index(op.f("ix_contract_events_event_type"), table_name="contract_events")
    op.drop_index(op.f("ix_contract_events_contract_id"), table_name="contract_events")
    op.drop_table("contract_events")
