"""Init DB

Revision ID: 3f9c2a7d1b04
Revises:
Create Date: 2024-11-02 18:42:10.114305

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9c2a7d1b04"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

competition_level = sa.Enum(
    "Regional", "National", "International", name="competition_level"
)
registration_status = sa.Enum(
    "pending", "confirmed", "cancelled", name="registration_status"
)
payment_status = sa.Enum("unpaid", "paid", "refunded", name="payment_status")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "competitions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.VARCHAR(), nullable=False),
        sa.Column("level", competition_level, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("venue", sa.VARCHAR(), nullable=False),
        sa.Column("registration_deadline", sa.Date(), nullable=False),
        sa.Column("maximum_teams", sa.Integer(), nullable=False),
        sa.Column("fees", sa.Float(), nullable=False),
        sa.Column("rules", sa.TEXT(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_competitions_registration_deadline",
        "competitions",
        ["registration_deadline"],
    )

    op.create_table(
        "regions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("region_name", sa.VARCHAR(), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("venue", sa.VARCHAR(), nullable=False),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_regions_competition_id", "regions", ["competition_id"])

    op.create_table(
        "registrations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.VARCHAR(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("region_id", sa.Integer(), nullable=True),
        sa.Column("team_code", sa.VARCHAR(), nullable=False),
        sa.Column("team_name", sa.VARCHAR(), nullable=False),
        sa.Column("leader_name", sa.VARCHAR(), nullable=False),
        sa.Column("leader_email", sa.VARCHAR(), nullable=False),
        sa.Column("member_names", sa.JSON(), nullable=False),
        sa.Column("participant_ids", sa.JSON(), nullable=True),
        sa.Column(
            "status", registration_status, nullable=False, server_default="pending"
        ),
        sa.Column(
            "payment_status", payment_status, nullable=False, server_default="unpaid"
        ),
        sa.Column("registered_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"]),
        sa.ForeignKeyConstraint(["region_id"], ["regions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "competition_id", "team_name", name="uq_registrations_competition_team"
        ),
    )
    op.create_index(
        "ix_registrations_team_code", "registrations", ["team_code"], unique=True
    )
    op.create_index("ix_registrations_user_id", "registrations", ["user_id"])
    op.create_index(
        "ix_registrations_competition_id", "registrations", ["competition_id"]
    )

    op.create_table(
        "certificates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("participant_name", sa.VARCHAR(), nullable=False),
        sa.Column("participant_email", sa.VARCHAR(), nullable=False),
        sa.Column("certificate_id", sa.VARCHAR(), nullable=False),
        sa.Column("position", sa.VARCHAR(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_certificates_competition_id", "certificates", ["competition_id"]
    )
    op.create_index(
        "ix_certificates_participant_email", "certificates", ["participant_email"]
    )
    op.create_index(
        "ix_certificates_certificate_id", "certificates", ["certificate_id"]
    )

    op.create_table(
        "event_passes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("registration_id", sa.Integer(), nullable=False),
        sa.Column("pass_url", sa.VARCHAR(), nullable=False),
        sa.Column("qr_code", sa.VARCHAR(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["registration_id"], ["registrations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("qr_code"),
    )
    op.create_index(
        "ix_event_passes_registration_id", "event_passes", ["registration_id"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("event_passes")
    op.drop_table("certificates")
    op.drop_table("registrations")
    op.drop_table("regions")
    op.drop_table("competitions")
    payment_status.drop(op.get_bind(), checkfirst=True)
    registration_status.drop(op.get_bind(), checkfirst=True)
    competition_level.drop(op.get_bind(), checkfirst=True)
