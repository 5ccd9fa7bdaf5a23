"""SQLModel Registration model"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


class RegistrationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


def _str_enum_column(enum_cls, name: str, default) -> Column:
    return Column(
        SAEnum(
            enum_cls,
            name=name,
            native_enum=True,
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
        server_default=default.value,
    )


class Registration(SQLModel, table=True):
    """A team's registration for a competition"""

    __tablename__ = "registrations"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    competition_id: int = Field(foreign_key="competitions.id", index=True)
    region_id: Optional[int] = Field(default=None, foreign_key="regions.id")
    team_code: str = Field(unique=True, index=True)
    team_name: str
    leader_name: str
    leader_email: str
    member_names: List[str] = Field(sa_column=Column(JSON, nullable=False))
    # One entry per member, filled in the same transaction as the insert
    participant_ids: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    status: RegistrationStatus = Field(
        default=RegistrationStatus.PENDING,
        sa_column=_str_enum_column(
            RegistrationStatus, "registration_status", RegistrationStatus.PENDING
        ),
    )
    payment_status: PaymentStatus = Field(
        default=PaymentStatus.UNPAID,
        sa_column=_str_enum_column(PaymentStatus, "payment_status", PaymentStatus.UNPAID),
    )
    registered_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        UniqueConstraint(
            "competition_id", "team_name", name="uq_registrations_competition_team"
        ),
    )
