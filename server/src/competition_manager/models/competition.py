"""SQLModel Competition and Region models"""

import enum
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Column, Text
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


class CompetitionLevel(str, enum.Enum):
    REGIONAL = "Regional"
    NATIONAL = "National"
    INTERNATIONAL = "International"


class Competition(SQLModel, table=True):
    """A competition teams can register for until its deadline"""

    __tablename__ = "competitions"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    level: CompetitionLevel = Field(
        sa_column=Column(
            SAEnum(
                CompetitionLevel,
                name="competition_level",
                native_enum=True,
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
        ),
    )
    date: date
    venue: str
    registration_deadline: date = Field(index=True)
    maximum_teams: int = Field(default=0, ge=0)
    fees: float = Field(default=0.0, ge=0)
    rules: str = Field(sa_column=Column(Text, nullable=False))
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class Region(SQLModel, table=True):
    """Regional round of a competition"""

    __tablename__ = "regions"

    id: Optional[int] = Field(default=None, primary_key=True)
    competition_id: int = Field(foreign_key="competitions.id", index=True)
    region_name: str
    event_date: date
    venue: str
