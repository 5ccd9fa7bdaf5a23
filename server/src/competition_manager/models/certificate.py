"""Issued certificate audit rows and event passes"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Certificate(SQLModel, table=True):
    """Append-only record of a certificate that was rendered and emailed"""

    __tablename__ = "certificates"

    id: Optional[int] = Field(default=None, primary_key=True)
    competition_id: int = Field(foreign_key="competitions.id", index=True)
    participant_name: str
    participant_email: str = Field(index=True)
    certificate_id: str = Field(index=True)
    position: Optional[str] = None
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class EventPass(SQLModel, table=True):
    """Entry pass generated for a registration"""

    __tablename__ = "event_passes"

    id: Optional[int] = Field(default=None, primary_key=True)
    registration_id: int = Field(foreign_key="registrations.id", index=True)
    pass_url: str
    qr_code: str = Field(unique=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
