"""Competition, team registration and certificate endpoints"""

import datetime as dt
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from sqlmodel import Session

from competition_manager.auth.dependencies import get_current_user, require_admin
from competition_manager.auth.models import User, can_view_user
from competition_manager.backends.email_client import Notifier
from competition_manager.models.competition import Competition, CompetitionLevel
from competition_manager.models.database import get_db
from competition_manager.services.artifact_renderer import (
    CertificateRenderer,
    get_certificate_renderer,
)
from competition_manager.services.certificate_service import (
    CertificateRecipient,
    CertificateService,
)
from competition_manager.services.competition_service import CompetitionService
from competition_manager.services.email_service import EmailService
from competition_manager.services.notifier_service import get_notifier
from competition_manager.services.registration_service import (
    RegistrationService,
    TeamRegistration,
)
from competition_manager.services.team_code import MAX_TEAM_MEMBERS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/competitions", tags=["Competitions"])


def _non_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class CompetitionCreateRequest(BaseModel):
    name: str = Field(..., description="Name of the competition", examples=["Tech Fest 2024"])
    level: CompetitionLevel = Field(..., description="Regional, National or International")
    date: dt.date
    venue: str
    registration_deadline: dt.date
    maximum_teams: int = Field(..., ge=0)
    fees: float = Field(..., ge=0)
    rules: str

    @field_validator("name", "venue", "rules")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        return _non_blank(v)


class CompetitionUpdateRequest(BaseModel):
    name: Optional[str] = None
    level: Optional[CompetitionLevel] = None
    date: Optional[dt.date] = None
    venue: Optional[str] = None
    registration_deadline: Optional[dt.date] = None
    maximum_teams: Optional[int] = Field(default=None, ge=0)
    fees: Optional[float] = Field(default=None, ge=0)
    rules: Optional[str] = None

    @field_validator("name", "venue", "rules")
    @classmethod
    def _not_blank_when_given(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _non_blank(v)


class MessageResponse(BaseModel):
    message: str
    id: Optional[int] = None


class TeamRegistrationRequest(BaseModel):
    competition_id: int = Field(..., description="Competition to register for")
    team_name: str
    leader_name: str
    leader_email: EmailStr
    member_names: List[str] = Field(..., min_length=1, max_length=MAX_TEAM_MEMBERS)
    region_id: Optional[int] = Field(
        default=None, description="Regional round whose name goes on the QR code"
    )

    @field_validator("team_name", "leader_name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        return _non_blank(v)

    @field_validator("member_names")
    @classmethod
    def _members_not_blank(cls, v: List[str]) -> List[str]:
        return [_non_blank(name) for name in v]


class TeamRegistrationResponse(BaseModel):
    message: str
    team_code: str
    participant_ids: List[str]
    notification_sent: bool
    notification_error: Optional[str] = None


class BulkParticipant(BaseModel):
    email: EmailStr
    name: str
    position: str

    @field_validator("name", "position")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        return _non_blank(v)


class BulkCertificateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    competition_id: int = Field(..., alias="competitionId")
    participants: List[BulkParticipant]


class IssuedCertificateOut(BaseModel):
    email: str
    name: str
    status: str
    certificate_id: str = Field(..., serialization_alias="certificateId")


class FailedCertificateOut(BaseModel):
    email: str
    name: str
    error: str


class BulkCertificateResponse(BaseModel):
    message: str
    successful: List[IssuedCertificateOut]
    failed: List[FailedCertificateOut]


@router.get("")
async def list_competitions(db: Session = Depends(get_db)):
    """List all competitions with their number of regional events"""
    return CompetitionService(db).list_competitions()


@router.post("/new", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
async def create_competition(
    request: CompetitionCreateRequest,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    competition = CompetitionService(db).create_competition(
        Competition(**request.model_dump())
    )
    return MessageResponse(message="Competition created successfully", id=competition.id)


@router.get("/registrations/{user_id}")
async def get_user_registrations(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Registrations owned by a user; admins may look up anyone"""
    if not can_view_user(current_user, user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail={"message": "Access denied"}
        )

    service = RegistrationService(db)
    return service.get_registrations_for_user(user_id)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=TeamRegistrationResponse,
)
async def register_team(
    request: TeamRegistrationRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Register a team and email the leader a QR-coded confirmation"""
    service = RegistrationService(db, EmailService(notifier))
    result = await service.register_team(
        current_user.user_id, TeamRegistration(**request.model_dump())
    )

    message = "Registration successful"
    if not result.notification_sent:
        message = "Registration successful, but the confirmation email could not be sent"

    return TeamRegistrationResponse(
        message=message,
        team_code=result.team_code,
        participant_ids=result.participant_ids,
        notification_sent=result.notification_sent,
        notification_error=result.notification_error,
    )


@router.post("/send-bulk", response_model=BulkCertificateResponse)
async def send_bulk_certificates(
    request: BulkCertificateRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    renderer: CertificateRenderer = Depends(get_certificate_renderer),
    _admin: User = Depends(require_admin),
):
    """
    Generate and email a certificate for each participant.

    Per-participant failures are reported in `failed`; only a missing
    competition fails the whole request.
    """
    service = CertificateService(db, renderer, EmailService(notifier))
    report = await service.issue_bulk(
        request.competition_id,
        [
            CertificateRecipient(name=p.name, email=p.email, position=p.position)
            for p in request.participants
        ],
    )

    return BulkCertificateResponse(
        message="Certificate generation and sending completed",
        successful=[
            IssuedCertificateOut(
                email=item.email,
                name=item.name,
                status=item.status,
                certificate_id=item.certificate_id,
            )
            for item in report.successful
        ],
        failed=[
            FailedCertificateOut(email=item.email, name=item.name, error=item.error)
            for item in report.failed
        ],
    )


@router.get("/{competition_id}")
async def get_competition(competition_id: int, db: Session = Depends(get_db)):
    return CompetitionService(db).get_competition(competition_id)


@router.get("/{competition_id}/regions")
async def list_regions(competition_id: int, db: Session = Depends(get_db)):
    """Regional rounds of a competition"""
    return CompetitionService(db).get_regions(competition_id)


@router.put("/{competition_id}", response_model=MessageResponse)
async def update_competition(
    competition_id: int,
    request: CompetitionUpdateRequest,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    CompetitionService(db).update_competition(
        competition_id, request.model_dump(exclude_unset=True)
    )
    return MessageResponse(message="Competition updated successfully", id=competition_id)


@router.delete("/{competition_id}", response_model=MessageResponse)
async def delete_competition(
    competition_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    CompetitionService(db).delete_competition(competition_id)
    return MessageResponse(message="Competition deleted successfully", id=competition_id)
