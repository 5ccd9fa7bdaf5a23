"""Admin endpoints for competitions, regions, registrations and passes"""

import datetime as dt
import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlmodel import Session

from competition_manager.auth.dependencies import require_admin
from competition_manager.auth.models import User
from competition_manager.config import config
from competition_manager.models.competition import Competition, Region
from competition_manager.models.database import get_db
from competition_manager.routers.competitions import (
    CompetitionCreateRequest,
    MessageResponse,
)
from competition_manager.services.artifact_renderer import (
    EventPassRenderer,
    get_event_pass_renderer,
)
from competition_manager.services.competition_service import CompetitionService
from competition_manager.services.event_pass_service import EventPassService
from competition_manager.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


class RegionCreateRequest(BaseModel):
    region_name: str
    event_date: dt.date
    venue: str
    competition_id: int

    @field_validator("region_name", "venue")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class EventPassRequest(BaseModel):
    registration_id: int = Field(..., description="Registration to issue the pass for")


class EventPassResponse(BaseModel):
    pass_url: str
    qr_code: str


@router.post(
    "/competitions",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    summary="Create a new competition",
)
async def create_competition(
    request: CompetitionCreateRequest,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    competition = CompetitionService(db).create_competition(
        Competition(**request.model_dump())
    )
    return MessageResponse(message="Competition created successfully", id=competition.id)


@router.post(
    "/regions",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    summary="Add a regional event",
)
async def create_region(
    request: RegionCreateRequest,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    region = CompetitionService(db).create_region(Region(**request.model_dump()))
    return MessageResponse(message="Regional event added successfully", id=region.id)


@router.get("/registrations", summary="Get all registrations")
async def list_registrations(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    return RegistrationService(db).list_registrations()


@router.get(
    "/competitions/{competition_id}/certificates",
    summary="Certificates issued for a competition",
)
async def list_certificates(
    competition_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    return CompetitionService(db).get_certificates(competition_id)


@router.post(
    "/event-pass",
    response_model=EventPassResponse,
    summary="Generate event pass",
)
async def create_event_pass(
    request: EventPassRequest,
    db: Session = Depends(get_db),
    renderer: EventPassRenderer = Depends(get_event_pass_renderer),
    _admin: User = Depends(require_admin),
):
    service = EventPassService(db, renderer, config["app_base_url"])
    event_pass = service.issue_pass(request.registration_id)
    return EventPassResponse(pass_url=event_pass.pass_url, qr_code=event_pass.qr_code)
