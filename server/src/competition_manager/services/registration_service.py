"""Team registration workflow"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from competition_manager.errors import (
    CompetitionUnavailable,
    DuplicateTeamName,
    PersistenceError,
    RegionNotFound,
    ValidationError,
)
from competition_manager.models.certificate import Certificate, EventPass
from competition_manager.models.competition import Competition, Region
from competition_manager.models.registration import (
    PaymentStatus,
    Registration,
    RegistrationStatus,
)
from competition_manager.services.email_service import EmailService
from competition_manager.services.team_code import (
    MAX_TEAM_MEMBERS,
    generate_team_code,
    participant_ids_for,
)
from competition_manager.utils.date_utils import utc_today

logger = logging.getLogger(__name__)


@dataclass
class TeamRegistration:
    competition_id: int
    team_name: str
    leader_name: str
    leader_email: str
    member_names: List[str]
    region_id: Optional[int] = None


@dataclass
class RegistrationResult:
    registration: Registration
    team_code: str
    participant_ids: List[str]
    notification_sent: bool
    notification_error: Optional[str] = None


class RegistrationService:
    """Service for managing team registrations"""

    def __init__(self, db_session: Session, email_service: Optional[EmailService] = None):
        self.db = db_session
        self.email_service = email_service

    def get_open_competition(self, competition_id: int) -> Competition:
        """
        Raises:
            CompetitionUnavailable: If missing or past its registration deadline
        """
        stmt = select(Competition).where(
            Competition.id == competition_id,
            Competition.registration_deadline >= utc_today(),
        )
        competition = self.db.exec(stmt).first()
        if not competition:
            raise CompetitionUnavailable()
        return competition

    def team_name_taken(self, competition_id: int, team_name: str) -> bool:
        stmt = select(Registration.id).where(
            Registration.competition_id == competition_id,
            Registration.team_name == team_name,
        )
        return self.db.exec(stmt).first() is not None

    def _get_region(self, competition_id: int, region_id: Optional[int]) -> Optional[Region]:
        if region_id is None:
            return None
        region = self.db.get(Region, region_id)
        if not region or region.competition_id != competition_id:
            raise RegionNotFound()
        return region

    async def register_team(
        self, user_id: str, request: TeamRegistration
    ) -> RegistrationResult:
        """
        Register a team and email the leader a confirmation.

        The registration row and its participant ids are written in one
        transaction. A failed confirmation email is reported on the result and
        never rolls the registration back.

        Raises:
            CompetitionUnavailable: Competition missing or deadline passed
            DuplicateTeamName: Team name already used in this competition
            ValidationError: Too many members, or competition id too wide for a code
            RegionNotFound: region_id given but not part of the competition
            PersistenceError: The insert failed and was rolled back
        """
        if len(request.member_names) > MAX_TEAM_MEMBERS:
            message = f"A team can have at most {MAX_TEAM_MEMBERS} members"
            raise ValidationError(
                errors=[{"field": "member_names", "msg": message}], message=message
            )

        competition = self.get_open_competition(request.competition_id)

        if self.team_name_taken(request.competition_id, request.team_name):
            raise DuplicateTeamName()

        region = self._get_region(request.competition_id, request.region_id)

        try:
            team_code = generate_team_code(request.competition_id)
        except ValueError as e:
            raise ValidationError(
                errors=[{"field": "competition_id", "msg": str(e)}], message=str(e)
            ) from e
        registration = self._insert_registration(user_id, request, team_code)

        logger.info(
            f"Registered team '{registration.team_name}' ({team_code}) "
            f"for competition {request.competition_id}"
        )

        if self.email_service is None:
            logger.warning(f"Team {team_code} registered without a confirmation email")
            return RegistrationResult(
                registration=registration,
                team_code=team_code,
                participant_ids=list(registration.participant_ids or []),
                notification_sent=False,
                notification_error="No email service configured",
            )

        notification_sent = True
        notification_error = None
        try:
            await self.email_service.send_registration_confirmation(
                leader_email=registration.leader_email,
                leader_name=registration.leader_name,
                team_name=registration.team_name,
                team_code=team_code,
                competition_name=competition.name,
                registered_at=registration.registered_at,
                region_name=region.region_name if region else "",
                member_names=registration.member_names,
                participant_ids=registration.participant_ids,
            )
        except Exception as e:
            notification_sent = False
            notification_error = str(e)
            logger.warning(
                f"Team {team_code} registered but confirmation email failed: {e}"
            )

        return RegistrationResult(
            registration=registration,
            team_code=team_code,
            participant_ids=list(registration.participant_ids or []),
            notification_sent=notification_sent,
            notification_error=notification_error,
        )

    def _insert_registration(
        self, user_id: str, request: TeamRegistration, team_code: str
    ) -> Registration:
        registration = Registration(
            user_id=str(user_id),
            competition_id=request.competition_id,
            region_id=request.region_id,
            team_code=team_code,
            team_name=request.team_name,
            leader_name=request.leader_name,
            leader_email=request.leader_email,
            member_names=list(request.member_names),
            status=RegistrationStatus.PENDING,
            payment_status=PaymentStatus.UNPAID,
        )

        try:
            self.db.add(registration)
            self.db.flush()

            registration.participant_ids = participant_ids_for(
                team_code, len(request.member_names)
            )
            self.db.add(registration)
            self.db.flush()

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # The name check above is advisory; the unique constraint decides.
            if self.team_name_taken(request.competition_id, request.team_name):
                raise DuplicateTeamName() from e
            logger.error(f"Registration insert violated a constraint: {e}")
            raise PersistenceError(f"Failed to complete registration: {e.orig}") from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Registration transaction rolled back: {e}")
            raise PersistenceError(f"Failed to complete registration: {e}") from e

        self.db.refresh(registration)
        return registration

    def get_registration_by_id(self, registration_id: int) -> Optional[Registration]:
        return self.db.get(Registration, registration_id)

    def get_registrations_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """A user's registrations with competition, region, passes and certificates"""
        stmt = (
            select(Registration, Competition.name, Region.region_name)
            .join(Competition, Registration.competition_id == Competition.id)
            .outerjoin(Region, Registration.region_id == Region.id)
            .where(Registration.user_id == str(user_id))
            .order_by(Registration.registered_at)
        )
        return [
            self._describe(registration, competition_name, region_name)
            for registration, competition_name, region_name in self.db.exec(stmt).all()
        ]

    def list_registrations(self) -> List[Dict[str, Any]]:
        stmt = (
            select(Registration, Competition.name, Region.region_name)
            .join(Competition, Registration.competition_id == Competition.id)
            .outerjoin(Region, Registration.region_id == Region.id)
            .order_by(Registration.id)
        )
        return [
            {
                **registration.model_dump(),
                "competition_name": competition_name,
                "region_name": region_name,
            }
            for registration, competition_name, region_name in self.db.exec(stmt).all()
        ]

    def _describe(
        self,
        registration: Registration,
        competition_name: str,
        region_name: Optional[str],
    ) -> Dict[str, Any]:
        passes = self.db.exec(
            select(EventPass)
            .where(EventPass.registration_id == registration.id)
            .order_by(EventPass.id)
        ).all()
        certificates = self.db.exec(
            select(Certificate.certificate_id)
            .where(
                Certificate.competition_id == registration.competition_id,
                Certificate.participant_email == registration.leader_email,
            )
            .order_by(Certificate.id)
        ).all()
        latest_pass = passes[-1] if passes else None

        return {
            **registration.model_dump(),
            "competition_name": competition_name,
            "region_name": region_name,
            "certificate_ids": list(certificates),
            "pass_url": latest_pass.pass_url if latest_pass else None,
            "qr_code": latest_pass.qr_code if latest_pass else None,
        }
