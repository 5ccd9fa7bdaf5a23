"""Event pass generation for registered teams"""

import logging
import uuid
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from competition_manager.errors import PersistenceError, RegistrationNotFound
from competition_manager.models.certificate import EventPass
from competition_manager.models.competition import Competition
from competition_manager.models.registration import Registration
from competition_manager.services.artifact_renderer import (
    EventPassData,
    EventPassRenderer,
)
from competition_manager.services.qr_service import generate_qr_png

logger = logging.getLogger(__name__)


class EventPassService:
    """Renders a pass PDF for a registration and records where it is served"""

    def __init__(self, db_session: Session, renderer: EventPassRenderer, base_url: str):
        self.db = db_session
        self.renderer = renderer
        self.base_url = base_url.rstrip("/")

    def issue_pass(
        self, registration_id: int, participant_id: Optional[str] = None
    ) -> EventPass:
        """
        Raises:
            RegistrationNotFound: If the registration doesn't exist
            RenderError: If the PDF can't be produced
            PersistenceError: If the pass row can't be written
        """
        registration = self.db.get(Registration, registration_id)
        if not registration:
            raise RegistrationNotFound()
        competition = self.db.get(Competition, registration.competition_id)

        # Passes default to the team leader, who is the first listed member
        participant_id = participant_id or (
            registration.participant_ids[0]
            if registration.participant_ids
            else registration.team_code
        )
        qr_token = str(uuid.uuid4())
        qr_png = generate_qr_png(
            {
                "id": qr_token,
                "participant_id": participant_id,
                "event": competition.name,
            }
        )

        artifact = self.renderer.render(
            EventPassData(
                pass_id=qr_token,
                name=registration.leader_name,
                competition_name=competition.name,
                participant_id=participant_id,
                qr_png=qr_png,
            )
        )

        event_pass = EventPass(
            registration_id=registration.id,
            pass_url=f"{self.base_url}/public/passes/{artifact.name}",
            qr_code=qr_token,
        )
        try:
            self.db.add(event_pass)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self.renderer.release(artifact)
            raise PersistenceError(f"Failed to record event pass: {e}") from e

        self.db.refresh(event_pass)
        logger.info(f"Issued event pass {qr_token} for registration {registration_id}")
        return event_pass
