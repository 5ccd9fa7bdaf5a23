"""Competition Service - Handles competition and region database operations"""

import logging
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from competition_manager.errors import (
    CompetitionNotFound,
    ConflictError,
    ValidationError,
)
from competition_manager.models.certificate import Certificate
from competition_manager.models.competition import Competition, Region

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "level",
    "date",
    "venue",
    "registration_deadline",
    "maximum_teams",
    "fees",
    "rules",
)


class CompetitionService:
    """Service for managing competitions and their regional events"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def list_competitions(self) -> List[Dict[str, Any]]:
        """All competitions, each with the number of regions attached"""
        regions_count = (
            select(Region.competition_id, func.count(Region.id).label("regions_count"))
            .group_by(Region.competition_id)
            .subquery()
        )
        stmt = (
            select(Competition, regions_count.c.regions_count)
            .outerjoin(regions_count, regions_count.c.competition_id == Competition.id)
            .order_by(Competition.date)
        )
        rows = self.db.exec(stmt).all()
        return [
            {**competition.model_dump(), "regions_count": count or 0}
            for competition, count in rows
        ]

    def get_competition(self, competition_id: int) -> Competition:
        competition = self.db.get(Competition, competition_id)
        if not competition:
            raise CompetitionNotFound()
        return competition

    def create_competition(self, competition: Competition) -> Competition:
        self.db.add(competition)
        self.db.commit()
        self.db.refresh(competition)
        logger.info(f"Created competition {competition.id}: {competition.name}")
        return competition

    def update_competition(
        self, competition_id: int, updated_data: Dict[str, Any]
    ) -> Competition:
        """
        Apply a partial update.

        Raises:
            CompetitionNotFound: If the competition doesn't exist
            ValidationError: If no updatable field was supplied
        """
        competition = self.get_competition(competition_id)

        changes = {
            key: value
            for key, value in updated_data.items()
            if key in UPDATABLE_FIELDS and value is not None
        }
        if not changes:
            raise ValidationError(
                errors=[{"field": "body", "msg": "No valid fields to update"}],
                message="No valid fields to update",
            )

        for key, value in changes.items():
            setattr(competition, key, value)

        self.db.add(competition)
        self.db.commit()
        self.db.refresh(competition)
        logger.info(f"Updated competition {competition_id}: {sorted(changes)}")
        return competition

    def delete_competition(self, competition_id: int) -> None:
        competition = self.get_competition(competition_id)
        try:
            self.db.delete(competition)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Refusing to delete competition {competition_id}: {e}")
            raise ConflictError(
                "Competition has registrations or regions and cannot be deleted"
            ) from e
        logger.info(f"Deleted competition {competition_id}")

    def create_region(self, region: Region) -> Region:
        """
        Add a regional event to an existing competition.

        Raises:
            CompetitionNotFound: If the parent competition doesn't exist
        """
        self.get_competition(region.competition_id)
        self.db.add(region)
        self.db.commit()
        self.db.refresh(region)
        logger.info(
            f"Added region {region.region_name} to competition {region.competition_id}"
        )
        return region

    def get_regions(self, competition_id: int) -> List[Region]:
        self.get_competition(competition_id)
        stmt = (
            select(Region)
            .where(Region.competition_id == competition_id)
            .order_by(Region.id)
        )
        return list(self.db.exec(stmt).all())

    def get_certificates(self, competition_id: int) -> List[Certificate]:
        """Audit trail of certificates issued for a competition"""
        self.get_competition(competition_id)
        stmt = (
            select(Certificate)
            .where(Certificate.competition_id == competition_id)
            .order_by(Certificate.id)
        )
        return list(self.db.exec(stmt).all())
