"""Bulk certificate issuance.

Each participant goes through render -> email -> audit row -> cleanup on its
own. A failure for one participant is recorded in the report and never stops
the others.
"""

import asyncio
import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from competition_manager.errors import CompetitionNotFound, PersistenceError
from competition_manager.models.certificate import Certificate
from competition_manager.models.competition import Competition
from competition_manager.services.artifact_renderer import (
    CertificateData,
    CertificateRenderer,
)
from competition_manager.services.email_service import EmailService

logger = logging.getLogger(__name__)

SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SUFFIX_LENGTH = 4


def mint_certificate_id(competition_id: int) -> str:
    """``CERT-<competition>-<epoch ms>-<4 random chars>``"""
    stamp = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"CERT-{competition_id}-{stamp}-{suffix}"


@dataclass
class CertificateRecipient:
    name: str
    email: str
    position: Optional[str] = None


@dataclass
class IssuedCertificate:
    email: str
    name: str
    certificate_id: str
    status: str = "success"


@dataclass
class FailedCertificate:
    email: str
    name: str
    error: str


@dataclass
class BulkIssueReport:
    successful: List[IssuedCertificate] = field(default_factory=list)
    failed: List[FailedCertificate] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.failed)


class CertificateService:
    """Service for issuing and looking up participant certificates"""

    def __init__(
        self,
        db_session: Session,
        renderer: CertificateRenderer,
        email_service: EmailService,
    ):
        self.db = db_session
        self.renderer = renderer
        self.email_service = email_service

    async def issue_bulk(
        self, competition_id: int, recipients: List[CertificateRecipient]
    ) -> BulkIssueReport:
        """
        Render, email and record one certificate per recipient.

        Raises:
            CompetitionNotFound: Before any recipient is processed
        """
        competition = self.db.get(Competition, competition_id)
        if not competition:
            raise CompetitionNotFound()
        competition_name = competition.name

        report = BulkIssueReport()
        for recipient in recipients:
            try:
                certificate_id = await self._issue_one(
                    competition_id, competition_name, recipient
                )
            except Exception as e:
                logger.error(
                    f"Error processing certificate for {recipient.email}: {e}"
                )
                report.failed.append(
                    FailedCertificate(
                        email=recipient.email, name=recipient.name, error=str(e)
                    )
                )
            else:
                report.successful.append(
                    IssuedCertificate(
                        email=recipient.email,
                        name=recipient.name,
                        certificate_id=certificate_id,
                    )
                )

        logger.info(
            f"Certificates for competition {competition_id}: "
            f"{len(report.successful)} sent, {len(report.failed)} failed"
        )
        return report

    async def _issue_one(
        self, competition_id: int, competition_name: str, recipient: CertificateRecipient
    ) -> str:
        certificate_id = mint_certificate_id(competition_id)
        artifact: Optional[Path] = None
        try:
            artifact = await asyncio.to_thread(
                self.renderer.render,
                CertificateData(
                    name=recipient.name,
                    competition_name=competition_name,
                    certificate_id=certificate_id,
                    placement=recipient.position,
                ),
            )
            await self.email_service.send_certificate(
                email=recipient.email,
                name=recipient.name,
                competition_name=competition_name,
                certificate_id=certificate_id,
                certificate_path=artifact,
                placement=recipient.position,
            )
            self._record(competition_id, recipient, certificate_id)
        finally:
            self.renderer.release(artifact)
        return certificate_id

    def _record(
        self, competition_id: int, recipient: CertificateRecipient, certificate_id: str
    ) -> Certificate:
        certificate = Certificate(
            competition_id=competition_id,
            participant_name=recipient.name,
            participant_email=recipient.email,
            certificate_id=certificate_id,
            position=recipient.position,
        )
        try:
            self.db.add(certificate)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to record certificate: {e}") from e
        return certificate
