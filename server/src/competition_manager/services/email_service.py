"""Email service for composing and sending competition emails"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from competition_manager.backends.email_client import Attachment, Notifier
from competition_manager.services.qr_service import generate_qr_png
from competition_manager.utils.date_utils import format_long_date, utc_today

logger = logging.getLogger(__name__)

template_dir = Path(__file__).parent.parent / "templates" / "emails"
templates = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(enabled_extensions=("html", "xml")),
)


def registration_qr_payload(
    team_name: str,
    team_code: str,
    competition_name: str,
    region_name: str,
    registered_at: datetime,
) -> Dict[str, str]:
    """Data embedded in the registration QR code"""
    return {
        "team_name": team_name,
        "team_code": team_code,
        "competition_name": competition_name,
        "region_name": region_name or "",
        "registered_at": registered_at.isoformat(),
    }


class EmailService:
    """Renders email templates and hands them to the notifier"""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    async def send_registration_confirmation(
        self,
        leader_email: str,
        leader_name: str,
        team_name: str,
        team_code: str,
        competition_name: str,
        registered_at: datetime,
        region_name: str = "",
        member_names: Optional[List[str]] = None,
        participant_ids: Optional[List[str]] = None,
    ) -> Dict:
        """
        Send the team leader a confirmation with the registration QR code attached.

        Raises:
            DeliveryError: If the notifier fails to deliver
        """
        qr_png = await asyncio.to_thread(
            generate_qr_png,
            registration_qr_payload(
                team_name, team_code, competition_name, region_name, registered_at
            ),
        )

        html = templates.get_template("registration_confirmation.html").render(
            leader_name=leader_name,
            team_name=team_name,
            team_code=team_code,
            competition_name=competition_name,
            region_name=region_name,
            registration_date=format_long_date(registered_at),
            participant_ids=participant_ids,
            members=list(zip(member_names or [], participant_ids or [])),
        )

        response = await self.notifier.send(
            to=leader_email,
            subject=f"Registration Confirmation - {competition_name}",
            html=html,
            attachment=Attachment(filename=f"{team_name}-QRCode.png", content=qr_png),
            tag="registration-confirmation",
        )
        logger.info(f"Sent registration confirmation for team {team_code}")
        return response

    async def send_certificate(
        self,
        email: str,
        name: str,
        competition_name: str,
        certificate_id: str,
        certificate_path: Path,
        placement: Optional[str] = None,
    ) -> Dict:
        """
        Email a rendered certificate PDF to a participant.

        Raises:
            DeliveryError: If the notifier fails to deliver
        """
        html = templates.get_template("certificate.html").render(
            name=name,
            competition_name=competition_name,
            placement=placement,
            certificate_id=certificate_id,
            issue_date=format_long_date(utc_today()),
        )

        return await self.notifier.send(
            to=email,
            subject=f"Your Certificate - {competition_name}",
            html=html,
            attachment=Attachment(
                filename=f"{name}-Certificate.pdf", path=Path(certificate_path)
            ),
            tag="certificate",
        )
