import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol

from mailgun.client import Client

from competition_manager.errors import DeliveryError

logger = logging.getLogger(__name__)


@dataclass
class Attachment:
    """File to attach; either in-memory bytes or a path on disk"""

    filename: str
    content: Optional[bytes] = None
    path: Optional[Path] = None

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is not None:
            return Path(self.path).read_bytes()
        raise ValueError(f"Attachment {self.filename} has neither content nor path")


class Notifier(Protocol):
    """Anything that can deliver an email with an optional attachment"""

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        attachment: Optional[Attachment] = None,
        tag: Optional[str] = None,
    ) -> Dict: ...


class EmailClient:
    """Mailgun-backed Notifier"""

    def __init__(self, config: dict):
        self.mailgun_api_key = config["mailgun_api_key"]
        self.domain = config["mailgun_domain"]
        self.sender_email = config["sender_email"]

        self.client = Client(auth=("api", self.mailgun_api_key))

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        attachment: Optional[Attachment] = None,
        tag: Optional[str] = None,
    ) -> Dict:
        """
        Send an HTML email through the Mailgun API

        Args:
            to: Recipient email address
            subject: Email subject
            html: Rendered HTML body
            attachment: Optional file to attach
            tag: Optional Mailgun tag for analytics

        Returns:
            Dict containing Mailgun API response

        Raises:
            DeliveryError: If Mailgun rejects the message or the request fails
        """
        data = {
            "from": self.sender_email,
            "to": to,
            "subject": subject,
            "html": html,
        }
        if tag:
            data["o:tag"] = tag

        try:
            files = None
            if attachment is not None:
                files = [("attachment", (attachment.filename, attachment.read_bytes()))]

            req = await asyncio.to_thread(
                self.client.messages.create, data=data, files=files, domain=self.domain
            )
            response = req.json()

            if req.status_code != 200:
                logger.error(f"Mailgun API error: {req.status_code} - {response}")
                raise DeliveryError(f"Failed to send email: {response}")

            logger.info(
                f"Email sent successfully to {to}: {response.get('id', 'unknown')}"
            )
            return response

        except DeliveryError:
            raise
        except Exception as e:
            logger.error(f"Failed to send email to {to}: {str(e)}")
            raise DeliveryError(f"Email sending failed: {str(e)}") from e
