"""Certificate and event pass rendering with reportlab.

Artifacts are written into a scoped directory, named by a unique id, and are
expected to be released by the caller once attached or served.
"""

import io
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional

from reportlab.lib.colors import HexColor, black
from reportlab.lib.pagesizes import A4, A6, landscape
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdf_canvas

from competition_manager.config import config
from competition_manager.errors import RenderError
from competition_manager.utils.date_utils import format_long_date, utc_today

logger = logging.getLogger(__name__)

ACCENT = HexColor("#4F46E5")
MUTED = HexColor("#6B7280")


@dataclass
class CertificateData:
    name: str
    competition_name: str
    certificate_id: str
    placement: Optional[str] = None
    issued_on: date = field(default_factory=utc_today)


@dataclass
class EventPassData:
    pass_id: str
    name: str
    competition_name: str
    participant_id: str
    qr_png: bytes


class ArtifactRenderer:
    """Base for renderers writing PDFs into one directory"""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def _target(self, filename: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir / filename

    def _save(self, path: Path, draw) -> Path:
        try:
            canvas = draw(str(path))
            canvas.save()
        except Exception as e:
            logger.error(f"Failed to render {path.name}: {e}")
            self.release(path)
            raise RenderError(f"Failed to render {path.name}: {e}") from e
        return path

    @staticmethod
    def release(path: Optional[Path]) -> None:
        """Delete an artifact; a missing file is not an error"""
        if path is None:
            return
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not delete artifact {path}: {e}")


class CertificateRenderer(ArtifactRenderer):
    """A4 landscape certificate with centered text and a bottom id line"""

    def render(self, data: CertificateData) -> Path:
        path = self._target(f"certificate-{data.certificate_id}.pdf")
        return self._save(path, lambda filename: self._draw(filename, data))

    def _draw(self, filename: str, data: CertificateData):
        width, height = landscape(A4)
        c = pdf_canvas.Canvas(filename, pagesize=(width, height))
        c.setTitle(f"Certificate {data.certificate_id}")
        center = width / 2.0

        c.setLineWidth(2)
        c.setStrokeColor(ACCENT)
        c.rect(50, 50, width - 100, height - 100, stroke=1, fill=0)
        c.setLineWidth(0.5)
        c.rect(60, 60, width - 120, height - 120, stroke=1, fill=0)

        c.setFillColor(ACCENT)
        c.setFont("Helvetica-Bold", 30)
        c.drawCentredString(center, height - 130, "Certificate of Achievement")

        c.setFillColor(black)
        c.setFont("Helvetica", 18)
        c.drawCentredString(center, height - 185, "This is to certify that")

        c.setFont("Helvetica-Bold", 36)
        c.drawCentredString(center, height - 240, data.name)

        c.setFont("Helvetica", 18)
        c.drawCentredString(center, height - 285, "for successfully participating in")

        c.setFillColor(ACCENT)
        c.setFont("Helvetica-Bold", 24)
        c.drawCentredString(center, height - 325, data.competition_name)

        if data.placement:
            c.setFillColor(black)
            c.setFont("Helvetica", 18)
            c.drawCentredString(
                center, height - 365, f"Securing {data.placement} Position"
            )

        c.setFillColor(MUTED)
        c.setFont("Helvetica", 12)
        c.drawCentredString(center, 105, f"Date: {format_long_date(data.issued_on)}")
        c.drawCentredString(center, 85, f"Certificate ID: {data.certificate_id}")
        return c


class EventPassRenderer(ArtifactRenderer):
    """A6 entry pass with the holder's details and a QR code"""

    def render(self, data: EventPassData) -> Path:
        path = self._target(f"{data.pass_id}.pdf")
        return self._save(path, lambda filename: self._draw(filename, data))

    def _draw(self, filename: str, data: EventPassData):
        width, height = A6
        c = pdf_canvas.Canvas(filename, pagesize=(width, height))
        c.setTitle(f"Event pass {data.pass_id}")

        c.setFont("Helvetica-Bold", 16)
        c.drawCentredString(width / 2.0, height - 40, "EVENT PASS")

        c.setFont("Helvetica", 11)
        c.drawString(30, height - 75, f"Name: {data.name}")
        c.drawString(30, height - 92, f"Event: {data.competition_name}")
        c.drawString(30, height - 109, f"ID: {data.participant_id}")

        qr = ImageReader(io.BytesIO(data.qr_png))
        c.drawImage(qr, 30, height - 240, width=110, height=110)
        return c


def get_certificate_renderer() -> CertificateRenderer:
    """Certificates are temporary; they are deleted once emailed"""
    return CertificateRenderer(Path(config["artifact_dir"]) / "certificates")


def get_event_pass_renderer() -> EventPassRenderer:
    """Passes are kept and served from /public/passes"""
    return EventPassRenderer(Path(config["artifact_dir"]) / "passes")
