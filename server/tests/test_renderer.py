"""Tests for certificate, event pass and QR rendering"""

import io
import json
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
from PIL import Image

from competition_manager.errors import RenderError
from competition_manager.services.artifact_renderer import (
    ArtifactRenderer,
    CertificateData,
    EventPassData,
)
from competition_manager.services.email_service import registration_qr_payload
from competition_manager.services.qr_service import generate_qr_png
from competition_manager.utils.date_utils import format_long_date, utc_today


class TestCertificateRenderer:
    def test_render_writes_pdf_named_by_certificate_id(self, certificate_renderer):
        path = certificate_renderer.render(
            CertificateData(
                name="Ada Lovelace",
                competition_name="Code Sprint",
                certificate_id="CERT-1-1700000000000-ab12",
                placement="First",
            )
        )

        assert path.name == "certificate-CERT-1-1700000000000-ab12.pdf"
        assert path.parent == certificate_renderer.output_dir
        assert path.read_bytes().startswith(b"%PDF")

    def test_render_without_placement(self, certificate_renderer):
        path = certificate_renderer.render(
            CertificateData(
                name="Alan Turing",
                competition_name="Code Sprint",
                certificate_id="CERT-1-1700000000001-zz99",
            )
        )

        assert path.exists()

    def test_release_removes_file(self, certificate_renderer):
        path = certificate_renderer.render(
            CertificateData(
                name="Grace Hopper",
                competition_name="Code Sprint",
                certificate_id="CERT-1-1700000000002-qq11",
            )
        )

        certificate_renderer.release(path)

        assert not path.exists()

    def test_release_tolerates_missing_or_none(self, tmp_path):
        ArtifactRenderer.release(None)
        ArtifactRenderer.release(tmp_path / "never-created.pdf")

    def test_draw_failure_raises_render_error_and_cleans_up(
        self, certificate_renderer, monkeypatch
    ):
        written = []

        def broken_draw(filename, data):
            Path(filename).write_bytes(b"partial")
            written.append(Path(filename))
            raise RuntimeError("out of fonts")

        monkeypatch.setattr(certificate_renderer, "_draw", broken_draw)

        with pytest.raises(RenderError) as exc_info:
            certificate_renderer.render(
                CertificateData(
                    name="Ada Lovelace",
                    competition_name="Code Sprint",
                    certificate_id="CERT-1-1700000000003-aa00",
                )
            )

        assert "out of fonts" in exc_info.value.message
        assert written and not written[0].exists()

    def test_format_long_date(self):
        assert format_long_date(date(2024, 3, 5)) == "March 05, 2024"

    def test_issue_date_defaults_to_utc_today(self):
        data = CertificateData(
            name="Ada Lovelace",
            competition_name="Code Sprint",
            certificate_id="CERT-1-1700000000004-bb00",
        )

        assert data.issued_on == utc_today()
        assert utc_today() == datetime.now(timezone.utc).date()


class TestEventPassRenderer:
    def test_render_pass_with_qr(self, event_pass_renderer):
        qr_png = generate_qr_png({"id": "abc", "participant_id": "001-ABCDEF-P01"})

        path = event_pass_renderer.render(
            EventPassData(
                pass_id="abc",
                name="Ada Lovelace",
                competition_name="Code Sprint",
                participant_id="001-ABCDEF-P01",
                qr_png=qr_png,
            )
        )

        assert path.name == "abc.pdf"
        assert path.read_bytes().startswith(b"%PDF")


class TestQrCode:
    def test_png_has_requested_size(self):
        png = generate_qr_png({"team_code": "001-ABCDEF"}, size=200)

        with Image.open(io.BytesIO(png)) as image:
            assert image.format == "PNG"
            assert image.size == (200, 200)

    def test_default_size(self):
        png = generate_qr_png({"team_code": "001-ABCDEF"})

        with Image.open(io.BytesIO(png)) as image:
            assert image.size == (300, 300)

    def test_registration_payload(self):
        registered_at = datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)

        payload = registration_qr_payload(
            "Circuit Breakers", "001-ABCDEF", "Code Sprint", None, registered_at
        )

        assert payload == {
            "team_name": "Circuit Breakers",
            "team_code": "001-ABCDEF",
            "competition_name": "Code Sprint",
            "region_name": "",
            "registered_at": "2024-05-01T10:30:00+00:00",
        }
        # Must be embeddable as JSON
        assert json.loads(json.dumps(payload)) == payload
