"""Tests for bulk certificate issuance"""

import re
import threading

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from competition_manager.errors import CompetitionNotFound, RenderError
from competition_manager.models import Certificate
from competition_manager.services.certificate_service import (
    CertificateRecipient,
    mint_certificate_id,
)

CERTIFICATE_ID_PATTERN = re.compile(r"^CERT-(\d+)-(\d+)-([a-z0-9]{4})$")

RECIPIENTS = [
    CertificateRecipient(name="Ada Lovelace", email="ada@example.com", position="First"),
    CertificateRecipient(name="Alan Turing", email="alan@example.com", position="Second"),
    CertificateRecipient(name="Grace Hopper", email="grace@example.com", position="Third"),
]


def _stored_certificates(service):
    return service.db.exec(select(Certificate).order_by(Certificate.id)).all()


def _leftover_pdfs(renderer):
    if not renderer.output_dir.exists():
        return []
    return list(renderer.output_dir.glob("*.pdf"))


class TestMintCertificateId:
    def test_format(self):
        certificate_id = mint_certificate_id(12)

        match = CERTIFICATE_ID_PATTERN.match(certificate_id)
        assert match is not None
        assert match.group(1) == "12"
        assert len(match.group(2)) >= 13

    def test_ids_are_distinct(self):
        ids = {mint_certificate_id(1) for _ in range(50)}
        assert len(ids) == 50


class TestIssueBulk:
    """Each participant is processed on their own"""

    @pytest.mark.asyncio
    async def test_all_participants_succeed(
        self, certificate_service, certificate_renderer, make_competition, notifier
    ):
        competition = make_competition(name="Code Sprint")

        report = await certificate_service.issue_bulk(competition.id, RECIPIENTS)

        assert report.total == 3
        assert report.failed == []
        assert [item.email for item in report.successful] == [
            "ada@example.com",
            "alan@example.com",
            "grace@example.com",
        ]
        for item in report.successful:
            assert item.status == "success"
            assert CERTIFICATE_ID_PATTERN.match(item.certificate_id)

        assert len(notifier.sent) == 3
        first = notifier.sent_to("ada@example.com")[0]
        assert first["subject"] == "Your Certificate - Code Sprint"
        assert first["tag"] == "certificate"
        assert first["attachment_name"] == "Ada Lovelace-Certificate.pdf"
        assert first["attachment_bytes"].startswith(b"%PDF")
        assert "First" in first["html"]

        stored = _stored_certificates(certificate_service)
        assert [c.certificate_id for c in stored] == [
            item.certificate_id for item in report.successful
        ]
        assert stored[1].participant_name == "Alan Turing"
        assert stored[1].position == "Second"

    @pytest.mark.asyncio
    async def test_artifacts_removed_after_sending(
        self, certificate_service, certificate_renderer, make_competition
    ):
        competition = make_competition()

        await certificate_service.issue_bulk(competition.id, RECIPIENTS)

        assert _leftover_pdfs(certificate_renderer) == []

    @pytest.mark.asyncio
    async def test_delivery_failure_isolated(
        self, certificate_service, certificate_renderer, make_competition, notifier
    ):
        competition = make_competition()
        notifier.fail_for.add("alan@example.com")

        report = await certificate_service.issue_bulk(competition.id, RECIPIENTS)

        assert [item.email for item in report.successful] == [
            "ada@example.com",
            "grace@example.com",
        ]
        assert len(report.failed) == 1
        failure = report.failed[0]
        assert failure.email == "alan@example.com"
        assert failure.name == "Alan Turing"
        assert "mailbox unavailable" in failure.error

        # No audit row for the participant who never received a certificate
        stored = _stored_certificates(certificate_service)
        assert {c.participant_email for c in stored} == {
            "ada@example.com",
            "grace@example.com",
        }
        assert _leftover_pdfs(certificate_renderer) == []

    @pytest.mark.asyncio
    async def test_render_failure_isolated(
        self,
        certificate_service,
        certificate_renderer,
        make_competition,
        notifier,
        monkeypatch,
    ):
        competition = make_competition()
        real_render = certificate_renderer.render

        def flaky_render(data):
            if data.name == "Ada Lovelace":
                raise RenderError("Failed to render certificate: font missing")
            return real_render(data)

        monkeypatch.setattr(certificate_renderer, "render", flaky_render)

        report = await certificate_service.issue_bulk(competition.id, RECIPIENTS)

        assert [item.email for item in report.failed] == ["ada@example.com"]
        assert "font missing" in report.failed[0].error
        assert len(report.successful) == 2
        assert notifier.sent_to("ada@example.com") == []
        assert _leftover_pdfs(certificate_renderer) == []

    @pytest.mark.asyncio
    async def test_record_failure_reported(
        self, certificate_service, certificate_renderer, make_competition, monkeypatch
    ):
        competition = make_competition()

        def failing_commit():
            raise SQLAlchemyError("database is locked")

        with monkeypatch.context() as m:
            m.setattr(certificate_service.db, "commit", failing_commit)
            report = await certificate_service.issue_bulk(competition.id, RECIPIENTS[:1])

        assert report.successful == []
        assert "Failed to record certificate" in report.failed[0].error
        assert _stored_certificates(certificate_service) == []
        assert _leftover_pdfs(certificate_renderer) == []

    @pytest.mark.asyncio
    async def test_rendering_runs_off_the_event_loop(
        self, certificate_service, certificate_renderer, make_competition, monkeypatch
    ):
        competition = make_competition()
        loop_thread = threading.get_ident()
        render_threads = []
        real_render = certificate_renderer.render

        def tracking_render(data):
            render_threads.append(threading.get_ident())
            return real_render(data)

        monkeypatch.setattr(certificate_renderer, "render", tracking_render)

        report = await certificate_service.issue_bulk(competition.id, RECIPIENTS)

        assert len(report.successful) == 3
        assert len(render_threads) == 3
        assert loop_thread not in render_threads

    @pytest.mark.asyncio
    async def test_missing_competition_fails_before_processing(
        self, certificate_service, notifier
    ):
        with pytest.raises(CompetitionNotFound):
            await certificate_service.issue_bulk(424242, RECIPIENTS)

        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_empty_participant_list(self, certificate_service, make_competition):
        competition = make_competition()

        report = await certificate_service.issue_bulk(competition.id, [])

        assert report.total == 0
