"""Tests for the daily reminder email and its scheduled triggers."""
from __future__ import annotations

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from vocab_trainer.api.deps import get_reminder_service
from vocab_trainer.config import settings
from vocab_trainer.schemas import LedgerEntry, ProgressRecord, ReminderResult
from vocab_trainer.services import mailer as mailer_module
from vocab_trainer.services.mailer import BrevoMailer
from vocab_trainer.services.reminder import ReminderService, build_calendar_link
from vocab_trainer.tasks import reminders as reminder_tasks
from vocab_trainer.utils.exceptions import UpstreamUnavailable

from tests.conftest import NOW

TODAY = NOW.date()


class FakeMailer:
    def __init__(self, error: Exception | None = None):
        self.sent: list[dict] = []
        self.error = error

    def send(self, *, recipient, subject, html):
        if self.error is not None:
            raise self.error
        self.sent.append({"recipient": recipient, "subject": subject, "html": html})
        return {"messageId": "fake"}


@pytest.fixture()
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture()
def reminder_service(assembler, fake_mailer) -> ReminderService:
    return ReminderService(
        assembler=assembler,
        mailer=fake_mailer,
        recipient="learner@example.com",
        platform_url="https://vocab.example.com",
    )


@pytest.fixture()
def cron_secret(monkeypatch) -> str:
    monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
    return "s3cret"


def test_reminder_email_lists_new_words_and_reviews(reminder_service, fake_mailer, progress_service):
    progress_service.save_record(
        ProgressRecord(item_key="perro", translation="dog", next_review_date=TODAY)
    )

    result = reminder_service.send_daily_reminder(NOW)

    assert result.new_words == ["casa"]
    assert result.review_count == 1
    message = fake_mailer.sent[0]
    assert message["recipient"] == "learner@example.com"
    assert "casa" in message["subject"]
    assert "<strong>casa</strong> - house" in message["html"]
    assert "perro" in message["html"]
    assert "https://vocab.example.com" in message["html"]


def test_reminder_uses_the_same_ledger_as_the_app(reminder_service, assembler, fake_mailer):
    served = assembler.get_daily_task(NOW)

    result = reminder_service.send_daily_reminder(NOW + timedelta(hours=1))

    assert result.new_words == [item.item_key for item in served.new_item_tasks]
    assert "Nothing to review today" in fake_mailer.sent[0]["html"]


def test_reminder_html_escapes_word_content(reminder_service, fake_mailer, ledger_service):
    ledger_service.record_introduced(LedgerEntry(item_key="<b>x</b>", translation="a & b"), NOW)

    reminder_service.send_daily_reminder(NOW)

    html = fake_mailer.sent[0]["html"]
    assert "&lt;b&gt;x&lt;/b&gt;" in html
    assert "a &amp; b" in html


def test_calendar_link_covers_a_short_session_today(assembler):
    task = assembler.get_daily_task(NOW)

    link = build_calendar_link(task, "https://vocab.example.com", NOW)

    parsed = urlparse(link)
    params = parse_qs(parsed.query)
    assert parsed.netloc == "www.google.com"
    assert params["action"] == ["TEMPLATE"]
    assert params["dates"] == ["20240510T100000Z/20240510T101500Z"]
    assert params["text"] == ["Daily vocabulary: casa"]
    assert "https://vocab.example.com" in params["details"][0]


def test_daily_reminder_requires_configured_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", None)

    response = client.get("/api/v1/dailyReminder", headers={"Authorization": "Bearer anything"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Service is not configured."}


@pytest.mark.parametrize("header", [None, "Bearer wrong", "s3cret", "Basic s3cret"])
def test_daily_reminder_rejects_bad_tokens(client, cron_secret, fake_mailer, reminder_service, header):
    client.app.dependency_overrides[get_reminder_service] = lambda: reminder_service
    headers = {"Authorization": header} if header else {}

    response = client.get("/api/v1/dailyReminder", headers=headers)

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert fake_mailer.sent == []


def test_daily_reminder_sends_email(client, cron_secret, fake_mailer, reminder_service):
    client.app.dependency_overrides[get_reminder_service] = lambda: reminder_service

    response = client.get("/api/v1/dailyReminder", headers={"Authorization": f"Bearer {cron_secret}"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["reviewCount"] == 0
    assert len(payload["newWords"]) == 1
    assert len(fake_mailer.sent) == 1


def test_daily_reminder_without_mail_configuration(client, cron_secret, monkeypatch):
    monkeypatch.setattr(settings, "BREVO_API_KEY", None)

    response = client.get("/api/v1/dailyReminder", headers={"Authorization": f"Bearer {cron_secret}"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Service is not configured."}


def test_daily_reminder_mail_failure(client, cron_secret, assembler):
    service = ReminderService(
        assembler=assembler,
        mailer=FakeMailer(error=UpstreamUnavailable("brevo down")),
        recipient="learner@example.com",
    )
    client.app.dependency_overrides[get_reminder_service] = lambda: service

    response = client.get("/api/v1/dailyReminder", headers={"Authorization": f"Bearer {cron_secret}"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to send reminder"}


def test_brevo_mailer_posts_message(monkeypatch):
    captured: list[httpx.Request] = []
    real_client = httpx.Client

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(201, json={"messageId": "<abc@brevo>"})

    monkeypatch.setattr(
        mailer_module.httpx,
        "Client",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    mailer = BrevoMailer(api_key="brevo-key", sender_email="bot@example.com")

    reply = mailer.send(recipient="learner@example.com", subject="Hola", html="<p>hi</p>")

    assert reply == {"messageId": "<abc@brevo>"}
    request = captured[0]
    assert request.url.path == "/v3/smtp/email"
    assert request.headers["api-key"] == "brevo-key"


def test_brevo_mailer_rejected_message(monkeypatch):
    real_client = httpx.Client
    monkeypatch.setattr(
        mailer_module.httpx,
        "Client",
        lambda **kwargs: real_client(
            transport=httpx.MockTransport(lambda request: httpx.Response(400, json={"code": "invalid"})),
            **kwargs,
        ),
    )
    mailer = BrevoMailer(api_key="brevo-key", sender_email="bot@example.com")

    with pytest.raises(UpstreamUnavailable):
        mailer.send(recipient="learner@example.com", subject="Hola", html="<p>hi</p>")


def test_celery_task_sends_reminder(monkeypatch, store, word_source):
    calls = {}

    class RecordingService:
        def send_daily_reminder(self):
            return ReminderResult(message="Reminder email sent.", new_words=["casa"], review_count=2)

    def fake_build(kv_store, *, learner_id, word_source):
        calls["store"] = kv_store
        calls["learner_id"] = learner_id
        return RecordingService()

    monkeypatch.setattr(reminder_tasks, "get_store", lambda: store)
    monkeypatch.setattr(reminder_tasks, "build_word_source", lambda: word_source)
    monkeypatch.setattr(reminder_tasks, "build_reminder_service", fake_build)

    result = reminder_tasks.send_daily_reminder.run("learner-42")

    assert calls == {"store": store, "learner_id": "learner-42"}
    assert result == {
        "success": True,
        "message": "Reminder email sent.",
        "newWords": ["casa"],
        "reviewCount": 2,
    }
