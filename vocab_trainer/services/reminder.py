"""Daily reminder email built from the same task the app serves."""
from __future__ import annotations

import datetime as dt
from html import escape
from typing import Protocol
from urllib.parse import urlencode

from loguru import logger

from vocab_trainer.config import settings
from vocab_trainer.core.calendar import TZ, utc_now
from vocab_trainer.db.store import KeyValueStore
from vocab_trainer.schemas.reminder import ReminderResult
from vocab_trainer.schemas.task import DailyTask
from vocab_trainer.services.daily_task import TaskAssembler
from vocab_trainer.services.mailer import build_mailer
from vocab_trainer.services.word_source import WordSource

SESSION_START_HOUR = 10
SESSION_MINUTES = 15


class Mailer(Protocol):
    def send(self, *, recipient: str, subject: str, html: str) -> dict:  # pragma: no cover - interface definition
        ...


def _calendar_timestamp(value: dt.datetime) -> str:
    return value.astimezone(TZ).strftime("%Y%m%dT%H%M%SZ")


def build_calendar_link(
    task: DailyTask, platform_url: str, now: dt.datetime | None = None
) -> str:
    """Return a Google Calendar link for a short study session today."""

    now = now or utc_now()
    start = dt.datetime(now.year, now.month, now.day, SESSION_START_HOUR, tzinfo=TZ)
    end = start + dt.timedelta(minutes=SESSION_MINUTES)
    new_words = ", ".join(entry.item_key for entry in task.words_learned_today) or "-"
    reviews = ", ".join(item.item_key for item in task.review_queue) or "-"
    details = (
        f"New words: {new_words}\n\nReview:\n{reviews}\n\nStart studying:\n{platform_url}"
    )
    params = {
        "action": "TEMPLATE",
        "text": f"Daily vocabulary: {new_words}",
        "dates": f"{_calendar_timestamp(start)}/{_calendar_timestamp(end)}",
        "details": details,
        "location": platform_url,
    }
    return f"https://www.google.com/calendar/render?{urlencode(params)}"


def render_reminder_html(task: DailyTask, platform_url: str, calendar_link: str) -> str:
    if task.words_learned_today:
        new_words = "".join(
            f"<li><strong>{escape(entry.item_key)}</strong> - {escape(entry.translation)}</li>"
            for entry in task.words_learned_today
        )
        new_section = f"<ul>{new_words}</ul>"
    else:
        new_section = "<p>No new words today.</p>"

    if task.review_queue:
        reviews = ", ".join(escape(item.item_key) for item in task.review_queue)
    else:
        reviews = "Nothing to review today, great job!"

    return (
        '<div style="font-family: sans-serif; line-height: 1.6;">'
        "<h2>Your daily vocabulary session</h2>"
        "<h3>New words</h3>"
        f"{new_section}"
        "<h3>Review</h3>"
        f"<p>{reviews}</p>"
        '<p style="text-align: center; margin: 20px 0;">'
        f'<a href="{escape(platform_url, quote=True)}">Start studying</a></p>'
        '<p style="text-align: center; font-size: 14px;">'
        f'<a href="{escape(calendar_link, quote=True)}" target="_blank">Add to Google Calendar</a></p>'
        "</div>"
    )


class ReminderService:
    """Assemble today's task and email a digest of it."""

    def __init__(
        self,
        *,
        assembler: TaskAssembler,
        mailer: Mailer,
        recipient: str,
        platform_url: str | None = None,
    ) -> None:
        self.assembler = assembler
        self.mailer = mailer
        self.recipient = recipient
        self.platform_url = platform_url or settings.PLATFORM_URL

    def send_daily_reminder(self, now: dt.datetime | None = None) -> ReminderResult:
        now = now or utc_now()
        task = self.assembler.get_daily_task(now)
        new_words = [entry.item_key for entry in task.words_learned_today]

        if new_words:
            subject = f"Your daily {settings.TARGET_LANGUAGE} words: {', '.join(new_words)}"
        else:
            subject = f"Your daily {settings.TARGET_LANGUAGE} review"
        calendar_link = build_calendar_link(task, self.platform_url, now)
        html = render_reminder_html(task, self.platform_url, calendar_link)

        self.mailer.send(recipient=self.recipient, subject=subject, html=html)
        logger.info(
            "Daily reminder processed",
            new_words=len(new_words),
            reviews=len(task.review_queue),
        )
        return ReminderResult(
            message="Reminder email sent.",
            new_words=new_words,
            review_count=len(task.review_queue),
        )


def build_reminder_service(
    store: KeyValueStore, *, learner_id: str, word_source: WordSource
) -> ReminderService:
    """Create the reminder service from settings, raising ``NotConfigured`` when email is not set up."""

    mailer = build_mailer()
    return ReminderService(
        assembler=TaskAssembler.for_learner(store, learner_id=learner_id, word_source=word_source),
        mailer=mailer,
        recipient=settings.RECIPIENT_EMAIL,
    )
