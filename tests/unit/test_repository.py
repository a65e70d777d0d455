"""Unit tests shared by the in-memory and SQLite repositories."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from inbox_ai.models import (
    ChatMessageCreate,
    ChatRole,
    EmailCategory,
    TaskCreate,
    TaskPriority,
    TaskStatus,
)
from inbox_ai.storage import InMemoryRepository, Repository, SqliteRepository

NOW = datetime(2024, 1, 3, 12, 0)  # Wednesday


@pytest.fixture(params=["memory", "sqlite"])
def repo(request: pytest.FixtureRequest, tmp_path) -> Repository:
    if request.param == "memory":
        return InMemoryRepository()
    sqlite_repo = SqliteRepository(tmp_path / "inbox.sqlite3")
    sqlite_repo.initialize()
    return sqlite_repo


class TestEmails:
    """Email storage behaviour."""

    def test_create_and_get(self, repo: Repository, make_email) -> None:
        """Test that a created email can be read back by both ids."""
        created = repo.create_email(make_email("m1", labels=["INBOX"]))

        assert created.id
        assert repo.get_email(created.id) == created
        assert repo.get_email_by_message_id("m1") == created

    def test_unknown_ids_return_none(self, repo: Repository) -> None:
        """Test not-found behaviour."""
        assert repo.get_email("missing") is None
        assert repo.get_email_by_message_id("missing") is None
        assert repo.update_email("missing", {"is_read": True}) is None
        assert repo.delete_email("missing") is False

    def test_create_upserts_on_message_id(self, repo: Repository, make_email) -> None:
        """Test that re-syncing a message replaces it and keeps its id."""
        first = repo.create_email(make_email("m1", subject="Old"))
        second = repo.create_email(make_email("m1", subject="New"))

        assert second.id == first.id
        assert second.subject == "New"
        assert len(repo.get_emails()) == 1

    def test_emails_sorted_newest_first(self, repo: Repository, make_email) -> None:
        """Test email ordering by date."""
        repo.create_email(make_email("old", date=datetime(2024, 1, 1)))
        repo.create_email(make_email("new", date=datetime(2024, 1, 3)))
        repo.create_email(make_email("mid", date=datetime(2024, 1, 2)))

        assert [e.message_id for e in repo.get_emails()] == ["new", "mid", "old"]

    def test_update_merges_fields(self, repo: Repository, make_email) -> None:
        """Test partial update and id stability."""
        created = repo.create_email(make_email("m1"))

        updated = repo.update_email(created.id, {"is_read": True, "id": "hijack"})

        assert updated is not None
        assert updated.id == created.id
        assert updated.is_read is True
        assert updated.subject == created.subject
        assert repo.get_email(created.id).is_read is True

    def test_delete(self, repo: Repository, make_email) -> None:
        """Test deleting an email."""
        created = repo.create_email(make_email("m1"))

        assert repo.delete_email(created.id) is True
        assert repo.get_email(created.id) is None
        assert repo.get_email_by_message_id("m1") is None

    def test_returned_records_are_copies(self, repo: Repository, make_email) -> None:
        """Test that mutating a returned record does not change storage."""
        created = repo.create_email(make_email("m1", labels=["INBOX"]))

        fetched = repo.get_email(created.id)
        fetched.labels.append("MUTATED")
        fetched.subject = "changed"

        again = repo.get_email(created.id)
        assert again.labels == ["INBOX"]
        assert again.subject == created.subject

    def test_filters(self, repo: Repository, make_email) -> None:
        """Test category, urgent and unread views."""
        repo.create_email(make_email("u", category=EmailCategory.URGENT, is_urgent=True))
        repo.create_email(make_email("n", category=EmailCategory.NEWSLETTER, is_read=True))
        repo.create_email(make_email("i", category=EmailCategory.IMPORTANT))

        assert [e.message_id for e in repo.get_emails_by_category("newsletter")] == ["n"]
        assert [e.message_id for e in repo.get_urgent_emails()] == ["u"]
        assert {e.message_id for e in repo.get_unread_emails()} == {"u", "i"}

    def test_unknown_category_is_empty(self, repo: Repository, make_email) -> None:
        """Test that an unknown category name matches nothing."""
        repo.create_email(make_email("m1"))

        assert repo.get_emails_by_category("bogus") == []

    def test_update_cannot_change_message_id(self, repo: Repository, make_email) -> None:
        """Test that the natural key survives an update that tries to steal another key."""
        a = repo.create_email(make_email("m1", subject="First"))
        b = repo.create_email(make_email("m2", subject="Second"))

        updated = repo.update_email(b.id, {"message_id": "m1", "is_read": True})

        assert updated is not None
        assert updated.message_id == "m2"
        assert updated.is_read is True

        resynced = repo.create_email(make_email("m1", subject="First again"))

        assert resynced.id == a.id
        emails = repo.get_emails()
        assert len(emails) == 2
        assert {e.message_id for e in emails} == {"m1", "m2"}
        assert repo.get_email(b.id).subject == "Second"
        assert repo.get_email_by_message_id("m2").id == b.id


class TestCalendarEvents:
    """Calendar event storage behaviour."""

    def test_create_upserts_on_event_id(self, repo: Repository, make_event) -> None:
        """Test that re-syncing an event keeps a single record."""
        start = NOW + timedelta(hours=1)
        first = repo.create_calendar_event(make_event("e1", start, start + timedelta(hours=1)))
        second = repo.create_calendar_event(
            make_event("e1", start, start + timedelta(hours=2), summary="Moved")
        )

        assert second.id == first.id
        assert second.summary == "Moved"
        assert len(repo.get_calendar_events()) == 1
        assert repo.get_calendar_event_by_event_id("e1") == second

    def test_events_sorted_by_start(self, repo: Repository, make_event) -> None:
        """Test event ordering."""
        repo.create_calendar_event(make_event("late", NOW + timedelta(hours=5), NOW + timedelta(hours=6)))
        repo.create_calendar_event(make_event("early", NOW + timedelta(hours=1), NOW + timedelta(hours=2)))

        assert [e.event_id for e in repo.get_calendar_events()] == ["early", "late"]

    def test_update_and_delete(self, repo: Repository, make_event) -> None:
        """Test update and delete by surrogate id."""
        created = repo.create_calendar_event(make_event("e1", NOW, NOW + timedelta(hours=1)))

        updated = repo.update_calendar_event(created.id, {"location": "Room 1"})
        assert updated is not None
        assert updated.location == "Room 1"

        assert repo.delete_calendar_event(created.id) is True
        assert repo.delete_calendar_event(created.id) is False
        assert repo.get_calendar_event(created.id) is None

    def test_update_cannot_change_event_id(self, repo: Repository, make_event) -> None:
        """Test that an update cannot re-key an event onto another event id."""
        a = repo.create_calendar_event(make_event("e1", NOW, NOW + timedelta(hours=1)))
        b = repo.create_calendar_event(make_event("e2", NOW, NOW + timedelta(hours=1)))

        updated = repo.update_calendar_event(b.id, {"event_id": "e1", "location": "Room 2"})

        assert updated is not None
        assert updated.event_id == "e2"
        assert updated.location == "Room 2"

        resynced = repo.create_calendar_event(make_event("e1", NOW, NOW + timedelta(hours=2)))

        assert resynced.id == a.id
        assert {e.event_id for e in repo.get_calendar_events()} == {"e1", "e2"}
        assert repo.get_calendar_event_by_event_id("e2").id == b.id

    def test_upcoming_events(self, repo: Repository, make_event) -> None:
        """Test upcoming events include only future starts, soonest first, limited."""
        repo.create_calendar_event(make_event("past", NOW - timedelta(hours=2), NOW - timedelta(hours=1)))
        for i in range(3):
            start = NOW + timedelta(hours=i + 1)
            repo.create_calendar_event(make_event(f"f{i}", start, start + timedelta(minutes=30)))

        upcoming = repo.get_upcoming_events(2, now=NOW)

        assert [e.event_id for e in upcoming] == ["f0", "f1"]

    def test_today_events(self, repo: Repository, make_event) -> None:
        """Test that today's events are those starting on the local day of now."""
        repo.create_calendar_event(make_event("morning", NOW.replace(hour=8), NOW.replace(hour=9)))
        repo.create_calendar_event(
            make_event("tomorrow", NOW + timedelta(days=1), NOW + timedelta(days=1, hours=1))
        )

        assert [e.event_id for e in repo.get_today_events(now=NOW)] == ["morning"]


class TestChat:
    """Chat history behaviour."""

    def test_messages_in_insertion_order(self, repo: Repository) -> None:
        """Test chat order and strictly increasing timestamps."""
        for i in range(5):
            repo.create_chat_message(ChatMessageCreate(role=ChatRole.USER, content=f"m{i}"))

        messages = repo.get_chat_messages()

        assert [m.content for m in messages] == [f"m{i}" for i in range(5)]
        timestamps = [m.timestamp for m in messages]
        assert all(a < b for a, b in zip(timestamps, timestamps[1:]))

    def test_clear_chat_history(self, repo: Repository, make_email) -> None:
        """Test that clearing chat leaves emails alone."""
        repo.create_email(make_email("m1"))
        repo.create_chat_message(ChatMessageCreate(role=ChatRole.USER, content="hi"))

        repo.clear_chat_history()

        assert repo.get_chat_messages() == []
        assert len(repo.get_emails()) == 1

    def test_clear_all_data(self, repo: Repository, make_email, make_event) -> None:
        """Test that clearing everything empties every collection."""
        repo.create_email(make_email("m1"))
        repo.create_calendar_event(make_event("e1", NOW, NOW + timedelta(hours=1)))
        repo.create_task(TaskCreate(title="Follow up"))
        repo.create_chat_message(ChatMessageCreate(role=ChatRole.USER, content="hi"))

        repo.clear_all_data()

        assert repo.get_emails() == []
        assert repo.get_calendar_events() == []
        assert repo.get_chat_messages() == []
        assert repo.get_tasks() == []


class TestTasks:
    """Task storage behaviour."""

    def test_create_and_get(self, repo: Repository) -> None:
        """Test that a new task gets an id and a creation time."""
        created = repo.create_task(TaskCreate(title="Review budget", priority=TaskPriority.HIGH))

        assert created.id
        assert created.created_at is not None
        assert created.completed_at is None
        assert repo.get_task(created.id) == created

    def test_unknown_ids(self, repo: Repository) -> None:
        """Test not-found behaviour."""
        assert repo.get_task("missing") is None
        assert repo.update_task("missing", {"title": "x"}) is None
        assert repo.delete_task("missing") is False

    def test_sorted_by_priority(self, repo: Repository) -> None:
        """Test high before medium before low."""
        repo.create_task(TaskCreate(title="low", priority=TaskPriority.LOW))
        repo.create_task(TaskCreate(title="high", priority=TaskPriority.HIGH))
        repo.create_task(TaskCreate(title="medium"))

        assert [t.title for t in repo.get_tasks()] == ["high", "medium", "low"]

    def test_created_completed_is_stamped(self, repo: Repository) -> None:
        """Test that a task created as completed records a completion time."""
        created = repo.create_task(TaskCreate(title="Done", status=TaskStatus.COMPLETED))

        assert created.completed_at == created.created_at

    def test_completion_is_stamped_once(self, repo: Repository) -> None:
        """Test that completed_at is set on first completion and then kept."""
        created = repo.create_task(TaskCreate(title="Slides"))

        done = repo.update_task(created.id, {"status": TaskStatus.COMPLETED})
        assert done.completed_at is not None

        again = repo.update_task(created.id, {"status": TaskStatus.COMPLETED, "title": "Deck"})
        assert again.completed_at == done.completed_at
        assert again.title == "Deck"

        reopened = repo.update_task(created.id, {"status": TaskStatus.IN_PROGRESS})
        assert reopened.completed_at == done.completed_at

    def test_update_keeps_server_fields(self, repo: Repository) -> None:
        """Test that id and created_at cannot be overwritten."""
        created = repo.create_task(TaskCreate(title="Slides"))

        updated = repo.update_task(
            created.id, {"id": "other", "created_at": NOW, "priority": TaskPriority.LOW}
        )

        assert updated.id == created.id
        assert updated.created_at == created.created_at
        assert updated.priority == TaskPriority.LOW

    def test_delete(self, repo: Repository) -> None:
        """Test deleting a task."""
        created = repo.create_task(TaskCreate(title="Slides"))

        assert repo.delete_task(created.id) is True
        assert repo.get_task(created.id) is None
        assert repo.delete_task(created.id) is False

    def test_views(self, repo: Repository) -> None:
        """Test pending, priority and due-today views."""
        repo.create_task(TaskCreate(title="open", status=TaskStatus.PENDING, due_date=NOW))
        repo.create_task(TaskCreate(title="busy", status=TaskStatus.IN_PROGRESS))
        repo.create_task(
            TaskCreate(
                title="done",
                status=TaskStatus.COMPLETED,
                priority=TaskPriority.HIGH,
                due_date=NOW + timedelta(days=1),
            )
        )

        assert {t.title for t in repo.get_pending_tasks()} == {"open", "busy"}
        assert [t.title for t in repo.get_tasks_by_priority("high")] == ["done"]
        assert repo.get_tasks_by_priority("urgent") == []
        assert [t.title for t in repo.get_tasks_due_today(now=NOW)] == ["open"]


class TestAnalytics:
    """Analytics derived through the repository."""

    def test_email_analytics_totals(self, repo: Repository, make_email) -> None:
        """Test totals and that the total matches the number of stored emails."""
        repo.create_email(make_email("a", category=EmailCategory.URGENT, is_urgent=True, date=NOW))
        repo.create_email(make_email("b", category=EmailCategory.SOCIAL, is_read=True, date=NOW))
        repo.create_email(make_email("a", category=EmailCategory.URGENT, is_urgent=True, date=NOW))

        analytics = repo.get_email_analytics(now=NOW)

        assert analytics.total_emails == len(repo.get_emails()) == 2
        assert analytics.unread_count == 1
        assert analytics.urgent_count == 1
        assert analytics.category_breakdown.urgent == 1
        assert analytics.category_breakdown.social == 1

    def test_calendar_analytics(self, repo: Repository, make_event) -> None:
        """Test counts and analytics free slots."""
        repo.create_calendar_event(make_event("today", NOW.replace(hour=14), NOW.replace(hour=15)))
        repo.create_calendar_event(
            make_event("next-week", NOW + timedelta(days=8), NOW + timedelta(days=8, hours=1))
        )

        analytics = repo.get_calendar_analytics(now=NOW)

        assert analytics.upcoming_events == 2
        assert analytics.today_events == 1
        assert analytics.week_events == 1
        assert 0 < len(analytics.free_slots) <= 5

    def test_dashboard_data(self, repo: Repository, make_email, make_event) -> None:
        """Test that the dashboard reflects stored emails, events and tasks."""
        repo.create_email(make_email("a", category=EmailCategory.URGENT, is_urgent=True, date=NOW))
        repo.create_calendar_event(
            make_event("standup", NOW.replace(hour=15), NOW.replace(hour=15, minute=30))
        )
        repo.create_task(TaskCreate(title="Slides", priority=TaskPriority.HIGH))

        dashboard = repo.get_dashboard_data(now=NOW)

        assert dashboard.greeting == "Good afternoon"
        assert dashboard.summary.urgent_emails == 1
        assert dashboard.summary.today_meetings == 1
        assert dashboard.summary.pending_tasks == 1
        assert [i.type.value for i in dashboard.urgent_items] == ["email", "event", "task"]
        assert dashboard.upcoming_events[0].start_time == "3:00 PM"
