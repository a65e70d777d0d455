"""Unit tests for assistant actions."""

from datetime import datetime
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from inbox_ai.agent.actions import (
    ActionExecutor,
    CalendarAction,
    EmailModifyAction,
    EventData,
    SendEmailAction,
    parse_action,
)
from inbox_ai.gmail.client import GmailClient
from inbox_ai.google.oauth import ALL_SCOPES, GMAIL_SCOPES, GoogleOAuth


@pytest.fixture
def executor(repository, gmail_client, calendar_client, mock_settings) -> ActionExecutor:
    return ActionExecutor(repository, gmail_client, calendar_client, settings=mock_settings)


@pytest.fixture
def stored_email(repository, make_email):
    return repository.create_email(
        make_email("msg123456", is_read=False, labels=["INBOX", "UNREAD"])
    )


def _oauth(settings, scopes) -> GoogleOAuth:
    oauth = GoogleOAuth(settings)
    oauth.set_credentials(SimpleNamespace(scopes=list(scopes), expired=False))
    return oauth


class TestParseAction:
    """Test suite for action validation."""

    def test_dispatches_on_type(self) -> None:
        assert isinstance(parse_action({"type": "star", "email_id": "e1"}), EmailModifyAction)
        assert isinstance(parse_action({"type": "send_email", "to": "a@b.c"}), SendEmailAction)
        assert isinstance(parse_action({"type": "delete_event", "event_id": "x"}), CalendarAction)

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_action({"type": "launch_rocket"})

    def test_send_email_needs_recipient(self) -> None:
        with pytest.raises(ValidationError):
            parse_action({"type": "send_email", "to": ""})


class TestEmailActions:
    """Test suite for Gmail actions."""

    @pytest.mark.asyncio
    async def test_send_email(self, executor, gmail_service) -> None:
        result = await executor.execute(
            SendEmailAction(to="bob@example.com", subject="Hi", body="Hello Bob")
        )

        assert result.success is True
        assert result.result == {"message_id": "sent-1"}
        assert len(gmail_service.messages().sent) == 1

    @pytest.mark.asyncio
    async def test_mark_read_mirrors_locally(
        self, executor, gmail_service, repository, stored_email
    ) -> None:
        result = await executor.execute(EmailModifyAction(type="mark_read", email_id=stored_email.id))

        assert result.success is True
        assert gmail_service.messages().modified == [
            ("msg123456", {"removeLabelIds": ["UNREAD"]})
        ]
        updated = repository.get_email(stored_email.id)
        assert updated.is_read is True
        assert updated.labels == ["INBOX"]

    @pytest.mark.asyncio
    async def test_star_by_gmail_message_id(self, executor, repository, stored_email) -> None:
        result = await executor.execute(EmailModifyAction(type="star", email_id="msg123456"))

        assert result.success is True
        updated = repository.get_email(stored_email.id)
        assert updated.is_starred is True
        assert updated.is_read is False
        assert "STARRED" in updated.labels

    @pytest.mark.asyncio
    async def test_archive_keeps_flags(self, executor, repository, stored_email) -> None:
        await executor.execute(EmailModifyAction(type="archive", email_id=stored_email.id))

        updated = repository.get_email(stored_email.id)
        assert updated.labels == ["UNREAD"]
        assert updated.is_read is False

    @pytest.mark.asyncio
    async def test_delete_trashes_and_removes(
        self, executor, gmail_service, repository, stored_email
    ) -> None:
        result = await executor.execute(EmailModifyAction(type="delete", email_id=stored_email.id))

        assert result.success is True
        assert gmail_service.messages().trashed == ["msg123456"]
        assert repository.get_email(stored_email.id) is None

    @pytest.mark.asyncio
    async def test_unknown_email_id_is_sent_as_message_id(self, executor, gmail_service) -> None:
        result = await executor.execute(EmailModifyAction(type="unstar", email_id="gmail-42"))

        assert result.success is True
        assert gmail_service.messages().modified[0][0] == "gmail-42"

    @pytest.mark.asyncio
    async def test_gmail_failure_becomes_result(
        self, repository, calendar_client, mock_settings
    ) -> None:
        executor = ActionExecutor(
            repository, GmailClient(mock_settings), calendar_client, settings=mock_settings
        )

        result = await executor.execute(SendEmailAction(to="bob@example.com"))

        assert result.success is False
        assert result.error


class TestCalendarActions:
    """Test suite for Calendar actions."""

    @pytest.mark.asyncio
    async def test_create_event(self, executor, calendar_service, repository, mock_settings) -> None:
        action = CalendarAction(
            type="create_event",
            event_data=EventData(
                summary="Lunch",
                start_time="2024-01-02T12:00:00",
                end_time="2024-01-02T13:00:00",
                attendees=["bob@example.com"],
            ),
        )

        result = await executor.execute(action)

        assert result.success is True
        assert result.result == {"event_id": "created-1"}
        body = calendar_service.events().inserted[0]
        assert body["start"] == {
            "dateTime": "2024-01-02T12:00:00",
            "timeZone": mock_settings.calendar_time_zone,
        }
        assert body["attendees"] == [{"email": "bob@example.com"}]
        mirrored = repository.get_calendar_event_by_event_id("created-1")
        assert mirrored.summary == "Lunch"
        assert mirrored.start_time == datetime(2024, 1, 2, 12, 0)

    @pytest.mark.asyncio
    async def test_create_event_needs_times(self, executor, calendar_service) -> None:
        result = await executor.execute(
            CalendarAction(type="create_event", event_data=EventData(summary="Lunch"))
        )

        assert result.success is False
        assert calendar_service.events().inserted == []

    @pytest.mark.asyncio
    async def test_update_event_sends_only_set_fields(
        self, executor, calendar_service, repository
    ) -> None:
        result = await executor.execute(
            CalendarAction(
                type="update_event", event_id="evt-1", event_data=EventData(summary="Renamed")
            )
        )

        assert result.success is True
        assert calendar_service.events().patched == [("evt-1", {"summary": "Renamed"})]
        assert repository.get_calendar_event_by_event_id("evt-1").summary == "Renamed"

    @pytest.mark.asyncio
    async def test_delete_event_removes_local_copy(
        self, executor, calendar_service, repository, make_event
    ) -> None:
        repository.create_calendar_event(
            make_event("evt-1", datetime(2024, 1, 1, 10), datetime(2024, 1, 1, 11))
        )

        result = await executor.execute(CalendarAction(type="delete_event", event_id="evt-1"))

        assert result.success is True
        assert calendar_service.events().deleted == ["evt-1"]
        assert repository.get_calendar_event_by_event_id("evt-1") is None

    @pytest.mark.asyncio
    async def test_invalid_configuration(self, executor) -> None:
        result = await executor.execute(
            CalendarAction(type="update_event", event_data=EventData(summary="No id"))
        )

        assert result.success is False
        assert result.error == "Invalid action configuration"

    @pytest.mark.asyncio
    async def test_missing_scopes_clears_credentials(
        self, repository, gmail_client, calendar_client, mock_settings
    ) -> None:
        oauth = _oauth(mock_settings, GMAIL_SCOPES)
        executor = ActionExecutor(
            repository, gmail_client, calendar_client, oauth=oauth, settings=mock_settings
        )

        result = await executor.execute(CalendarAction(type="delete_event", event_id="evt-1"))

        assert result.success is False
        assert "Insufficient permissions" in result.error
        assert oauth.is_authenticated is False

    @pytest.mark.asyncio
    async def test_forbidden_response_clears_credentials(
        self, repository, gmail_client, calendar_client, calendar_service, mock_settings
    ) -> None:
        oauth = _oauth(mock_settings, ALL_SCOPES)
        executor = ActionExecutor(
            repository, gmail_client, calendar_client, oauth=oauth, settings=mock_settings
        )
        calendar_service.events().error = RuntimeError("HttpError 403 Forbidden")

        result = await executor.execute(CalendarAction(type="delete_event", event_id="evt-1"))

        assert result.success is False
        assert "Insufficient permissions" in result.error
        assert oauth.is_authenticated is False

    @pytest.mark.asyncio
    async def test_other_calendar_errors_keep_credentials(
        self, repository, gmail_client, calendar_client, calendar_service, mock_settings
    ) -> None:
        oauth = _oauth(mock_settings, ALL_SCOPES)
        executor = ActionExecutor(
            repository, gmail_client, calendar_client, oauth=oauth, settings=mock_settings
        )
        calendar_service.events().error = RuntimeError("backend unavailable")

        result = await executor.execute(CalendarAction(type="delete_event", event_id="evt-1"))

        assert result.success is False
        assert result.error == "backend unavailable"
        assert oauth.is_authenticated is True
