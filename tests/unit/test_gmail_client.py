"""Unit tests for Gmail client."""

import base64
from email import message_from_bytes

import pytest

from inbox_ai.exceptions import AuthenticationError, GmailAPIError
from inbox_ai.gmail.client import GmailClient, build_raw_message


class TestGmailClient:
    """Test suite for GmailClient class."""

    def test_gmail_client_initialization(self, mock_settings) -> None:
        """Test that Gmail client is properly initialized."""
        client = GmailClient(mock_settings)

        assert client.settings is mock_settings
        assert client._service is None

    @pytest.mark.asyncio
    async def test_list_messages_requires_authentication(self, mock_settings) -> None:
        """Test that list_messages requires a signed-in account."""
        client = GmailClient(mock_settings)

        with pytest.raises(AuthenticationError):
            await client.list_messages()

    @pytest.mark.asyncio
    async def test_get_message_requires_authentication(self, mock_settings) -> None:
        """Test that get_message requires a signed-in account."""
        client = GmailClient(mock_settings)

        with pytest.raises(AuthenticationError):
            await client.get_message("msg123")

    @pytest.mark.asyncio
    async def test_list_messages(self, gmail_client) -> None:
        """Test listing message references."""
        messages = await gmail_client.list_messages(max_results=5)

        assert messages == [{"id": "msg123456", "threadId": "thread789"}]

    @pytest.mark.asyncio
    async def test_get_message(self, gmail_client, sample_gmail_message) -> None:
        """Test fetching a full message."""
        assert await gmail_client.get_message("msg123456") == sample_gmail_message

    @pytest.mark.asyncio
    async def test_api_errors_are_wrapped(self, gmail_client, gmail_service) -> None:
        """Test that SDK failures surface as GmailAPIError."""
        gmail_service.messages().failing_ids.add("msg123456")

        with pytest.raises(GmailAPIError):
            await gmail_client.get_message("msg123456")

    @pytest.mark.asyncio
    async def test_list_errors_are_wrapped(self, gmail_client, gmail_service) -> None:
        """Test that list failures surface as GmailAPIError."""
        gmail_service.messages().list_error = RuntimeError("quota")

        with pytest.raises(GmailAPIError):
            await gmail_client.list_messages()

    @pytest.mark.asyncio
    async def test_send_message(self, gmail_client, gmail_service) -> None:
        """Test that send_message posts a raw RFC 822 message."""
        sent = await gmail_client.send_message("bob@example.com", "Hi", "Body text", cc="c@example.com")

        assert sent["id"] == "sent-1"
        raw = gmail_service.messages().sent[0]["raw"]
        parsed = message_from_bytes(base64.urlsafe_b64decode(raw + "=" * (-len(raw) % 4)))
        assert parsed["To"] == "bob@example.com"
        assert parsed["Cc"] == "c@example.com"
        assert parsed["Subject"] == "Hi"

    @pytest.mark.asyncio
    async def test_modify_labels(self, gmail_client, gmail_service) -> None:
        """Test that only non-empty label lists are sent."""
        await gmail_client.modify_labels("msg123456", remove=["UNREAD"])

        assert gmail_service.messages().modified == [("msg123456", {"removeLabelIds": ["UNREAD"]})]

    @pytest.mark.asyncio
    async def test_trash_message(self, gmail_client, gmail_service) -> None:
        """Test moving a message to the trash."""
        await gmail_client.trash_message("msg123456")

        assert gmail_service.messages().trashed == ["msg123456"]


def test_build_raw_message_has_no_padding() -> None:
    raw = build_raw_message("a@example.com", "Subject", "Body")

    assert "=" not in raw
    assert "+" not in raw and "/" not in raw
