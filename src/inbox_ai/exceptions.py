"""Custom exceptions for Inbox AI."""


class InboxAIError(Exception):
    """Base exception for all Inbox AI errors."""


class GmailAPIError(InboxAIError):
    """Exception raised for Gmail API related errors."""


class CalendarAPIError(InboxAIError):
    """Exception raised for Google Calendar API related errors."""


class GeminiError(InboxAIError):
    """Exception raised when a Gemini request fails."""


class ConfigurationError(InboxAIError):
    """Exception raised for configuration related errors."""


class AuthenticationError(InboxAIError):
    """Exception raised for authentication failures."""


class InsufficientScopesError(AuthenticationError):
    """Exception raised when stored credentials lack a required OAuth scope."""


class ValidationError(InboxAIError):
    """Exception raised for data validation errors."""
