"""Custom exception hierarchy for chorebot."""


class ChoreBotError(Exception):
    """Base exception for chorebot."""
    pass


class AuthenticationError(ChoreBotError):
    """Raised when a Slack signature or API token does not check out."""
    pass


class StateValidationError(ChoreBotError):
    """Raised when a chore state write has the wrong shape. Nothing is stored."""
    pass


class StorageError(ChoreBotError):
    """Raised when there's an issue with the SQLite entity storage."""
    pass


class UnknownOperationError(ChoreBotError):
    """Raised when the model asks for a tool that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown function: {name}")


class ToolValidationError(ChoreBotError):
    """Raised when tool arguments from the model cannot be decoded or validated."""

    def __init__(self, name: str, detail: str):
        self.name = name
        self.detail = detail
        super().__init__(f"Invalid arguments for {name}: {detail}")


class ProviderError(ChoreBotError):
    """Raised when an external provider (completion API, calendar) fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CalendarError(ProviderError):
    """Raised when the calendar API rejects a request."""
    pass


class SlackDeliveryError(ChoreBotError):
    """Raised when Slack refuses an outbound message."""
    pass
