"""
Custom Exceptions
Error hierarchy shared by every pipeline stage.
"""
from typing import Any, Optional


class ShortformError(Exception):
    """Base exception for the shortform pipeline."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(ShortformError):
    """Missing or invalid configuration."""
    pass


class BrokerError(ShortformError):
    """Integration broker call failed."""

    def __init__(self, message: str, toolkit: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.toolkit = toolkit


class ConnectionNotFoundError(BrokerError):
    """No active connected account for a toolkit."""
    pass


class AuthenticationRequiredError(BrokerError):
    """The agent returned a broker auth link instead of a result."""

    def __init__(self, message: str, auth_url: str, toolkit: str = None):
        super().__init__(message, toolkit=toolkit)
        self.auth_url = auth_url


class LLMError(ShortformError):
    """LLM call error."""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


class ScriptGenerationError(ShortformError):
    """Scripting stage produced no usable script."""
    pass


class ReviewAbortedError(ShortformError):
    """Review loop ended without an approved script."""
    pass


class VideoGenerationError(ShortformError):
    """Avatar video provider rejected or failed the job."""

    def __init__(self, message: str, payload: Optional[Any] = None, video_id: str = None):
        super().__init__(message)
        self.payload = payload
        self.video_id = video_id


class RenderTimeoutError(VideoGenerationError):
    """Remote job did not reach a terminal state within the attempt budget."""

    def __init__(self, message: str, video_id: str = None, attempts: int = 0, interval_s: float = 0.0):
        super().__init__(message, video_id=video_id)
        self.attempts = attempts
        self.interval_s = interval_s


class DownloadError(ShortformError):
    """Fetching a remote asset failed."""

    def __init__(self, message: str, url: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.url = url
