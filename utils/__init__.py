"""
Utils Module
Shared helpers: logging, exceptions, text parsing
"""
from .logger import setup_logger, get_logger, console
from .exceptions import (
    ShortformError,
    ConfigurationError,
    BrokerError,
    ConnectionNotFoundError,
    AuthenticationRequiredError,
    LLMError,
    ScriptGenerationError,
    ReviewAbortedError,
    VideoGenerationError,
    RenderTimeoutError,
    DownloadError,
)
from .parsing import (
    strip_code_fences,
    extract_json_array,
    extract_first_url,
    extract_key_terms,
    is_auth_link,
    is_http_url,
    days_ago_iso,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "console",
    "ShortformError",
    "ConfigurationError",
    "BrokerError",
    "ConnectionNotFoundError",
    "AuthenticationRequiredError",
    "LLMError",
    "ScriptGenerationError",
    "ReviewAbortedError",
    "VideoGenerationError",
    "RenderTimeoutError",
    "DownloadError",
    "strip_code_fences",
    "extract_json_array",
    "extract_first_url",
    "extract_key_terms",
    "is_auth_link",
    "is_http_url",
    "days_ago_iso",
]
