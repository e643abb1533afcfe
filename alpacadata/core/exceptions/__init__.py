"""Exception handling module."""

from alpacadata.core.exceptions.base import (
    AlpacaDataError,
    AuthenticationError,
    ConfigurationError,
    DataValidationError,
    NetworkError,
    PaginationLimitError,
    ProviderError,
    ResponseParseError,
    StorageError,
)
from alpacadata.core.exceptions.codes import ErrorCode

__all__ = [
    "AlpacaDataError",
    "AuthenticationError",
    "ConfigurationError",
    "DataValidationError",
    "ErrorCode",
    "NetworkError",
    "PaginationLimitError",
    "ProviderError",
    "ResponseParseError",
    "StorageError",
]
