"""alpacadata core exception classes."""

from typing import Any

from alpacadata.core.exceptions.codes import ErrorCode


class AlpacaDataError(Exception):
    """Base class for every error raised by alpacadata."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GENERAL_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        """Initialise the error.

        Args:
            message: human readable message
            error_code: stable machine readable code
            details: extra context rendered by callers
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(AlpacaDataError):
    """Settings are missing or invalid (for example blank credentials)."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if setting:
            super_details["setting"] = setting
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR.value, super_details)
        self.setting = setting


class DataValidationError(AlpacaDataError):
    """Caller supplied arguments cannot form a valid request."""

    def __init__(
        self,
        message: str,
        validation_errors: dict[str, Any] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if validation_errors:
            super_details["validation_errors"] = validation_errors
        super().__init__(message, ErrorCode.VALIDATION_ERROR.value, super_details)
        self.validation_errors = validation_errors or {}


class ProviderError(AlpacaDataError):
    """Errors originating from the market data provider."""

    def __init__(
        self,
        message: str,
        provider_name: str = "alpaca",
        error_code: str = ErrorCode.PROVIDER_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code, details)
        self.provider_name = provider_name


class NetworkError(ProviderError):
    """Transport failure or a non-2xx response."""

    def __init__(
        self,
        message: str,
        provider_name: str = "alpaca",
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, provider_name, ErrorCode.NETWORK_ERROR.value, super_details)
        self.status_code = status_code


class AuthenticationError(NetworkError):
    """The provider rejected the supplied credentials."""

    def __init__(
        self,
        message: str,
        provider_name: str = "alpaca",
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, provider_name, status_code, details)
        self.error_code = ErrorCode.AUTHENTICATION_ERROR.value


class ResponseParseError(ProviderError):
    """A response body is not valid JSON or does not match the expected shape."""

    def __init__(
        self,
        message: str,
        response_kind: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if response_kind:
            super_details["response_kind"] = response_kind
        super().__init__(message, "alpaca", ErrorCode.PARSE_ERROR.value, super_details)
        self.response_kind = response_kind


class PaginationLimitError(ProviderError):
    """The provider kept returning page tokens past the configured page bound."""

    def __init__(
        self,
        message: str,
        max_pages: int,
        records: list[Any] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["max_pages"] = max_pages
        super().__init__(message, "alpaca", ErrorCode.PAGINATION_LIMIT.value, super_details)
        self.max_pages = max_pages
        self.records = records or []


class StorageError(AlpacaDataError):
    """Database failures other than ignored key conflicts."""

    def __init__(
        self,
        message: str,
        table: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if table:
            super_details["table"] = table
        super().__init__(message, ErrorCode.STORAGE_ERROR.value, super_details)
