"""Stable error codes shared by the exception hierarchy and the CLI."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Machine readable error codes."""

    GENERAL_ERROR = "GENERAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    PAGINATION_LIMIT = "PAGINATION_LIMIT"
    STORAGE_ERROR = "STORAGE_ERROR"


__all__ = ["ErrorCode"]
