"""Status definitions and exceptions for BudgetBar.

This module provides:
    - Status: enumeration of possible application states
    - STATUS_MESSAGE: user-facing messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - Specific exceptions (e.g., ApiException) raised by the REST client and settings
"""
import enum
import logging
from typing import Any, Dict, Optional


class Status(enum.StrEnum):
    """Enumeration of application status codes."""
    UnknownStatus = enum.auto()
    Okay = enum.auto()

    # Config status
    ClientConfigNotFound = enum.auto()
    ClientConfigInvalid = enum.auto()

    # Service status
    ServiceUnavailable = enum.auto()
    RequestFailed = enum.auto()

    # Lookup status
    MonthNotFound = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status. Please check the settings.',
    Status.Okay: 'Everything is okay.',

    Status.ClientConfigNotFound: 'Could not find the client config.',
    Status.ClientConfigInvalid: 'The client config seems to be incomplete, or contains invalid values.',

    Status.ServiceUnavailable: 'The budget service is unavailable. Please check your connection.',
    Status.RequestFailed: 'The budget service rejected the request.',

    Status.MonthNotFound: 'Could not find the requested month.',
}


def get_message(status: Status) -> str:
    """
    Get the message for a given status.

    Args:
        status (Status): The status enum.

    Returns:
        str: The message associated with the status.
    """
    return STATUS_MESSAGE.get(status, 'Unknown status')


class BaseStatusException(Exception):
    """Base exception for status-based errors in BudgetBar.

    Attributes:
        status (Status): Status code associated with this error.
        status_message (str): User-facing message for the status.

    Args:
        message (str): Optional additional context for the error.
    """
    status = Status.UnknownStatus

    def __init__(self, message: str = None):
        self.status_message = get_message(self.status)
        exception_message = f'{self.status_message} {message}' if message else self.status_message
        super().__init__(exception_message)

        logging.error(exception_message)

        from ..ui.actions import signals
        signals.error.emit(message or self.status_message)


class UnknownException(BaseStatusException):
    """Exception for an unknown error during status processing."""
    pass


class ClientConfigNotFoundException(BaseStatusException):
    """Exception raised when the client configuration file cannot be found."""
    status = Status.ClientConfigNotFound


class ClientConfigInvalidException(BaseStatusException):
    """Exception raised when the client configuration is invalid or malformed."""
    status = Status.ClientConfigInvalid


class ServiceUnavailableException(BaseStatusException):
    """Exception raised when the budget service cannot be reached."""
    status = Status.ServiceUnavailable


class ApiException(BaseStatusException):
    """Exception raised when the budget service answers with an error envelope.

    Attributes:
        code (str): Machine readable error code, e.g. ``'ENTRY_NOT_FOUND'``.
        details (dict): Optional error details sent by the service.
        http_status (int): The HTTP status code, if known.
    """
    status = Status.RequestFailed

    def __init__(self, code: str, details: Optional[Dict[str, Any]] = None,
                 http_status: Optional[int] = None):
        self.code = code
        self.details = details
        self.http_status = http_status
        super().__init__(code)


class MonthNotFoundException(BaseStatusException):
    """Exception raised when a "YYYY-MM" month cannot be resolved to a month id."""
    status = Status.MonthNotFound
