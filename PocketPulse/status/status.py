"""Status definitions and exceptions for PocketPulse.

This module provides:
    - Status: enumeration of possible application states
    - STATUS_MESSAGE: user-facing messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - Specific exceptions (e.g., ServiceUnavailableException) used by the gateway and the form
"""
import enum
import logging
from typing import Dict


class Status(enum.StrEnum):
    """Enumeration of application status codes."""
    UnknownStatus = enum.auto()
    Okay = enum.auto()

    # Config status
    TrackerConfigNotFound = enum.auto()
    TrackerConfigInvalid = enum.auto()

    # Remote API status
    ServiceUnavailable = enum.auto()
    HttpStatus = enum.auto()
    ResponseInvalid = enum.auto()

    # Input status
    AmountInvalid = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status. Please check the settings.',
    Status.Okay: 'Everything is okay.',

    Status.TrackerConfigNotFound: 'Could not find the tracker config.',
    Status.TrackerConfigInvalid: 'The tracker config seems to be incomplete, or contains invalid values.',

    Status.ServiceUnavailable: 'The PocketPulse server is unavailable. Please check your connection.',
    Status.HttpStatus: 'The PocketPulse server returned an error.',
    Status.ResponseInvalid: 'The PocketPulse server returned an unexpected response.',

    Status.AmountInvalid: 'Enter a valid amount > 0',
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
    """Base exception for status-based errors in PocketPulse.

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


class TrackerConfigNotFoundException(BaseStatusException):
    """Exception raised when the tracker configuration file cannot be found."""
    status = Status.TrackerConfigNotFound


class TrackerConfigInvalidException(BaseStatusException):
    """Exception raised when the tracker configuration is invalid or malformed."""
    status = Status.TrackerConfigInvalid


class ServiceUnavailableException(BaseStatusException):
    """Exception raised when the server cannot be reached (connection refused, timeout, SSL)."""
    status = Status.ServiceUnavailable


class HttpStatusException(BaseStatusException):
    """Exception raised when the server answers with a non-success HTTP status."""
    status = Status.HttpStatus


class ResponseInvalidException(BaseStatusException):
    """Exception raised when a response body is missing an expected field."""
    status = Status.ResponseInvalid


class AmountInvalidException(BaseStatusException):
    """Exception raised when a transaction amount is not a number greater than zero."""
    status = Status.AmountInvalid
