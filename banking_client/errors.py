"""
Client error taxonomy.

Every failure a user action can run into is one of these. They are caught
at the action boundary in :mod:`banking_client.app` and turned into a
single error message.
"""

from typing import Optional


class BankingClientError(Exception):
    """Base class for all client-side failures"""


class ValidationError(BankingClientError):
    """User input rejected before any network call"""


class NotAuthenticatedError(BankingClientError):
    """Authenticated operation attempted without an active session"""
    
    def __init__(self, message: str = "Please login first"):
        super().__init__(message)


class HttpError(BankingClientError):
    """The API answered with a non-success status"""
    
    def __init__(self, status: int, status_text: str, detail: Optional[str] = None):
        self.status = status
        self.status_text = status_text
        self.detail = detail
        super().__init__(f"HTTP {status}: {status_text}")


class NetworkError(BankingClientError):
    """The request never produced a response (DNS, refused connection, timeout)"""
    
    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Network error: {cause}")


class UnexpectedResponseError(BankingClientError):
    """A success response whose body does not match the API contract"""
