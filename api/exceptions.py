"""Custom exceptions and error handling."""

from typing import Any

from fastapi import status


class OntologizerError(Exception):
    """Base exception for the Ontologizer service."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InputError(OntologizerError):
    """Request input cannot be processed (bad URL, nothing to analyze)."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code="input_error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class FetchError(OntologizerError):
    """The target page could not be retrieved."""

    def __init__(
        self,
        url: str,
        reason: str | None = None,
        status_code: int | None = None,
    ):
        details: dict[str, Any] = {"url": url}
        if reason:
            details["reason"] = reason
        if status_code is not None:
            details["upstream_status"] = status_code
        super().__init__(
            message="Failed to fetch webpage content. Please check the URL and try again.",
            code="fetch_error",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details,
        )


class NotFoundError(OntologizerError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str | None = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(
            message=message,
            code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )

