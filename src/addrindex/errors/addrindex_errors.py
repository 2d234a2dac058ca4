"""AddrIndexError: base exception class for all py-addrindex errors."""

from __future__ import annotations

from typing import Any


class AddrIndexError(Exception):
    """Base error for all explorer operations.

    Attributes:
        message: Human-readable description of the failed step.
        error: Underlying error text (from the node, a parser, ...).
        status_code: HTTP status code used when rendered by the API.
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        error: str = "",
        status_code: int = 400,
        code: str = "addrindex-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error = error
        self.status_code = status_code
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Body returned to clients."""
        return {"message": self.message, "error": self.error}


class ValidationError(AddrIndexError):
    """Client input rejected before any upstream call is made."""

    def __init__(self, message: str, *, error: str = "") -> None:
        super().__init__(message, error=error, status_code=400, code="invalid-input")


class PageOutOfBoundsError(AddrIndexError):
    """Requested page starts past the end of a block's transaction list."""

    def __init__(self, page: int) -> None:
        super().__init__(
            "Out of bounds",
            error=f"page {page} doesn't exist",
            status_code=400,
            code="page-out-of-bounds",
        )
        self.page = page
