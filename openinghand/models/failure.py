"""
Failure classification and response envelope.

Every error the engine raises is a KnownError carrying a FailureKind. The
HTTP layer converts them into a FailureResponse; the CLI maps them to exit
codes. Successful calls return their own response models.

Outcome types:
- KnownFailure: The engine knows why it failed (invalid query, bad deck list)
- UnknownFailure: The engine does not know why it failed

Every failure body leaves the API through `finalize_response()`.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_QUERY = "invalid_query"

    # Deck list failures
    MALFORMED_DECK_LIST = "malformed_deck_list"
    FILE_TOO_LARGE = "file_too_large"
    UNSUPPORTED_EXTENSION = "unsupported_extension"

    # Simulation lifecycle
    CANCELLED = "cancelled"

    # Internal errors (PRNG or cache invariant violated)
    INTERNAL_ERROR = "internal_error"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class FailureResponse(BaseModel):
    """Failure envelope for the HTTP endpoints and the CLI."""

    outcome: OutcomeType = Field(
        ...,
        description="Whether the failure was anticipated",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details",
    )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "FailureResponse":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )

    @classmethod
    def unknown_failure(
        cls,
        detail: str | None = None,
    ) -> "FailureResponse":
        """Create an unknown failure response."""
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message="The calculation failed for an unknown reason.",
                detail=detail,
                suggestion="If this persists, please report the issue.",
            ),
        )


# =============================================================================
# EXCEPTIONS
# =============================================================================


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the engine knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> FailureResponse:
        """Convert to a FailureResponse."""
        return FailureResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class InvalidQueryError(KnownError):
    """Raised when a query violates a deck or combo invariant."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_QUERY,
            message=message,
            detail=detail,
            suggestion="Check deck size, hand size and the card counts of each combo.",
            status_code=422,
        )


class MalformedDeckListError(KnownError):
    """Raised when a deck list cannot be parsed."""

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        detail = f"line {line_number}" if line_number is not None else None
        super().__init__(
            kind=FailureKind.MALFORMED_DECK_LIST,
            message=message,
            detail=detail,
            suggestion="Deck lists contain one numeric card id per line.",
            status_code=400,
        )


class FileTooLargeError(KnownError):
    """Raised when a deck list exceeds the size limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            kind=FailureKind.FILE_TOO_LARGE,
            message=f"File size exceeds {limit // 1024}KB limit",
            detail=f"{size} bytes",
            status_code=413,
        )


class UnsupportedExtensionError(KnownError):
    """Raised when a deck list file name lacks the .ydk extension."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(
            kind=FailureKind.UNSUPPORTED_EXTENSION,
            message="Only YDK files are supported",
            detail=filename,
            status_code=415,
        )


class SimulationCancelledError(KnownError):
    """Raised when the host cancels a running simulation."""

    def __init__(self, completed: int, total: int):
        self.completed = completed
        self.total = total
        super().__init__(
            kind=FailureKind.CANCELLED,
            message="The simulation was cancelled.",
            detail=f"{completed}/{total} trials completed",
            status_code=409,
        )


class InternalEngineError(KnownError):
    """Raised when an internal invariant of the engine is violated."""

    def __init__(self, message: str):
        super().__init__(
            kind=FailureKind.INTERNAL_ERROR,
            message=message,
            status_code=500,
        )


# =============================================================================
# RESPONSE AUTHORITY BOUNDARY
# =============================================================================


def finalize_response(response: FailureResponse) -> FailureResponse:
    """
    Check a failure response before it leaves the API.

    Raises:
        ValueError: If the response carries no failure details
    """
    if response.failure is None:
        raise ValueError(f"{response.outcome.value} response must have failure details")
    return response


def create_known_failure(error: KnownError) -> FailureResponse:
    """Create a finalized known failure response from a KnownError."""
    return finalize_response(error.to_response())


def create_unknown_failure(exception: Exception) -> FailureResponse:
    """
    Create a finalized unknown failure response from an exception.

    Only the exception type is exposed, never its message.
    """
    response = FailureResponse.unknown_failure(detail=type(exception).__name__)
    return finalize_response(response)
