"""
Schemas
File: errors.py

Purpose: Standard error taxonomy for the commitment and difficulty core.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the library."""

    # Byte layout errors
    FORMAT_ERROR = "FORMAT_ERROR"
    TRUNCATED_DATA = "TRUNCATED_DATA"
    CHECKSUM_MISMATCH = "CHECKSUM_MISMATCH"

    # Merkle & Commitment Errors
    INVALID_PROOF = "INVALID_PROOF"

    # Proof-of-work Errors
    INVALID_DIFFICULTY = "INVALID_DIFFICULTY"

    # Block container errors
    INVALID_BLOCK = "INVALID_BLOCK"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class ChainProofError(BaseModel):
    """
    Base error model for structured error communication.

    Used when an error has to cross a boundary as data (CLI JSON output,
    reports) instead of as a raised exception.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.FORMAT_ERROR],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "ChainProofException":
        """Convert this error model to a raised exception."""
        return ChainProofException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class ChainProofException(Exception):
    """
    Base exception for all library errors.

    Carries structured error information and can be converted to a
    ChainProofError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "CHAINPROOF_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> ChainProofError:
        """Convert this exception to a ChainProofError model."""
        return ChainProofError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class FormatException(ChainProofException):
    """Raised when a fixed-width field (usually a 32-byte digest) is malformed."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        expected: int | None = None,
        actual: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_name:
            full_details["field"] = field_name
        if expected is not None:
            full_details["expected"] = expected
        if actual is not None:
            full_details["actual"] = actual
        super().__init__(
            message=message,
            code=ErrorCodes.FORMAT_ERROR,
            details=full_details,
            retryable=False,
        )


class TruncatedDataException(ChainProofException):
    """Raised when fewer bytes remain than a length prefix or header demands."""

    def __init__(
        self,
        message: str,
        needed: int | None = None,
        available: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if needed is not None:
            full_details["needed"] = needed
        if available is not None:
            full_details["available"] = available
        super().__init__(
            message=message,
            code=ErrorCodes.TRUNCATED_DATA,
            details=full_details,
            retryable=False,
        )


class InvalidProofException(ChainProofException):
    """Raised when a Merkle proof is structurally inconsistent."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_PROOF,
            details=full_details,
            retryable=False,
        )


class InvalidDifficultyException(ChainProofException):
    """Raised when a compact bits value or target cannot be accepted."""

    def __init__(
        self,
        message: str,
        bits: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if bits is not None:
            full_details["bits"] = f"0x{bits:08x}"
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_DIFFICULTY,
            details=full_details,
            retryable=False,
        )


class ChecksumException(ChainProofException):
    """Raised when a Base58Check payload fails its checksum."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CHECKSUM_MISMATCH,
            details=details,
            retryable=False,
        )


class BlockValidationException(ChainProofException):
    """Raised when a block or its header fails validation."""

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if reason:
            full_details["reason"] = reason
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_BLOCK,
            details=full_details,
            retryable=False,
        )
