"""
Module 01 - Schemas
File: errors.py

Purpose: Standard error taxonomy for tree construction, proofs and config.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the package."""

    # Lifecycle Errors
    INVALID_STATE = "INVALID_STATE"

    # Input Errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Hash Capability Errors
    HASH_FAILURE = "HASH_FAILURE"

    # Merkle & Commitment Errors
    MERKLE_PROOF_INVALID = "MERKLE_PROOF_INVALID"
    ROOT_MISMATCH = "ROOT_MISMATCH"

    # Configuration Errors
    CONFIG_ERROR = "CONFIG_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class HashTreeError(BaseModel):
    """
    Base error model for structured error communication.

    Used when an error has to be reported as a value (for example by a
    service wrapping the tree) instead of being raised.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_ARGUMENT],
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
        description="Whether the operation can be retried on the same instance",
    )

    def to_exception(self) -> "HashTreeException":
        """Convert this error model to a raised exception."""
        return HashTreeException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class HashTreeException(Exception):
    """
    Base exception for all hash tree errors.

    This exception carries structured error information and can be
    converted to/from HashTreeError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "HASHTREE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> HashTreeError:
        """Convert this exception to a HashTreeError model."""
        return HashTreeError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidStateException(HashTreeException):
    """Raised when an operation is not allowed in the object's current lifecycle state."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_STATE,
            details=details,
            retryable=False,
        )


class InvalidArgumentException(HashTreeException, ValueError):
    """Raised when caller-supplied sizes, indices or leaves are invalid."""

    def __init__(
        self,
        message: str,
        argument: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if argument:
            full_details["argument"] = argument
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_ARGUMENT,
            details=full_details,
            retryable=False,
        )


class HashFailureException(HashTreeException):
    """
    Raised when the injected hash capability fails mid-operation.

    Fatal for the tree instance that was being built.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if operation:
            full_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCodes.HASH_FAILURE,
            details=full_details,
            retryable=False,
        )


class MerkleVerificationException(HashTreeException):
    """Exception raised when Merkle proof verification fails."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
        code: str = ErrorCodes.MERKLE_PROOF_INVALID,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=code,
            details=full_details,
            retryable=False,
        )


class ConfigurationException(HashTreeException):
    """Exception raised when runtime configuration is invalid."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if key:
            full_details["key"] = key
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIG_ERROR,
            details=full_details,
            retryable=False,
        )

