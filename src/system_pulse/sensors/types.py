"""Probe result types.

A probe never raises past its boundary. Every fetch yields a ProbeResult:
either ProbeSuccess carrying the typed payload, or ProbeFailure carrying a
stable failure kind and a human-readable message.
"""

import asyncio
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class FailureKind(str, Enum):
    """Stable failure categories reported in the ``error`` key."""

    SOURCE_UNAVAILABLE = "source-unavailable"
    PARSE_ERROR = "parse-error"
    TIMEOUT = "timeout"
    INTERNAL_ERROR = "internal-error"


class ProbeError(Exception):
    """Base error raised by raw source readers and parsers."""

    kind: FailureKind = FailureKind.INTERNAL_ERROR


class SourceUnavailableError(ProbeError):
    """Tool, file or permission missing."""

    kind = FailureKind.SOURCE_UNAVAILABLE


class SourceParseError(ProbeError):
    """Raw output did not have the expected shape."""

    kind = FailureKind.PARSE_ERROR


class SourceTimeoutError(ProbeError):
    """External call exceeded its time bound."""

    kind = FailureKind.TIMEOUT


@dataclass(frozen=True)
class ProbeSuccess(Generic[T]):
    """Successful probe outcome."""

    value: T

    @property
    def ok(self) -> bool:  # noqa: D102
        return True


@dataclass(frozen=True)
class ProbeFailure:
    """Failed probe outcome.

    Attributes:
        kind: Stable failure category.
        message: Human-readable description.
    """

    kind: FailureKind
    message: str

    @property
    def ok(self) -> bool:  # noqa: D102
        return False

    def to_dict(self) -> dict[str, str]:
        """Serialize to the fixed ``{error, message}`` payload."""
        return {"error": self.kind.value, "message": self.message}

    @classmethod
    def from_exception(cls, error: BaseException) -> "ProbeFailure":
        """Build a failure from an exception raised while reading or parsing."""
        return cls(kind=classify_exception(error), message=describe_exception(error))


ProbeResult = Union[ProbeSuccess[T], ProbeFailure]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached probe outcome and the monotonic time its read started."""

    result: "ProbeResult[T]"
    captured_at: float

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        """True while the entry may still be served."""
        return now - self.captured_at < ttl_seconds


def classify_exception(error: BaseException) -> FailureKind:
    """Map an exception to its failure kind.

    Args:
        error: Exception raised by a reader or parser.

    Returns:
        FailureKind for the ``error`` key.
    """
    if isinstance(error, ProbeError):
        return error.kind
    # TimeoutError before OSError: it is an OSError subclass.
    if isinstance(error, (subprocess.TimeoutExpired, asyncio.TimeoutError, TimeoutError)):
        return FailureKind.TIMEOUT
    if isinstance(error, OSError):
        return FailureKind.SOURCE_UNAVAILABLE
    if isinstance(error, (ValueError, KeyError, IndexError, TypeError)):
        return FailureKind.PARSE_ERROR
    return FailureKind.INTERNAL_ERROR


def describe_exception(error: BaseException) -> str:
    """Human-readable message for an exception (falls back to its type name)."""
    if isinstance(error, subprocess.TimeoutExpired):
        cmd = error.cmd if isinstance(error.cmd, str) else " ".join(map(str, error.cmd))
        return f"'{cmd}' timed out after {error.timeout}s"
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)) and not str(error):
        return "Timed out waiting for source"
    text = str(error)
    return text or type(error).__name__


def result_to_payload(result: "ProbeResult[Any]") -> Any:
    """Serialize a result's payload, or the ``{error, message}`` dict for failures."""
    if isinstance(result, ProbeFailure):
        return result.to_dict()
    return to_jsonable(result.value)


def to_jsonable(value: Any) -> Any:
    """Convert payload models (and containers of them) to JSON-ready values."""
    if hasattr(value, "model_dump"):
        return value.model_dump(by_alias=True, mode="json", exclude_none=True)
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
