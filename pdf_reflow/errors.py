"""
PDF Reflow Error Types and Result Handling.

This module defines the exceptions raised by the reflow engine and the
Result type used by the file-level entry points and the CLI.
"""

from dataclasses import dataclass
from typing import Generic, Iterable, Optional, TypeVar, Union
from pathlib import Path


class ReflowError(Exception):
    """Base exception for all PDF reflow errors."""
    pass


class StageFailed(ReflowError):
    """A pipeline stage failed for one page or for the whole document.

    Attributes:
        stage: Name of the failing stage ("extraction", "layout", "links",
            "normalize" or "assemble")
        page: 1-based page number, or None for document-level failures
        cause: The underlying exception, if any
    """
    def __init__(self, stage: str, message: str, page: Optional[int] = None,
                 cause: Optional[BaseException] = None):
        self.stage = stage
        self.page = page
        self.cause = cause
        self.message = message
        where = f"{stage} stage" if page is None else f"{stage} stage, page {page}"
        msg = f"{message} ({where})"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class ExtractionFailed(StageFailed):
    """The source document could not be parsed (corrupt, encrypted, unsupported)."""
    def __init__(self, message: str, page: Optional[int] = None,
                 cause: Optional[BaseException] = None):
        super().__init__("extraction", message, page=page, cause=cause)


class PlaceholderLeak(ReflowError):
    """A placeholder token survived into normalized output.

    This is an invariant violation inside the normalizer, never a property
    of the input document.
    """
    def __init__(self, tokens: Iterable[str]):
        self.tokens = list(tokens)
        super().__init__(
            f"{len(self.tokens)} placeholder token(s) leaked into output: "
            + ", ".join(repr(t) for t in self.tokens[:5])
        )


class FileError(ReflowError):
    """Errors related to file operations."""
    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"{message}: {self.path}")


class ValidationError(ReflowError):
    """Errors related to input validation."""
    pass


T = TypeVar('T')
E = TypeVar('E', bound=Exception)


@dataclass
class Result(Generic[T, E]):
    """
    A Result type inspired by Rust's Result.

    Attributes:
        value: The success value if successful
        error: The error if failed
        is_ok: Whether the result is successful
    """
    _value: T | None
    _error: E | None
    is_ok: bool

    @staticmethod
    def Ok(value: T) -> 'Result[T, E]':
        """Create a successful result."""
        return Result(value, None, True)

    @staticmethod
    def Err(error: E) -> 'Result[T, E]':
        """Create a failed result."""
        return Result(None, error, False)

    @property
    def value(self) -> T:
        """Get the success value, raising the error if failed."""
        if not self.is_ok:
            raise self._error
        return self._value

    @property
    def error(self) -> E:
        """Get the error, raising ValueError if successful."""
        if self.is_ok:
            raise ValueError("Result is Ok")
        return self._error

    def unwrap_or(self, default: T) -> T:
        """Get the success value or return a default."""
        return self.value if self.is_ok else default
