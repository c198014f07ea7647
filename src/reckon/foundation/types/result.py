"""Result and Problem: the uniform return envelope of every computation.

A Result is either present (a value) or absent, and independently carries an
ordered tuple of Problems. The two are orthogonal: a present result may still
carry ERROR problems (partial success), and an absent result with no problems
means "legitimately nothing", e.g. empty input.

Example:
    >>> ok = Result.of(42)
    >>> ok.get()
    42
    >>> failed = Result.empty(Problem("input missing"))
    >>> failed.is_present
    False
    >>> failed.map(lambda v: v + 1).problems == failed.problems
    True
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from reckon.foundation.errors import ErrorCode, ReckonError


class Severity(Enum):
    """Severity of a problem."""

    WARNING = "warning"
    """Non-critical; the value (if any) is still usable."""

    ERROR = "error"
    """Critical; callers should treat the value with suspicion."""


@dataclass(frozen=True, slots=True, eq=False)
class Problem:
    """A diagnostic record attached to a result.

    Problems compare by identity: two problems with the same message are
    still two problems.

    Attributes:
        message: Human-readable description.
        severity: WARNING or ERROR.
        exception: The underlying exception, if any.
    """

    message: str
    severity: Severity = Severity.ERROR
    exception: BaseException | None = None

    @classmethod
    def from_exception(
        cls,
        exception: BaseException,
        severity: Severity = Severity.ERROR,
    ) -> Problem:
        """Wrap an exception, using its text (or type name) as the message."""
        message = str(exception) or type(exception).__name__
        return cls(message=message, severity=severity, exception=exception)

    @classmethod
    def warning(cls, message: str, exception: BaseException | None = None) -> Problem:
        return cls(message=message, severity=Severity.WARNING, exception=exception)

    @classmethod
    def error(cls, message: str, exception: BaseException | None = None) -> Problem:
        return cls(message=message, severity=Severity.ERROR, exception=exception)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "message": self.message,
            "severity": self.severity.value,
            "exception": type(self.exception).__name__ if self.exception else None,
        }

    def __repr__(self) -> str:
        return f"Problem({self.severity.name}: {self.message!r})"


def merge_problems(*sequences: Iterable[Problem]) -> tuple[Problem, ...]:
    """Concatenate problem sequences in order, dropping repeated instances.

    De-duplication is by identity only; equal-looking problems are kept.
    """
    seen: set[int] = set()
    merged: list[Problem] = []
    for sequence in sequences:
        for problem in sequence:
            if id(problem) in seen:
                continue
            seen.add(id(problem))
            merged.append(problem)
    return tuple(merged)


_ABSENT = object()


@dataclass(frozen=True, slots=True)
class Result[T]:
    """A value-or-absent container paired with a list of problems.

    Use the constructors rather than instantiating directly:
    - Result.of(value) / Result.of(value, problems)
    - Result.empty(*problems)
    - Result.of_optional(value, *problems) for None-means-absent values
    """

    _value: Any = _ABSENT
    problems: tuple[Problem, ...] = field(default=())

    @classmethod
    def of(cls, value: T, problems: Iterable[Problem] = ()) -> Result[T]:
        """A present result, optionally with diagnostics attached."""
        return cls(value, merge_problems(problems))

    @classmethod
    def empty(cls, *problems: Problem | Iterable[Problem]) -> Result[T]:
        """An absent result.

        Accepts problems individually or as iterables of problems.
        """
        flattened: list[Problem] = []
        for item in problems:
            if isinstance(item, Problem):
                flattened.append(item)
            else:
                flattened.extend(item)
        return cls(_ABSENT, merge_problems(flattened))

    @classmethod
    def of_optional(cls, value: T | None, *problems: Problem) -> Result[T]:
        """Present unless value is None."""
        if value is None:
            return cls.empty(*problems)
        return cls.of(value, problems)

    @property
    def is_present(self) -> bool:
        return self._value is not _ABSENT

    @property
    def is_empty(self) -> bool:
        return self._value is _ABSENT

    @property
    def has_errors(self) -> bool:
        """True if any attached problem has ERROR severity."""
        return any(problem.is_error for problem in self.problems)

    @property
    def is_success(self) -> bool:
        """Present and free of ERROR problems."""
        return self.is_present and not self.has_errors

    def get(self) -> T:
        """Return the value.

        Raises:
            ReckonError: RESULT_ABSENT if there is no value.
        """
        if self._value is _ABSENT:
            cause = next((p.exception for p in self.problems if p.exception), None)
            raise ReckonError(
                ErrorCode.RESULT_ABSENT,
                context={"count": len(self.problems), "problems": [p.message for p in self.problems]},
                cause=cause if isinstance(cause, Exception) else None,
            )
        return self._value

    def or_else(self, default: T) -> T:
        return self._value if self._value is not _ABSENT else default

    def map[R](self, fn: Callable[[T], R]) -> Result[R]:
        """Apply fn to the value, keeping problems.

        Absence propagates. If fn raises, the result is absent with an
        ERROR problem wrapping the exception.
        """
        if self._value is _ABSENT:
            return Result(_ABSENT, self.problems)
        try:
            return Result(fn(self._value), self.problems)
        except Exception as e:
            return Result(_ABSENT, merge_problems(self.problems, [Problem.from_exception(e)]))

    def flat_map[R](self, fn: Callable[[T], Result[R]]) -> Result[R]:
        """Chain a result-returning function, merging both problem lists."""
        if self._value is _ABSENT:
            return Result(_ABSENT, self.problems)
        try:
            other = fn(self._value)
            if not isinstance(other, Result):
                raise TypeError(f"flat_map callback must return a Result, got {type(other).__name__}")
        except Exception as e:
            return Result(_ABSENT, merge_problems(self.problems, [Problem.from_exception(e)]))
        return Result(other._value, merge_problems(self.problems, other.problems))

    def with_problems(self, *problems: Problem | Iterable[Problem]) -> Result[T]:
        """Return a copy with extra problems appended."""
        extra: list[Problem] = []
        for item in problems:
            if isinstance(item, Problem):
                extra.append(item)
            else:
                extra.extend(item)
        return Result(self._value, merge_problems(self.problems, extra))

    def __bool__(self) -> bool:
        return self.is_present

    def __repr__(self) -> str:
        if self._value is _ABSENT:
            return f"Result.empty(problems={list(self.problems)!r})"
        return f"Result.of({self._value!r}, problems={list(self.problems)!r})"
