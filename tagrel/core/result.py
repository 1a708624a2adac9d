"""Result type used by every fallible pipeline operation.

Steps never raise across module boundaries. They return ``Ok(value)`` or
``Err(error)`` and the caller decides whether to continue:

    resolved = resolve_version(reference)
    if isinstance(resolved, Err):
        return resolved
    tag = resolved.value

Pattern matching works as well:

    match package_archive(build, product=cfg.product, console=console):
        case Ok(archive):
            ...
        case Err(error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful step result.

    Attributes:
        value: What the step produced.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed step result.

    Attributes:
        error: Typed description of the failure.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Union[Ok[T], Err[E]]
