"""
Typed outcomes of remote resource creation.

Creation calls never signal "already exists" through an exception; callers get
one of the three outcomes below and check it explicitly.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Created:
    """The resource was created; ``value`` is the decoded response body."""

    value: Any


@dataclass(frozen=True)
class AlreadyExists:
    """The provider reported a conflict for ``key``; the resource is there already."""

    key: str


@dataclass(frozen=True)
class Failed:
    """Any other failure. ``cause`` is raised by callers to abort the run."""

    cause: Exception


CreateResult = Union[Created, AlreadyExists, Failed]
