"""Resolve the executable named by the program list."""
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from typing import Callable, Sequence

from .errors import ExchangeError

Which = Callable[[str], "str | None"]


@dataclass(frozen=True, slots=True)
class ResolvedProgram:
    """Executable located on this host together with its positional arguments."""

    requested: str
    path: str
    arguments: tuple[str, ...] = ()

    @property
    def argv(self) -> list[str]:
        return [self.path, *self.arguments]


def filter_program(program: Sequence[str]) -> tuple[str, ...]:
    """Drop blank entries, e.g. variables that evaluated to an empty string."""

    return tuple(item for item in program if item != "")


def resolve_program(
    program: Sequence[str], *, which: Which = shutil.which
) -> ResolvedProgram | ExchangeError:
    """Locate the first non-blank entry of *program* as an executable.

    Names containing a directory component are checked as paths relative to
    the current directory; bare names are searched on ``PATH``.
    """

    filtered = filter_program(program)
    if not filtered:
        return ExchangeError.program_missing()

    requested = filtered[0]
    located = which(requested)
    if located is None:
        return ExchangeError.lookup_failed(requested, describe_lookup_failure(requested))

    return ResolvedProgram(
        requested=requested,
        path=os.path.abspath(located),
        arguments=filtered[1:],
    )


def describe_lookup_failure(name: str) -> str:
    """Explain why *name* could not be resolved to an executable file."""

    if not os.path.dirname(name):
        return f'exec: "{name}": executable file not found in $PATH'
    if not os.path.exists(name):
        return f"stat {name}: no such file or directory"
    if os.path.isdir(name):
        return f"exec: {name!r}: is a directory"
    return f"exec: {name!r}: permission denied"


__all__ = ["ResolvedProgram", "describe_lookup_failure", "filter_program", "resolve_program"]
