"""Single pipeline stage: one program and its arguments."""

from __future__ import annotations

import shlex
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .exceptions import BuilderMisuseError

if TYPE_CHECKING:
    from .pipeline import Pipeline


@dataclass
class Command:
    """Program name plus an ordered, append-only argument list."""

    program: str
    args: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.program, str) or not self.program:
            raise BuilderMisuseError("Command needs a non-empty program name")
        self.args = [str(value) for value in self.args]

    @classmethod
    def new(cls, program: str) -> Command:
        return cls(program)

    @classmethod
    def parse_str(cls, segment: str) -> Command:
        """Build a command from a single pipe-free segment such as ``ls -la``."""

        from .shell_parser import tokenize

        program, *args = tokenize(segment)
        return cls(program, args)

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------
    def arg(self, value: str) -> Command:
        self.args.append(str(value))
        return self

    def extend(self, values: Iterable[str]) -> Command:
        self.args.extend(str(value) for value in values)
        return self

    def pipe(self, other: Command | Pipeline) -> Pipeline:
        """Return a new pipeline running ``self`` into ``other``."""

        from .pipeline import Pipeline

        return Pipeline().add(self).combine(other)

    def __or__(self, other: Command | Pipeline) -> Pipeline:
        return self.pipe(other)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def copy(self) -> Command:
        return Command(self.program, list(self.args))

    def __str__(self) -> str:
        return shlex.join(self.argv)


__all__ = ["Command"]
