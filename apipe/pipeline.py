"""Ordered chain of commands joined by anonymous pipes."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .command import Command
from .exceptions import BuilderMisuseError
from .runner import ExecutionResult, Executor, RunningPipeline


class Pipeline:
    """Builder for ``a | b | c`` style process chains.

    Stages are stored as private copies, so mutating a ``Command`` after
    handing it over does not change the pipeline. The same pipeline can be
    executed any number of times; every run is independent.
    """

    def __init__(self, stages: Iterable[Command] | None = None) -> None:
        self._stages: list[Command] = []
        for command in stages or ():
            self.add(command)

    @classmethod
    def new(cls) -> Pipeline:
        return cls()

    @classmethod
    def parse(cls, command_line: str) -> Pipeline:
        from .shell_parser import parse_pipeline

        return parse_pipeline(command_line)

    from_str = parse

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------
    def add_command(self, program: str) -> Pipeline:
        self._stages.append(Command(program))
        return self

    def add(self, command: Command) -> Pipeline:
        if not isinstance(command, Command):
            raise BuilderMisuseError(f"Expected a Command, got {type(command).__name__}")
        self._stages.append(command.copy())
        return self

    def arg(self, value: str) -> Pipeline:
        self._current().arg(value)
        return self

    def args(self, values: Iterable[str]) -> Pipeline:
        self._current().extend(values)
        return self

    def combine(self, other: Command | Pipeline) -> Pipeline:
        """Append the stages of ``other`` after the existing ones."""

        if isinstance(other, Command):
            return self.add(other)
        if isinstance(other, Pipeline):
            # Snapshot first so that ``p.combine(p)`` terminates.
            for command in list(other._stages):
                self.add(command)
            return self
        raise BuilderMisuseError(f"Cannot combine a pipeline with {type(other).__name__}")

    def pipe(self, other: Command | Pipeline) -> Pipeline:
        """Return a new pipeline; neither operand is modified."""

        return Pipeline(self._stages).combine(other)

    def __or__(self, other: Command | Pipeline) -> Pipeline:
        return self.pipe(other)

    def _current(self) -> Command:
        if not self._stages:
            raise BuilderMisuseError("No command in pipeline to add arguments to; call add_command first")
        return self._stages[-1]

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    @property
    def stages(self) -> list[Command]:
        return [command.copy() for command in self._stages]

    def argvs(self) -> list[list[str]]:
        return [command.argv for command in self._stages]

    def __len__(self) -> int:
        return len(self._stages)

    def __iter__(self) -> Iterator[Command]:
        return iter(self.stages)

    def __getitem__(self, index: int) -> Command:
        return self._stages[index].copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pipeline):
            return NotImplemented
        return self._stages == other._stages

    def __repr__(self) -> str:
        return f"Pipeline({self._stages!r})"

    def __str__(self) -> str:
        return " | ".join(str(command) for command in self._stages)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def spawn(self, executor: Executor | None = None) -> RunningPipeline:
        return (executor or Executor()).spawn(self)

    def spawn_with_output(self, executor: Executor | None = None) -> RunningPipeline:
        return (executor or Executor()).spawn_with_output(self)

    def output(self, executor: Executor | None = None) -> ExecutionResult:
        return (executor or Executor()).output(self)


__all__ = ["Pipeline"]
