"""Exception hierarchy for apipe."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .runner.common import ExecutionResult


class PipeError(Exception):
    """Base class for every error raised by apipe."""


class ParseError(PipeError, ValueError):
    """The command string could not be turned into a pipeline."""

    def __init__(
        self,
        message: str,
        *,
        segment: int | None = None,
        position: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.segment = segment
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"


class UnmatchedQuote(ParseError):
    """Input ended while a quote was still open."""


class EmptyCommand(ParseError):
    """A command segment contained no words."""


class EmptyPipeSegment(ParseError):
    """A pipe had nothing on one of its sides."""


class BuilderMisuseError(PipeError):
    """A builder method was called in a state where it makes no sense."""


class ExecError(PipeError):
    """Running a pipeline failed."""


class EmptyPipelineError(ExecError):
    """Execution was requested for a pipeline without stages."""

    def __init__(self, message: str = "Cannot execute a pipeline with no commands") -> None:
        super().__init__(message)


class SpawnError(ExecError):
    """The OS refused to start one of the stages."""

    def __init__(
        self,
        stage_index: int,
        cause: OSError | ValueError,
        program: str | None = None,
    ) -> None:
        self.stage_index = stage_index
        self.cause = cause
        self.program = program
        label = f"stage {stage_index}"
        if program:
            label = f"{label} ({program})"
        super().__init__(f"Failed to spawn {label}: {cause}")


class WaitError(ExecError):
    """The final status of a stage could not be retrieved."""

    def __init__(self, stage_index: int, cause: OSError) -> None:
        self.stage_index = stage_index
        self.cause = cause
        super().__init__(f"Failed to wait for stage {stage_index}: {cause}")


class CaptureError(ExecError):
    """Reading a captured stream failed, so the captured bytes are incomplete."""

    def __init__(self, stream: str, cause: Exception) -> None:
        self.stream = stream
        self.cause = cause
        super().__init__(f"Failed to read captured {stream}: {cause}")


class NonZeroExitError(ExecError):
    """Raised by ExecutionResult.check() when the chosen exit policy fails."""

    def __init__(self, result: "ExecutionResult", stage_index: int) -> None:
        self.result = result
        self.stage_index = stage_index
        status = result.statuses[stage_index]
        super().__init__(f"Stage {stage_index} failed: {status}")


__all__ = [
    "PipeError",
    "ParseError",
    "UnmatchedQuote",
    "EmptyCommand",
    "EmptyPipeSegment",
    "BuilderMisuseError",
    "ExecError",
    "EmptyPipelineError",
    "SpawnError",
    "WaitError",
    "CaptureError",
    "NonZeroExitError",
]
