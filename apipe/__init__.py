"""apipe package: build and run anonymous pipes between programs."""

from .command import Command
from .exceptions import (
    BuilderMisuseError,
    CaptureError,
    EmptyCommand,
    EmptyPipelineError,
    EmptyPipeSegment,
    ExecError,
    NonZeroExitError,
    ParseError,
    PipeError,
    SpawnError,
    UnmatchedQuote,
    WaitError,
)
from .pipeline import Pipeline
from .runner import ExecutionResult, Executor, ExitStatus, RunningPipeline
from .shell_parser import parse_pipeline, split_segments, tokenize

__all__ = [
    "Command",
    "Pipeline",
    "Executor",
    "RunningPipeline",
    "ExecutionResult",
    "ExitStatus",
    "parse_pipeline",
    "split_segments",
    "tokenize",
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
