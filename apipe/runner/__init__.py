"""Pipeline runner package."""

from .common import ExecutionResult, ExitStatus
from .core import Executor, RunningPipeline
from .links import PipeLink

__all__ = ["Executor", "RunningPipeline", "ExecutionResult", "ExitStatus", "PipeLink"]
