"""Shared result types for pipeline runs."""

from __future__ import annotations

import signal as _signal
from dataclasses import dataclass

from ..exceptions import NonZeroExitError


@dataclass(frozen=True, slots=True)
class ExitStatus:
    """How a single stage terminated."""

    code: int | None = None
    signal: int | None = None

    @classmethod
    def from_returncode(cls, returncode: int) -> ExitStatus:
        if returncode < 0:
            return cls(signal=-returncode)
        return cls(code=returncode)

    @property
    def success(self) -> bool:
        return self.code == 0

    @property
    def shell_code(self) -> int:
        """Exit code the way a POSIX shell reports it (128 + signal)."""
        if self.signal is not None:
            return 128 + self.signal
        return self.code if self.code is not None else 1

    def __str__(self) -> str:
        if self.signal is not None:
            try:
                name = _signal.Signals(self.signal).name
            except ValueError:
                name = str(self.signal)
            return f"killed by signal {name}"
        return f"exit code {self.code}"


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Aggregated outcome of one pipeline run.

    ``stdout`` holds what the last stage wrote when output was captured.
    ``stage_stderr`` holds one buffer per stage; it is empty bytes for stages
    whose stderr was inherited.
    """

    statuses: tuple[ExitStatus, ...]
    stdout: bytes = b""
    stage_stderr: tuple[bytes, ...] = ()

    @property
    def stderr(self) -> bytes:
        return b"".join(self.stage_stderr)

    @property
    def status(self) -> ExitStatus:
        return self.statuses[-1]

    @property
    def returncode(self) -> int | None:
        return self.status.code

    @property
    def success(self) -> bool:
        return self.status.success

    @property
    def all_succeeded(self) -> bool:
        return all(status.success for status in self.statuses)

    def first_failure(self) -> int | None:
        for index, status in enumerate(self.statuses):
            if not status.success:
                return index
        return None

    def text(self, encoding: str = "utf-8", errors: str = "replace") -> str:
        return self.stdout.decode(encoding, errors)

    def check(self, *, pipefail: bool = False) -> ExecutionResult:
        """Raise NonZeroExitError if the run failed under the given policy.

        By default only the last stage decides, like a plain shell. With
        ``pipefail`` the first failing stage is reported.
        """
        if pipefail:
            failed = self.first_failure()
            if failed is not None:
                raise NonZeroExitError(self, failed)
        elif not self.success:
            raise NonZeroExitError(self, len(self.statuses) - 1)
        return self


__all__ = ["ExitStatus", "ExecutionResult"]
