"""Process spawning and pipe wiring for pipelines."""

from __future__ import annotations

import contextlib
import logging
import shlex
import subprocess
import threading
from typing import IO, TYPE_CHECKING

from ..exceptions import CaptureError, EmptyPipelineError, SpawnError, WaitError
from .common import ExecutionResult, ExitStatus
from .links import PipeLink

if TYPE_CHECKING:
    from ..pipeline import Pipeline

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class Executor:
    """Runs every stage of a pipeline as its own OS process.

    With output capture, the last stage's stdout is collected, and so is the
    stderr of every stage when ``capture_stderr`` is set. Without capture,
    streams that are not wired to a sibling are inherited from this process.
    """

    def __init__(
        self,
        *,
        capture_stderr: bool = True,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.capture_stderr = capture_stderr
        self.chunk_size = chunk_size

    def spawn(self, pipeline: "Pipeline") -> RunningPipeline:
        return self._start(pipeline, capture=False)

    def spawn_with_output(self, pipeline: "Pipeline") -> RunningPipeline:
        return self._start(pipeline, capture=True)

    def output(self, pipeline: "Pipeline") -> ExecutionResult:
        return self.spawn_with_output(pipeline).wait()

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------
    def _start(self, pipeline: "Pipeline", *, capture: bool) -> RunningPipeline:
        argvs = pipeline.argvs()
        if not argvs:
            raise EmptyPipelineError()
        last = len(argvs) - 1
        capture_stderr = capture and self.capture_stderr
        processes: list[subprocess.Popen[bytes]] = []

        with contextlib.ExitStack() as stack:
            links: list[PipeLink] = []
            try:
                for index, argv in enumerate(argvs):
                    stdout: int | None
                    if index < last:
                        try:
                            link = stack.enter_context(PipeLink(index))
                        except OSError as exc:
                            raise SpawnError(index, exc, argv[0]) from exc
                        links.append(link)
                        stdout = link.write_fd
                    elif capture:
                        stdout = subprocess.PIPE
                    else:
                        stdout = None
                    stdin = links[index - 1].read_fd if index > 0 else None
                    try:
                        process = subprocess.Popen(
                            argv,
                            stdin=stdin,
                            stdout=stdout,
                            stderr=subprocess.PIPE if capture_stderr else None,
                        )
                    except (OSError, ValueError) as exc:
                        # ValueError covers argv Popen rejects outright, e.g. embedded NUL bytes.
                        raise SpawnError(index, exc, argv[0]) from exc
                    processes.append(process)
                    logger.debug("spawned stage %d (pid %d): %s", index, process.pid, shlex.join(argv))
                    # The child owns these ends now; holding on to the write end
                    # would keep the next stage from ever seeing EOF.
                    if index > 0:
                        links[index - 1].close_read()
                    if index < last:
                        links[index].close_write()
            except BaseException as exc:
                stack.close()
                if isinstance(exc, SpawnError):
                    logger.warning("%s; reaping %d started stage(s)", exc, len(processes))
                _reap(processes)
                raise

        return RunningPipeline(processes, argvs, captured=capture, chunk_size=self.chunk_size)


def _reap(processes: list[subprocess.Popen[bytes]]) -> None:
    """Kill and wait on stages that were started before a failure."""
    for index, process in enumerate(processes):
        for stream in (process.stdout, process.stderr):
            if stream is not None:
                stream.close()
        if process.poll() is None:
            logger.debug("killing stage %d (pid %d)", index, process.pid)
            with contextlib.suppress(ProcessLookupError):
                process.kill()
        try:
            process.wait()
        except OSError as exc:
            logger.warning("could not reap stage %d (pid %d): %s", index, process.pid, exc)


class RunningPipeline:
    """Handle to a started pipeline.

    Captured streams are drained by background threads while the children
    run, so a stage blocked on a full pipe cannot stall ``wait()``.
    """

    def __init__(
        self,
        processes: list[subprocess.Popen[bytes]],
        argvs: list[list[str]],
        *,
        captured: bool,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._processes = processes
        self.argvs = argvs
        self.captured = captured
        self._chunk_size = chunk_size
        self._result: ExecutionResult | None = None
        self._lock = threading.Lock()
        self._stdout_chunks: list[bytes] = []
        self._stderr_chunks: list[list[bytes]] = [[] for _ in processes]
        self._readers: list[threading.Thread] = []
        self._capture_errors: list[CaptureError] = []

        final = processes[-1]
        if final.stdout is not None:
            self._start_reader(final.stdout, self._stdout_chunks, f"stdout-{len(processes) - 1}")
        for index, process in enumerate(processes):
            if process.stderr is not None:
                self._start_reader(process.stderr, self._stderr_chunks[index], f"stderr-{index}")

    def _start_reader(self, stream: IO[bytes], sink: list[bytes], label: str) -> None:
        reader = threading.Thread(
            target=self._drain,
            args=(stream, sink, label),
            name=f"apipe-{label}",
            daemon=True,
        )
        reader.start()
        self._readers.append(reader)

    def _drain(self, stream: IO[bytes], sink: list[bytes], label: str) -> None:
        try:
            with stream:
                while True:
                    chunk = stream.read1(self._chunk_size)  # type: ignore[attr-defined]
                    if not chunk:
                        break
                    sink.append(chunk)
        except (OSError, ValueError) as exc:
            logger.warning("error draining %s: %s", label, exc)
            self._capture_errors.append(CaptureError(label, exc))

    @property
    def pids(self) -> list[int]:
        return [process.pid for process in self._processes]

    @property
    def stage_count(self) -> int:
        return len(self._processes)

    def wait(self) -> ExecutionResult:
        """Block until every stage exits and return the aggregated result."""
        with self._lock:
            if self._result is None:
                self._result = self._collect()
            return self._result

    output = wait

    def _collect(self) -> ExecutionResult:
        statuses: list[ExitStatus] = []
        failure: WaitError | None = None
        # Stages may exit in any order; waiting in stage order keeps the
        # statuses aligned with the stages.
        for index, process in enumerate(self._processes):
            try:
                returncode = process.wait()
            except OSError as exc:
                logger.warning("wait failed for stage %d (pid %d): %s", index, process.pid, exc)
                if failure is None:
                    failure = WaitError(index, exc)
                continue
            status = ExitStatus.from_returncode(returncode)
            logger.debug("stage %d (pid %d) finished: %s", index, process.pid, status)
            statuses.append(status)
        for reader in self._readers:
            reader.join()
        if failure is not None:
            raise failure from failure.cause
        if self._capture_errors:
            error = self._capture_errors[0]
            raise error from error.cause
        return ExecutionResult(
            statuses=tuple(statuses),
            stdout=b"".join(self._stdout_chunks),
            stage_stderr=tuple(b"".join(chunks) for chunks in self._stderr_chunks),
        )

    def stdout(self) -> bytes:
        return self.wait().stdout

    def stderr(self) -> bytes:
        return self.wait().stderr

    def statuses(self) -> tuple[ExitStatus, ...]:
        return self.wait().statuses

    def __enter__(self) -> RunningPipeline:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.wait()

    def __repr__(self) -> str:
        commands = " | ".join(shlex.join(argv) for argv in self.argvs)
        return f"<RunningPipeline pids={self.pids} {commands!r}>"


__all__ = ["Executor", "RunningPipeline", "DEFAULT_CHUNK_SIZE"]
