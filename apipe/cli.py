"""Command-line interface for apipe."""

from __future__ import annotations

import argparse
import logging
import shlex
import sys

from .exceptions import ExecError, ParseError, SpawnError
from .pipeline import Pipeline
from .runner import ExecutionResult, Executor

logger = logging.getLogger(__name__)


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--pipefail",
        action="store_true",
        help="Exit with the status of the first failing stage instead of the last stage.",
    )
    parser.add_argument(
        "--no-capture",
        action="store_true",
        help="Let the last stage write straight to this terminal instead of buffering.",
    )
    parser.add_argument(
        "--statuses",
        action="store_true",
        help="Report the exit status of every stage on stderr.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log process spawning and pipe handling.",
    )


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s - %(name)s - %(message)s",
            stream=sys.stderr,
        )


def _exit_code(result: ExecutionResult, pipefail: bool) -> int:
    index = len(result.statuses) - 1
    if pipefail:
        failed = result.first_failure()
        if failed is not None:
            index = failed
    return result.statuses[index].shell_code


def _run_line(line: str, args: argparse.Namespace, executor: Executor) -> int:
    try:
        pipeline = Pipeline.parse(line)
    except ParseError as exc:
        sys.stderr.write(f"apipe: {exc}\n")
        return 2
    try:
        if args.no_capture:
            result = executor.spawn(pipeline).wait()
        else:
            result = executor.output(pipeline)
    except SpawnError as exc:
        sys.stderr.write(f"apipe: {exc}\n")
        return 127
    except ExecError as exc:
        sys.stderr.write(f"apipe: {exc}\n")
        return 1
    if result.stdout:
        sys.stdout.buffer.write(result.stdout)
        sys.stdout.flush()
    if result.stderr:
        sys.stderr.buffer.write(result.stderr)
        sys.stderr.flush()
    if args.statuses:
        for index, status in enumerate(result.statuses):
            sys.stderr.write(f"stage {index}: {status}\n")
    return _exit_code(result, args.pipefail)


def _run_exec(args: argparse.Namespace) -> int:
    return _run_line(args.pipeline, args, Executor())


def _run_parse(args: argparse.Namespace) -> int:
    try:
        pipeline = Pipeline.parse(args.pipeline)
    except ParseError as exc:
        sys.stderr.write(f"apipe: {exc}\n")
        return 2
    for command in pipeline:
        sys.stdout.write(f"{shlex.join(command.argv)}\n")
    return 0


def _run_shell(args: argparse.Namespace) -> int:
    executor = Executor()
    try:
        while True:
            line = input("apipe> ")
            if line.strip() in {":q", "exit", "quit"}:
                return 0
            if not line.strip():
                continue
            _run_line(line, args, executor)
    except (EOFError, KeyboardInterrupt):
        return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="apipe")
    subparsers = parser.add_subparsers(dest="command_name", required=True)

    exec_parser = subparsers.add_parser("exec", help="Run a single pipeline")
    _add_common_flags(exec_parser)
    exec_parser.add_argument("pipeline", help="Pipeline string, e.g. 'ls -la | grep py'")
    exec_parser.set_defaults(func=_run_exec)

    parse_parser = subparsers.add_parser("parse", help="Show how a pipeline string is split")
    parse_parser.add_argument("pipeline", help="Pipeline string to parse")
    parse_parser.add_argument("-v", "--verbose", action="store_true", help=argparse.SUPPRESS)
    parse_parser.set_defaults(func=_run_parse)

    shell_parser = subparsers.add_parser("shell", help="Start an interactive pipeline prompt")
    _add_common_flags(shell_parser)
    shell_parser.set_defaults(func=_run_shell)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    logger.debug("running %s", args.command_name)
    exit_code = args.func(args)
    raise SystemExit(exit_code)


__all__ = ["main"]
