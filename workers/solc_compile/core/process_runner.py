"""
Process runner - launch solc, drain both pipes concurrently, wait for exit.

Both stdout and stderr are drained by a pair of worker threads for the whole
life of the child.  Reading them one after the other (or waiting for exit
before reading) deadlocks as soon as the child fills the OS pipe buffer of
the stream nobody is reading.

``ProcessRunner.run`` returns a CompileResult for every outcome: launch
errors, timeouts, read errors and non-zero exits are all captured in the
result.  The one exception is an interrupt (Ctrl-C) while waiting for the
child: the child is killed, the result is built, and the interrupt is
re-raised as CompileInterrupted carrying that result.
"""
from __future__ import annotations

import logging
import subprocess
import time
import traceback
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum, unique
from typing import Iterable, Mapping, Optional

from solc_compile.core.stream_drain import LINE_SEPARATOR, DrainOutcome, drain_stream

logger = logging.getLogger(__name__)


@unique
class RunFailure(str, Enum):
    """Why an invocation did not succeed."""
    LAUNCH_FAILURE = "LAUNCH_FAILURE"
    INTERRUPTED_WAIT = "INTERRUPTED_WAIT"
    TIMEOUT = "TIMEOUT"
    NON_ZERO_EXIT = "NON_ZERO_EXIT"
    DRAIN_FAILURE = "DRAIN_FAILURE"


@dataclass(frozen=True)
class CompileResult:
    """Outcome of one compiler invocation.  Built once, never mutated."""

    succeeded: bool
    stdout: str
    stderr: str
    exit_code: Optional[int] = None
    failure: Optional[RunFailure] = None
    duration_ms: int = 0

    @property
    def failed(self) -> bool:
        return not self.succeeded


class CompileInterrupted(KeyboardInterrupt):
    """Interrupt raised out of ``run`` after the failed result was built."""

    def __init__(self, result: CompileResult):
        super().__init__("interrupted while waiting for the compiler")
        self.result = result


def _elapsed_ms(t0: float) -> int:
    return int((time.monotonic() - t0) * 1000)


def _collect(future: Future[DrainOutcome], name: str) -> DrainOutcome:
    """Block until the drain is done and return its outcome."""
    try:
        return future.result()
    except Exception as e:
        logger.error("Drain of %s crashed: %s", name, e, exc_info=True)
        return DrainOutcome(
            content=f"[drain of {name} failed: {type(e).__name__}: {e}]",
            error=str(e),
        )


def _kill_and_reap(process: subprocess.Popen) -> None:
    """Kill the child if it is still running and collect its exit status."""
    if process.poll() is None:
        process.kill()
    process.wait()


class ProcessRunner:
    """
    Runs one compiler command line per ``run`` call.

    Instances carry configuration only, so a single runner can be shared
    between threads and used for concurrent invocations.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            timeout: Seconds to wait for the child before killing it.
                None waits forever.
            cwd: Working directory for the child.
            env: Environment for the child (inherits ours when None).
        """
        self.timeout = timeout
        self.cwd = cwd
        self.env = dict(env) if env is not None else None

    def run(self, command_line: Iterable[str]) -> CompileResult:
        argv = list(command_line)
        t0 = time.monotonic()

        if not argv:
            logger.warning("Refusing to launch an empty command line")
            return CompileResult(
                succeeded=False,
                stdout="",
                stderr="Empty command line: no executable to launch",
                failure=RunFailure.LAUNCH_FAILURE,
                duration_ms=_elapsed_ms(t0),
            )

        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self.cwd,
                env=self.env,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            logger.warning("Could not launch %s: %s", argv[0], e)
            return CompileResult(
                succeeded=False,
                stdout="",
                stderr=traceback.format_exc(),
                failure=RunFailure.LAUNCH_FAILURE,
                duration_ms=_elapsed_ms(t0),
            )

        logger.debug("Started %s (pid %d)", argv[0], process.pid)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="solc-drain") as pool:
            stdout_drain = pool.submit(drain_stream, process.stdout, "stdout")
            stderr_drain = pool.submit(drain_stream, process.stderr, "stderr")

            try:
                exit_code = process.wait(timeout=self.timeout)
            except subprocess.TimeoutExpired:
                logger.warning("%s timed out after %ss, killing", argv[0], self.timeout)
                _kill_and_reap(process)
                _collect(stdout_drain, "stdout")
                err = _collect(stderr_drain, "stderr")
                stderr = f"TIMEOUT after {self.timeout}s"
                if err.content:
                    stderr = f"{stderr}{LINE_SEPARATOR}{err.content}"
                return CompileResult(
                    succeeded=False,
                    stdout="",
                    stderr=stderr,
                    exit_code=process.returncode,
                    failure=RunFailure.TIMEOUT,
                    duration_ms=_elapsed_ms(t0),
                )
            except KeyboardInterrupt:
                diagnostic = (
                    f"Interrupted while waiting for {argv[0]} (pid {process.pid})\n"
                    + traceback.format_exc()
                )
                logger.warning("Interrupted while waiting for pid %d, killing", process.pid)
                _kill_and_reap(process)
                result = CompileResult(
                    succeeded=False,
                    stdout="",
                    stderr=diagnostic,
                    exit_code=process.returncode,
                    failure=RunFailure.INTERRUPTED_WAIT,
                    duration_ms=_elapsed_ms(t0),
                )
                raise CompileInterrupted(result) from None

            out = _collect(stdout_drain, "stdout")
            err = _collect(stderr_drain, "stderr")

        failure: Optional[RunFailure] = None
        if out.failed or err.failed:
            failure = RunFailure.DRAIN_FAILURE
        elif exit_code != 0:
            failure = RunFailure.NON_ZERO_EXIT

        result = CompileResult(
            succeeded=failure is None,
            stdout=out.content,
            stderr=err.content,
            exit_code=exit_code,
            failure=failure,
            duration_ms=_elapsed_ms(t0),
        )

        logger.debug(
            "%s exited with %d after %d ms", argv[0], exit_code, result.duration_ms
        )
        logger.debug("solc stdout:\t%s", result.stdout)
        logger.debug("solc stderr:\t%s", result.stderr)
        return result
