"""
Verdict - ACCEPT / WARN / REJECT for a finished compile run.

  ACCEPT  solc exited 0 and wrote nothing to stderr.
  WARN    solc exited 0 but reported diagnostics (usually warnings).
  REJECT  anything else; the reason names the RunFailure.
"""
from __future__ import annotations

from enum import Enum, unique
from typing import List, Tuple

from solc_compile.core.process_runner import CompileResult, RunFailure
from solc_compile.policy.profile import SolcProfile


@unique
class Verdict(str, Enum):
    ACCEPT = "ACCEPT"
    WARN = "WARN"
    REJECT = "REJECT"


@unique
class RejectReason(str, Enum):
    LAUNCH_FAILURE = RunFailure.LAUNCH_FAILURE.value
    INTERRUPTED_WAIT = RunFailure.INTERRUPTED_WAIT.value
    TIMEOUT = RunFailure.TIMEOUT.value
    NON_ZERO_EXIT = RunFailure.NON_ZERO_EXIT.value
    DRAIN_FAILURE = RunFailure.DRAIN_FAILURE.value


@unique
class WarnReason(str, Enum):
    COMPILER_WARNINGS = "COMPILER_WARNINGS"


def judge_result(result: CompileResult, profile: SolcProfile) -> Tuple[Verdict, List[str]]:
    """
    Classify *result* under *profile*.

    Returns (Verdict, list_of_reason_strings).
    """
    if not result.succeeded:
        failure = result.failure or RunFailure.NON_ZERO_EXIT
        return Verdict.REJECT, [RejectReason(failure.value).value]

    if profile.stderr_is_warning and result.stderr.strip():
        return Verdict.WARN, [WarnReason.COMPILER_WARNINGS.value]

    return Verdict.ACCEPT, []
