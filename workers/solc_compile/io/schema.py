"""
Schema - Pydantic model for the compile receipt.

One receipt per solc invocation (compile_receipt.json).  Records the
request, the exact command line, the compiler identity and the outcome.

Runtime contract fields (present in every output):
  package_name, runner_version, profile_id, schema_version.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from solc_compile import PACKAGE_NAME, RUNNER_VERSION, SCHEMA_VERSION


class CompilerIdentity(BaseModel):
    """Which solc ran.  ``version`` is informational only."""
    executable_path: str
    version: Optional[str] = None


class RequestRecord(BaseModel):
    root: str
    sources: List[str]
    path_prefixes: List[str] = Field(default_factory=list)
    output_kinds: List[str] = Field(default_factory=list)


class CompileReceipt(BaseModel):
    """Invocation-level record - compile_receipt.json."""

    package_name: str = PACKAGE_NAME
    runner_version: str = RUNNER_VERSION
    schema_version: str = SCHEMA_VERSION
    profile_id: str

    request: RequestRecord
    compiler: Optional[CompilerIdentity] = None
    command_line: List[str] = Field(default_factory=list)

    succeeded: bool
    exit_code: Optional[int] = None
    duration_ms: int = 0

    verdict: str              # ACCEPT | WARN | REJECT
    reasons: List[str] = Field(default_factory=list)

    stdout: str = ""
    stderr: str = ""

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
