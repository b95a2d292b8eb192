"""
Profile - compile defaults and how results are judged.

Keeps the knobs out of core/ so that the builder and runner carry no
opinions about which artifacts to request or how long to wait.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from solc_compile.core.command_line import OutputKind


@dataclass(frozen=True)
class SolcProfile:
    """Defaults applied to every compile run under this profile."""

    profile_id: str

    # Artifacts requested when the request does not name any
    output_kinds: Tuple[OutputKind, ...]

    # Seconds before the compiler is killed; None waits forever
    timeout: Optional[float] = None

    # Successful runs with stderr output are WARN rather than ACCEPT
    stderr_is_warning: bool = True

    @classmethod
    def v0(cls) -> "SolcProfile":
        """ABI + bytecode, the pair needed to generate contract wrappers."""
        return cls(
            profile_id="solc-combined-json-abi-bin",
            output_kinds=(OutputKind.ABI, OutputKind.BINARY),
            timeout=300,
            stderr_is_warning=True,
        )
