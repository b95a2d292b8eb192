"""
Compile runner - top-level orchestration: request → solc → receipt.

Ties the resolver, command-line builder, process runner and verdict
policy together into ``run_compile``, callable from the API endpoint or
from the command line::

    python -m solc_compile.runner contracts/Token.sol \\
        --root ./project --path-prefix lib=./vendor -o out/
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from solc_compile.core.command_line import (
    CompileRequest,
    MalformedRemapEntry,
    OutputKind,
    build_for_request,
)
from solc_compile.core.process_runner import CompileInterrupted, ProcessRunner
from solc_compile.core.resolver import CompilerNotFound, StaticCompilerResolver
from solc_compile.io.schema import CompileReceipt, CompilerIdentity, RequestRecord
from solc_compile.io.writer import write_outputs
from solc_compile.policy.profile import SolcProfile
from solc_compile.policy.verdict import Verdict, judge_result

logger = logging.getLogger(__name__)


def run_compile(
    request: CompileRequest,
    resolver: Optional[StaticCompilerResolver] = None,
    profile: Optional[SolcProfile] = None,
    runner: Optional[ProcessRunner] = None,
    output_dir: Optional[Path] = None,
) -> CompileReceipt:
    """
    Compile *request* with solc and return the receipt.

    Parameters
    ----------
    request : CompileRequest
        Sources, remaps and output kinds.  An empty ``output_kinds`` falls
        back to the profile's defaults.
    resolver : StaticCompilerResolver, optional
        Picks the solc binary from the first source.  Defaults to ``solc``
        on PATH.
    profile : SolcProfile, optional
        Defaults to SolcProfile.v0().
    runner : ProcessRunner, optional
        Defaults to a runner with the profile's timeout.
    output_dir : Path, optional
        Where to write compile_receipt.json.  Nothing is written if None.

    Raises
    ------
    MalformedRemapEntry
        Before anything is launched, if a remap entry lacks ``=``.
    CompilerNotFound
        If the resolver cannot locate solc.
    CompileInterrupted
        If interrupted while waiting for solc; ``.result`` holds the
        failed result.
    """
    if profile is None:
        profile = SolcProfile.v0()
    if resolver is None:
        resolver = StaticCompilerResolver()
    if runner is None:
        runner = ProcessRunner(timeout=profile.timeout)

    if not request.output_kinds:
        request = CompileRequest(
            root=request.root,
            sources=request.sources,
            path_prefixes=request.path_prefixes,
            output_kinds=profile.output_kinds,
        )

    # ── Step 1: pick the compiler (first source only) ────────────────
    compiler = resolver.resolve(request.primary_source)
    if len(request.sources) > 1:
        logger.debug(
            "Compiler chosen from %s; %d other sources share it",
            request.sources[0], len(request.sources) - 1,
        )

    # ── Step 2: command line ─────────────────────────────────────────
    command_line = build_for_request(request, compiler.executable_path)

    # ── Step 3: run solc ─────────────────────────────────────────────
    logger.info("Compiling %d source(s) with solc %s", len(request.sources), compiler.version or "")
    result = runner.run(command_line)

    # ── Step 4: verdict + receipt ────────────────────────────────────
    verdict, reasons = judge_result(result, profile)
    if verdict == Verdict.REJECT:
        logger.warning("solc failed (%s): %s", ", ".join(reasons), result.stderr.strip()[:500])

    receipt = CompileReceipt(
        profile_id=profile.profile_id,
        request=RequestRecord(
            root=request.root,
            sources=list(request.sources),
            path_prefixes=list(request.path_prefixes),
            output_kinds=[k.value for k in request.output_kinds],
        ),
        compiler=CompilerIdentity(
            executable_path=compiler.executable_path,
            version=compiler.version,
        ),
        command_line=command_line.as_list(),
        succeeded=result.succeeded,
        exit_code=result.exit_code,
        duration_ms=result.duration_ms,
        verdict=verdict.value,
        reasons=reasons,
        stdout=result.stdout,
        stderr=result.stderr,
    )

    if output_dir:
        write_outputs(receipt, output_dir)

    return receipt


# ── CLI ──────────────────────────────────────────────────────────────────────

def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="solc_compile - run solc --combined-json over Solidity sources",
    )
    parser.add_argument(
        "sources",
        nargs="+",
        help="Solidity source files, relative to --root",
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Project root (default: current directory)",
    )
    parser.add_argument(
        "--path-prefix",
        dest="path_prefixes",
        action="append",
        default=[],
        metavar="PREFIX=PATH",
        help="Import remapping; may be repeated",
    )
    parser.add_argument(
        "--output",
        dest="output_kinds",
        action="append",
        choices=[k.value for k in OutputKind],
        default=[],
        help="Artifact kind to request; may be repeated (default: abi, bin)",
    )
    parser.add_argument(
        "--solc",
        default=None,
        help="Path to the solc executable (default: solc on PATH)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds before solc is killed",
    )
    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=None,
        help="Directory to write compile_receipt.json",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    profile = SolcProfile.v0()
    kinds: List[OutputKind] = [OutputKind(k) for k in args.output_kinds]
    timeout = args.timeout if args.timeout is not None else profile.timeout

    try:
        request = CompileRequest(
            root=args.root,
            sources=args.sources,
            path_prefixes=args.path_prefixes,
            output_kinds=kinds,
        )
        receipt = run_compile(
            request,
            resolver=StaticCompilerResolver(args.solc),
            profile=profile,
            runner=ProcessRunner(timeout=timeout),
            output_dir=args.output_dir,
        )
    except (MalformedRemapEntry, CompilerNotFound) as e:
        logger.error("%s", e)
        return 2
    except CompileInterrupted as e:
        logger.error("Interrupted: %s", e.result.stderr.splitlines()[0])
        return 130

    if receipt.verdict == Verdict.REJECT.value:
        sys.stderr.write(receipt.stderr + "\n")
        return 1

    if args.output_dir is None:
        sys.stdout.write(receipt.stdout + "\n")
    logger.info("Verdict: %s (%d ms)", receipt.verdict, receipt.duration_ms)
    return 0


if __name__ == "__main__":
    sys.exit(main())
