"""
Solc Router
Compile Solidity sources with solc --combined-json.

Project roots are resolved under the configured workspace; the compile
receipt (request, command line, verdict, stdout/stderr) is the response.
"""
import logging
import uuid
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from app.config import settings
from solc_compile.core.command_line import (  # type: ignore
    CompileRequest,
    MalformedRemapEntry,
    OutputKind,
    resolve_remaps,
    to_absolute_path,
)
from solc_compile.core.process_runner import ProcessRunner  # type: ignore
from solc_compile.core.resolver import CompilerNotFound, StaticCompilerResolver  # type: ignore
from solc_compile.io.schema import CompileReceipt  # type: ignore
from solc_compile.policy.profile import SolcProfile  # type: ignore
from solc_compile.runner import run_compile  # type: ignore

logger = logging.getLogger(__name__)


# =============================================================================
# Request/Response Models
# =============================================================================

class SolcCompileRequest(BaseModel):
    """Request to compile a set of Solidity sources."""
    root: str = Field(
        ".",
        description="Project root, relative to the workspace",
    )
    sources: List[str] = Field(
        ...,
        min_length=1,
        description="Source files relative to root; the first one picks the compiler",
    )
    path_prefixes: List[str] = Field(
        default_factory=list,
        description="Import remappings of the form prefix=path",
    )
    output_kinds: List[OutputKind] = Field(
        default_factory=list,
        description="Artifacts to request (default: abi, bin)",
    )
    write_outputs: bool = Field(
        False,
        description="Write compile_receipt.json under the artifacts root",
    )


class SolcCompileResponse(BaseModel):
    """Receipt plus where it was written, if anywhere."""
    run_id: str
    output_dir: Optional[str] = None
    receipt: CompileReceipt


# =============================================================================
# Dependencies
# =============================================================================

@lru_cache
def get_resolver() -> StaticCompilerResolver:
    """One resolver per process, configured from settings."""
    return StaticCompilerResolver(
        executable=settings.SOLC_EXECUTABLE,
        probe=settings.SOLC_PROBE_VERSION,
    )


def get_profile() -> SolcProfile:
    return SolcProfile.v0()


def _workspace() -> Path:
    return Path(settings.SOLC_WORKSPACE).resolve()


def _inside(workspace: Path, path: Path) -> bool:
    return path == workspace or workspace in path.parents


def _resolve_root(root: str) -> Path:
    """Resolve *root* under the workspace, refusing anything outside it."""
    workspace = _workspace()
    candidate = (workspace / root).resolve()
    if not _inside(workspace, candidate):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Root escapes the workspace: {root}",
        )
    if not candidate.is_dir():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project root not found: {root}",
        )
    return candidate


def _check_confined(request: CompileRequest) -> None:
    """
    Refuse sources and remap targets that resolve outside the workspace.

    Raises MalformedRemapEntry for a remap without ``=``.
    """
    workspace = _workspace()
    paths = [target for _, target in resolve_remaps(request.root, request.path_prefixes)]
    paths += [to_absolute_path(request.root, source) for source in request.sources]
    for path in paths:
        if not _inside(workspace, Path(path).resolve()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Path escapes the workspace: {path}",
            )


# =============================================================================
# Router
# =============================================================================

router = APIRouter()


@router.post(
    "/compile",
    response_model=SolcCompileResponse,
    status_code=status.HTTP_200_OK,
    summary="Run solc over the given sources and return the receipt",
)
def compile_sources(
    request: SolcCompileRequest,
    resolver: StaticCompilerResolver = Depends(get_resolver),
    profile: SolcProfile = Depends(get_profile),
):
    """
    Compile with ``solc --optimize --combined-json``.

    A failed compilation is still a 200: the receipt carries
    ``verdict=REJECT`` and solc's stderr.  Malformed remap entries are
    rejected with 422, and sources or remap targets outside the
    workspace with 400, before solc is launched.
    """
    root = _resolve_root(request.root)
    run_id = uuid.uuid4().hex[:12]

    out_dir = None
    if request.write_outputs:
        out_dir = Path(settings.receipts_root) / run_id

    compile_request = CompileRequest(
        root=str(root),
        sources=request.sources,
        path_prefixes=request.path_prefixes,
        output_kinds=request.output_kinds,
    )

    try:
        _check_confined(compile_request)
        receipt = run_compile(
            compile_request,
            resolver=resolver,
            profile=profile,
            runner=ProcessRunner(timeout=settings.SOLC_TIMEOUT),
            output_dir=out_dir,
        )
    except MalformedRemapEntry as e:
        raise HTTPException(
            status_code=422,
            detail=str(e),
        )
    except CompilerNotFound as e:
        logger.error("solc unavailable: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )

    logger.info("solc run %s: %s in %d ms", run_id, receipt.verdict, receipt.duration_ms)

    return SolcCompileResponse(
        run_id=run_id,
        output_dir=str(out_dir) if out_dir else None,
        receipt=receipt,
    )
