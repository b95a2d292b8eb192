"""
Command line - build the solc argument vector for a compile request.

The argument order is fixed by the solc CLI:

    <solc> --optimize --combined-json <kinds> --allow-paths <paths>
           [prefix=path ...] [source ...]

Every path handed to solc is absolute and normalised against the project
root, so the command is independent of the caller's working directory.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Iterable, Iterator, List, Sequence, Tuple

logger = logging.getLogger(__name__)

REMAP_SEPARATOR = "="


@unique
class OutputKind(str, Enum):
    """Artifact kinds solc can emit in --combined-json mode."""
    BINARY = "bin"
    BINARY_RUNTIME = "bin-runtime"
    ABI = "abi"
    METADATA = "metadata"


class MalformedRemapEntry(ValueError):
    """A path-remap entry has no ``=`` separator."""

    def __init__(self, entry: str):
        self.entry = entry
        super().__init__(
            f"Malformed path prefix {entry!r}: expected 'prefix=path'"
        )


@dataclass(frozen=True)
class CompileRequest:
    """What to compile and which artifacts to ask solc for."""

    root: str
    sources: Tuple[str, ...]
    path_prefixes: Tuple[str, ...] = ()
    output_kinds: Tuple[OutputKind, ...] = (OutputKind.ABI, OutputKind.BINARY)

    def __post_init__(self):
        # Accept any iterable from callers, store tuples.
        object.__setattr__(self, "sources", tuple(self.sources))
        object.__setattr__(self, "path_prefixes", tuple(self.path_prefixes))
        object.__setattr__(
            self, "output_kinds", tuple(OutputKind(k) for k in self.output_kinds)
        )
        if not self.sources:
            raise ValueError("CompileRequest needs at least one source file")

    @property
    def primary_source(self) -> str:
        """Absolute path of the first source; used to pick the compiler."""
        return to_absolute_path(self.root, self.sources[0])


@dataclass(frozen=True)
class CommandLine:
    """Immutable argv for one solc invocation.  ``argv[0]`` is the executable."""

    argv: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def executable(self) -> str:
        return self.argv[0]

    def __iter__(self) -> Iterator[str]:
        return iter(self.argv)

    def __len__(self) -> int:
        return len(self.argv)

    def __getitem__(self, index):
        return self.argv[index]

    def as_list(self) -> List[str]:
        return list(self.argv)


# ── Path helpers ─────────────────────────────────────────────────────────────

def to_absolute_path(base_directory: str, path: str = "") -> str:
    """Resolve *path* against *base_directory*, normalised and absolute."""
    joined = os.path.join(base_directory, path) if path else base_directory
    return os.path.abspath(os.path.normpath(joined))


def split_remap_entry(root: str, entry: str) -> Tuple[str, str]:
    """
    Split ``prefix=path`` on the first ``=`` and make the path absolute.

    The prefix token is kept verbatim.  Raises MalformedRemapEntry when
    there is no separator.
    """
    if REMAP_SEPARATOR not in entry:
        raise MalformedRemapEntry(entry)
    prefix, path = entry.split(REMAP_SEPARATOR, 1)
    return prefix, to_absolute_path(root, path)


def resolve_remaps(root: str, path_prefixes: Iterable[str]) -> List[Tuple[str, str]]:
    """Resolve every remap entry, preserving the supplied order."""
    return [split_remap_entry(root, entry) for entry in path_prefixes]


def join_output_kinds(output_kinds: Iterable[OutputKind]) -> str:
    return ",".join(OutputKind(kind).value for kind in output_kinds)


# ── Builder ──────────────────────────────────────────────────────────────────

def build_command_line(
    root: str,
    sources: Sequence[str],
    path_prefixes: Sequence[str],
    output_kinds: Sequence[OutputKind],
    executable: str,
) -> CommandLine:
    """
    Assemble the solc argument vector.

    Parameters
    ----------
    root : str
        Project root; relative sources and remap targets resolve against it.
    sources : sequence of str
        Source files, passed to solc in the given order.
    path_prefixes : sequence of str
        ``prefix=path`` remap entries.
    output_kinds : sequence of OutputKind
        Artifacts requested via --combined-json.  May be empty, in which
        case an empty value is passed.
    executable : str
        The solc binary; used verbatim as ``argv[0]``.

    Raises
    ------
    MalformedRemapEntry
        If any remap entry lacks ``=``.  Nothing is built in that case.
    """
    remaps = resolve_remaps(root, path_prefixes)

    allow_paths = ",".join(
        [to_absolute_path(root)] + [target for _, target in remaps]
    )
    dependency_paths = [f"{prefix}={target}" for prefix, target in remaps]
    source_files = [to_absolute_path(root, source) for source in sources]

    kinds = join_output_kinds(output_kinds)
    if not kinds:
        logger.warning("No output kinds requested; solc will emit no artifacts")

    argv = [
        executable,
        "--optimize",
        "--combined-json",
        kinds,
        "--allow-paths",
        allow_paths,
    ]
    argv.extend(dependency_paths)
    argv.extend(source_files)

    logger.debug("solc command line: %s", argv)
    return CommandLine(tuple(argv))


def build_for_request(request: CompileRequest, executable: str) -> CommandLine:
    """Convenience wrapper: build the command line for a CompileRequest."""
    return build_command_line(
        request.root,
        request.sources,
        request.path_prefixes,
        request.output_kinds,
        executable,
    )
