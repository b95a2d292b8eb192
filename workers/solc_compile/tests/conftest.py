"""
Shared pytest fixtures for solc_compile tests.

Provides fake ``solc`` executables: small Python scripts with a shebang
pointing at the current interpreter.  They answer ``--version`` like solc
does and otherwise behave as the fixture describes (echo argv, fail,
flood a stream, hang).

Requirements:
  - a POSIX system (shebang scripts, exec bit)

Tests are automatically skipped on Windows.
"""
import os
import platform
import stat
import sys
import textwrap
from pathlib import Path

import pytest

FAKE_VERSION = "0.8.0"

COMBINED_JSON = '{"version":"0.8.0","contracts":{}}'

# Lines written by the flooding fakes: 20000 * 101 bytes ≈ 2 MB, far more
# than any OS pipe buffer.
FLOOD_LINES = 20000
FLOOD_LINE = "x" * 100


def flood_content() -> str:
    """What a drain should return for a flooded stream."""
    return "\n".join(f"{i:06d}{FLOOD_LINE}" for i in range(FLOOD_LINES))


_PREAMBLE = textwrap.dedent(f"""\
    import json
    import os
    import sys
    import time

    if sys.argv[1:] == ["--version"]:
        print("solc, the solidity compiler commandline interface")
        print("Version: {FAKE_VERSION}+commit.c7dfd78e.Linux.g++")
        sys.exit(0)
""")


def write_fake_solc(directory: Path, name: str, body: str) -> str:
    """Write an executable fake solc and return its path."""
    path = directory / name
    path.write_text(
        f"#!{sys.executable}\n" + _PREAMBLE + textwrap.dedent(body)
    )
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture(scope="session", autouse=True)
def posix_only():
    if platform.system() == "Windows":
        pytest.skip("fake solc scripts need a POSIX shebang")


@pytest.fixture
def bin_dir(tmp_path) -> Path:
    d = tmp_path / "bin"
    d.mkdir()
    return d


@pytest.fixture
def solc_ok(bin_dir) -> str:
    """Prints a minimal combined-json document, exits 0."""
    return write_fake_solc(bin_dir, "solc_ok", f"""\
        sys.stdout.write({COMBINED_JSON!r} + "\\n")
        sys.exit(0)
    """)


@pytest.fixture
def solc_echo(bin_dir) -> str:
    """Prints its own arguments as a JSON list, exits 0."""
    return write_fake_solc(bin_dir, "solc_echo", """\
        print(json.dumps(sys.argv[1:]))
    """)


@pytest.fixture
def solc_fail(bin_dir) -> str:
    """Reports a parser error on stderr, exits 1."""
    return write_fake_solc(bin_dir, "solc_fail", """\
        sys.stderr.write("Error: Expected ';' but got '}'\\n")
        sys.stderr.write(" --> A.sol:3:1:\\n")
        sys.exit(1)
    """)


@pytest.fixture
def solc_fail_with_stdout(bin_dir) -> str:
    """Writes a JSON document on stdout yet exits non-zero."""
    return write_fake_solc(bin_dir, "solc_fail_stdout", f"""\
        sys.stdout.write({COMBINED_JSON!r} + "\\n")
        sys.exit(3)
    """)


@pytest.fixture
def solc_warn(bin_dir) -> str:
    """Succeeds but prints a warning on stderr."""
    return write_fake_solc(bin_dir, "solc_warn", f"""\
        sys.stderr.write("Warning: SPDX license identifier not provided\\n")
        sys.stdout.write({COMBINED_JSON!r} + "\\n")
    """)


@pytest.fixture
def solc_flood_stdout(bin_dir) -> str:
    """Floods stdout well past the pipe buffer; stderr stays idle."""
    return write_fake_solc(bin_dir, "solc_flood_stdout", f"""\
        for i in range({FLOOD_LINES}):
            sys.stdout.write("%06d{FLOOD_LINE}\\n" % i)
        sys.stdout.flush()
    """)


@pytest.fixture
def solc_flood_stderr(bin_dir) -> str:
    """Floods stderr well past the pipe buffer, then prints the JSON."""
    return write_fake_solc(bin_dir, "solc_flood_stderr", f"""\
        for i in range({FLOOD_LINES}):
            sys.stderr.write("%06d{FLOOD_LINE}\\n" % i)
        sys.stderr.flush()
        sys.stdout.write({COMBINED_JSON!r} + "\\n")
    """)


@pytest.fixture
def solc_hang(bin_dir) -> str:
    """Never finishes on its own."""
    return write_fake_solc(bin_dir, "solc_hang", """\
        sys.stdout.write("started\\n")
        sys.stdout.flush()
        time.sleep(60)
    """)


@pytest.fixture
def solc_stall(bin_dir) -> str:
    """Reports progress on stderr, then never finishes."""
    return write_fake_solc(bin_dir, "solc_stall", """\
        sys.stderr.write("Compiling A.sol...\\n")
        sys.stderr.flush()
        time.sleep(60)
    """)


@pytest.fixture
def solc_marker(bin_dir, tmp_path) -> str:
    """Touches ``launched`` in tmp_path when it runs for real."""
    marker = tmp_path / "launched"
    return write_fake_solc(bin_dir, "solc_marker", f"""\
        open({str(marker)!r}, "w").close()
        sys.stdout.write({COMBINED_JSON!r} + "\\n")
    """)


@pytest.fixture
def project(tmp_path) -> Path:
    """A project root with two sources and a vendored library."""
    root = tmp_path / "proj"
    (root / "contracts").mkdir(parents=True)
    (root / "vendor").mkdir()
    (root / "contracts" / "A.sol").write_text("pragma solidity ^0.8.0;\ncontract A {}\n")
    (root / "contracts" / "B.sol").write_text("pragma solidity ^0.8.0;\ncontract B {}\n")
    return root


@pytest.fixture
def not_executable(tmp_path) -> str:
    """A file that exists but cannot be executed."""
    p = tmp_path / "solc_noexec"
    p.write_text("not a program\n")
    p.chmod(0o644)
    if os.access(str(p), os.X_OK):
        pytest.skip("running with privileges that ignore the exec bit")
    return str(p)
