"""
solc_compile - run the Solidity compiler and collect its output.

Builds the ``solc --combined-json`` command line for a set of sources and
runs it with both output streams drained concurrently.
"""

__version__ = "0.1.0"
PACKAGE_NAME = "solc_compile"
RUNNER_VERSION = "v0"
SCHEMA_VERSION = "0.1"
