"""
Writer - serialize a compile receipt to disk.

Filesystem layout per run:
    <output_dir>/compile_receipt.json
    <output_dir>/combined.json          (only when solc succeeded)
"""
from __future__ import annotations

import json
from pathlib import Path

from solc_compile.io.schema import CompileReceipt

RECEIPT_FILENAME = "compile_receipt.json"
COMBINED_JSON_FILENAME = "combined.json"


def write_outputs(receipt: CompileReceipt, output_dir: Path) -> Path:
    """
    Write the receipt, and solc's combined-json document on success,
    into *output_dir*.

    Creates *output_dir* if it does not exist.
    Returns the output directory path.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    (output_dir / RECEIPT_FILENAME).write_text(
        json.dumps(
            receipt.model_dump(mode="json"),
            indent=2,
            sort_keys=True,
        )
        + "\n"
    )

    if receipt.succeeded and receipt.stdout:
        # stored verbatim; parsing belongs to the consumer
        (output_dir / COMBINED_JSON_FILENAME).write_text(receipt.stdout + "\n")

    return output_dir
