"""
Stream drain - read one child-process pipe to end-of-stream.

Each drain owns its pipe for the lifetime of the child and closes it when
done.  A read error does not propagate: the partial content is kept and a
failure marker appended, so the parent joining the drain never blocks on a
drain that died.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO, List, Optional

logger = logging.getLogger(__name__)

LINE_SEPARATOR = "\n"


@dataclass(frozen=True)
class DrainOutcome:
    """Accumulated text of one stream."""
    content: str
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def drain_stream(stream: IO[str], name: str) -> DrainOutcome:
    """
    Read *stream* line by line until EOF.

    Lines are joined with LINE_SEPARATOR; the trailing newline of the last
    line is not kept.  The stream is closed on every exit path.
    """
    lines: List[str] = []
    error: Optional[str] = None
    try:
        for line in stream:
            lines.append(line.rstrip("\r\n"))
    except (OSError, ValueError) as e:
        # ValueError: the handle was closed under us
        logger.warning("Drain of %s failed after %d lines: %s", name, len(lines), e)
        error = f"{type(e).__name__}: {e}"
    finally:
        try:
            stream.close()
        except OSError as e:
            logger.debug("Closing %s failed: %s", name, e)

    content = LINE_SEPARATOR.join(lines)
    if error is not None:
        marker = f"[drain of {name} failed: {error}]"
        content = f"{content}{LINE_SEPARATOR}{marker}" if content else marker
    return DrainOutcome(content=content, error=error)
