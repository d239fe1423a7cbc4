"""recover_text.py
Best-effort text recovery for binary files that a structural parser could not open.
"""

import re

from src.config import PROCESSOR_DEFAULTS


def recover_text(content: bytes, min_run: int = PROCESSOR_DEFAULTS.RECOVERY_MIN_RUN) -> str:
    """
    Recover readable text from raw bytes without understanding their format.

    The bytes are decoded leniently and every run of at least ``min_run``
    printable characters is kept on its own line, similar to the Unix
    ``strings`` tool. Never raises for any input; may return an empty string.

    Args:
        content (bytes): Raw file bytes.
        min_run (int): Shortest run of printable characters to keep.

    Returns:
        str: Recovered lines joined by newlines.
    """
    if not content:
        return ""

    decoded = content.decode("utf-8", errors="replace")
    pattern = re.compile(r"[^\x00-\x08\x0b-\x1f\x7f�\n]{%d,}" % max(min_run, 1))

    runs = []
    for match in pattern.finditer(decoded):
        run = match.group(0).strip()
        if len(run) >= min_run and any(c.isalpha() for c in run):
            runs.append(run)

    return "\n".join(runs)
