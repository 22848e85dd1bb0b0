"""Diffs between source markdown and its re-serialized form"""

import difflib


def roundtrip_diff(source: str, rendered: str, label: str = "source", context: int = 3) -> list[str]:
    """Return unified diff lines from source to rendered text; empty when identical.

    Lines keep their newlines; join with '' for display.
    """
    return list(difflib.unified_diff(
        source.splitlines(keepends=True),
        rendered.splitlines(keepends=True),
        fromfile=label,
        tofile=f"{label} (rendered)",
        n=context,
    ))


def count_changes(diff: list[str]) -> int:
    """Count added plus removed lines in unified diff output, ignoring file headers."""
    # the first two lines are the ---/+++ file headers
    return sum(1 for line in diff[2:] if line[:1] in ("+", "-"))
