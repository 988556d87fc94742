"""
Conventional test locations for a source file.

``candidate_paths`` is deterministic and does no I/O; its output order is a
preference ranking, so callers may take the first entry as "the" suggestion.
"""
from __future__ import annotations
from typing import Collection, List, Optional


def _join(*parts: str) -> str:
    return "/".join(p for p in parts if p)


def candidate_paths(source_path: str) -> List[str]:
    """
    Enumerate plausible test-file paths for ``source_path``.

    Order:
    1. ``dir/name.test.ext``
    2. ``dir/name.spec.ext``
    3. ``dir/__tests__/name.ext``
    4. ``dir/__tests__/name.test.ext``
    5. ``dir/tests/name.ext``
    6. ``dir/test/name.ext``
    7. mirrored trees with the leftmost ``src`` segment swapped for ``test``
       and then ``tests``

    Paths without an extension produce no candidates. Duplicates are dropped,
    keeping the first occurrence.
    """
    parts = source_path.split("/")
    filename = parts[-1]
    directory = "/".join(parts[:-1])
    if "." not in filename.lstrip("."):
        return []
    stem, ext = filename.rsplit(".", 1)

    paths = [
        _join(directory, f"{stem}.test.{ext}"),
        _join(directory, f"{stem}.spec.{ext}"),
        _join(directory, "__tests__", filename),
        _join(directory, "__tests__", f"{stem}.test.{ext}"),
        _join(directory, "tests", filename),
        _join(directory, "test", filename),
    ]

    if "src" in parts:
        idx = parts.index("src")
        for replacement in ("test", "tests"):
            mirrored = list(parts)
            mirrored[idx] = replacement
            paths.append("/".join(mirrored))

    seen = set()
    out: List[str] = []
    for p in paths:
        if p not in seen:
            seen.add(p)
            out.append(p)
    return out


def first_candidate(source_path: str, exclude: Collection[str] = ()) -> Optional[str]:
    """Preferred test location for ``source_path``, skipping paths in ``exclude``."""
    for path in candidate_paths(source_path):
        if path not in exclude:
            return path
    return None
