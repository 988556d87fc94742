"""
Parse unified ``git diff`` output into ChangedFile records.

Only the information the relevance engine needs is extracted: the path, the
change status and the number of added/removed lines. The raw per-file diff is
kept on the record, and ``changed_functions`` pulls the names defined on its
added lines.
"""
from __future__ import annotations
from typing import List, Optional, Tuple
import re

from .models import ChangedFile, ChangeStatus

_DIFF_HEADER = re.compile(r'^diff --git a/(?P<old>.+?) b/(?P<new>.+)$')
_NEW_PATH = re.compile(r'^\+\+\+ (?:b/)?(.*)$')


def _finish(current: Optional[ChangedFile], lines: List[str], out: List[ChangedFile]) -> None:
    if current is None:
        return
    current.diff_text = "\n".join(lines)
    out.append(current)


def parse_unified_diff(text: str) -> List[ChangedFile]:
    """Split a multi-file unified diff into ChangedFile entries, in diff order."""
    changed: List[ChangedFile] = []
    current: Optional[ChangedFile] = None
    lines: List[str] = []
    in_hunk = False

    for line in text.splitlines():
        m = _DIFF_HEADER.match(line)
        if m:
            _finish(current, lines, changed)
            current = ChangedFile(path=m.group('new'))
            lines = [line]
            in_hunk = False
            continue
        if current is None:
            continue
        lines.append(line)

        if not in_hunk:
            if line.startswith('new file mode'):
                current.status = ChangeStatus.ADDED
            elif line.startswith('deleted file mode'):
                current.status = ChangeStatus.DELETED
            elif line.startswith('rename from '):
                current.status = ChangeStatus.RENAMED
                current.previous_path = line[len('rename from '):]
            elif line.startswith('rename to '):
                current.path = line[len('rename to '):]
            elif line.startswith('+++ '):
                pm = _NEW_PATH.match(line)
                # deleted files point at /dev/null; keep the header path
                if pm and pm.group(1) != '/dev/null':
                    current.path = pm.group(1)
            elif line.startswith('@@'):
                in_hunk = True
            continue

        if line.startswith('@@'):
            continue
        if line.startswith('+'):
            current.additions += 1
        elif line.startswith('-'):
            current.deletions += 1

    _finish(current, lines, changed)
    return changed


def count_changes(diff_text: str) -> Tuple[int, int]:
    """(additions, deletions) of a single-file diff body."""
    additions = deletions = 0
    in_hunk = False
    for line in diff_text.splitlines():
        if line.startswith('@@'):
            in_hunk = True
            continue
        if not in_hunk:
            continue
        if line.startswith('+'):
            additions += 1
        elif line.startswith('-'):
            deletions += 1
    return additions, deletions


# Definition lines, tried in order against the stripped text of an added line.
_DEFINITIONS = (
    re.compile(r'^(?:export\s+(?:default\s+)?)?(?:(?:public|private|protected|static|async)\s+)*function\b\s*\*?\s*(\w+)'),
    re.compile(r'^(?:async\s+)?def\s+(?:self\.)?(\w+)'),
    re.compile(r'^func\s+(?:\([^)]*\)\s*)?(\w+)'),
    re.compile(r'^(?:pub(?:\([^)]*\))?\s+)?(?:async\s+)?fn\s+(\w+)'),
    re.compile(r'^(?:(?:public|private|internal|override|suspend|open)\s+)*fun\s+(?:<[^>]*>\s*)?(?:\w+\.)?(\w+)\s*\('),
    re.compile(r'^(?:export\s+(?:default\s+)?)?(?:(?:public|private|protected|internal|abstract|final|sealed|static|data|open)\s+)*'
               r'(?:class|interface|struct|trait)\s+(\w+)'),
    re.compile(r'^(?:export\s+)?(?:const|let|var)\s+(\w+)\s*='),
    re.compile(r'^(?:(?:public|private|protected|internal|static|final|abstract|override|async|virtual|synchronized)\s+)+'
               r'[\w<>\[\],.?]+\s+(\w+)\s*\('),
)


def function_name(line: str) -> Optional[str]:
    """Name declared by a function, class or binding definition line, if any."""
    text = line.strip()
    for rx in _DEFINITIONS:
        m = rx.match(text)
        if m:
            return m.group(1)
    return None


def changed_functions(diff_text: Optional[str]) -> List[str]:
    """
    Names defined on the added lines of a diff, in order of first appearance.

    Works on a full ``git diff`` body as well as on a bare hunk (the GitHub
    ``patch`` field).
    """
    names: List[str] = []
    if not diff_text:
        return names
    for line in diff_text.splitlines():
        if not line.startswith('+') or line.startswith('+++ '):
            continue
        name = function_name(line[1:])
        if name and name not in names:
            names.append(name)
    return names
