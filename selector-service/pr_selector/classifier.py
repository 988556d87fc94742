"""
Path classification: test file, source file, or neither.

Classification is strict first (registry test globs), with a loose fallback
that only runs when a whole batch produced no strict test match at all.
"""
from __future__ import annotations
from typing import Iterable, List, Optional, Tuple
import logging
import re

from .diff_parser import changed_functions
from .models import ChangedFile, ClassifiedFile, Role, UNKNOWN_LANGUAGE
from .patterns import PatternRegistry, default_registry

logger = logging.getLogger("selector.classifier")

IGNORED_SEGMENTS = frozenset({
    "node_modules",
    "vendor",
    "dist",
    "build",
    ".git",
    "bower_components",
    "__pycache__",
    ".venv",
    "venv",
    "target",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
})

FALLBACK_TOKENS = ("test", "spec", "__tests__")
FALLBACK_DIRS = frozenset({"test", "tests", "__tests__"})
TEST_TYPES = ("integration", "e2e")
_FALLBACK_SUFFIX = re.compile(r"\.(test|spec)\.[A-Za-z0-9]+$", re.IGNORECASE)


def is_well_formed(path: Optional[str]) -> bool:
    """Repo-relative, forward-slash path without parent-directory hops."""
    if not path or path.startswith("/"):
        return False
    return ".." not in path.split("/")


def is_ignored(path: str) -> bool:
    return any(seg in IGNORED_SEGMENTS for seg in path.split("/"))


def classify(path: str, registry: Optional[PatternRegistry] = None) -> ClassifiedFile:
    """
    Classify a single path using the strict rules only.

    Order matters: the ignore list short-circuits everything, then test globs
    are tried across all profiles before extensions are looked at.
    """
    registry = registry or default_registry()
    if is_ignored(path):
        return ClassifiedFile(path=path, language=UNKNOWN_LANGUAGE, role=Role.IGNORED)

    profile = registry.match_test_pattern(path)
    if profile is not None:
        return ClassifiedFile(path=path, language=profile.id, role=Role.TEST)

    profile = registry.profile_for_path(path)
    if profile is not None:
        return ClassifiedFile(path=path, language=profile.id, role=Role.SOURCE)

    return ClassifiedFile(path=path, language=UNKNOWN_LANGUAGE, role=Role.IGNORED)


def looks_like_test(path: str) -> bool:
    """Loose test-file check used by the fallback pass."""
    lower = path.lower()
    if not any(tok in lower for tok in FALLBACK_TOKENS):
        return False
    if _FALLBACK_SUFFIX.search(path):
        return True
    dirs = lower.split("/")[:-1]
    return any(d in FALLBACK_DIRS for d in dirs)


def classify_test_type(path: str) -> str:
    """integration or e2e when the path says so, unit otherwise."""
    lower = path.lower()
    for kind in TEST_TYPES:
        if kind in lower:
            return kind
    return "unit"


def classify_batch(changed_files: Iterable[ChangedFile],
                   registry: Optional[PatternRegistry] = None) -> Tuple[List[ClassifiedFile], List[str]]:
    """
    Classify every changed file of one analysis run.

    Malformed paths are skipped and returned separately so the caller can
    report them. When no file in the batch matched a strict test glob, source
    files that look like tests are promoted to tests with ``via_fallback=True``.

    Returns:
        Tuple of (classified_files, skipped_paths)
    """
    registry = registry or default_registry()
    classified: List[ClassifiedFile] = []
    skipped: List[str] = []
    for cf in changed_files:
        if not is_well_formed(cf.path):
            skipped.append(cf.path)
            continue
        c = classify(cf.path, registry)
        c.status = cf.status
        c.additions = cf.additions
        c.deletions = cf.deletions
        c.diff_text = cf.diff_text
        c.changed_functions = changed_functions(cf.diff_text)
        classified.append(c)

    if not any(c.is_test for c in classified):
        promoted = 0
        for c in classified:
            if c.is_source and looks_like_test(c.path):
                c.role = Role.TEST
                c.via_fallback = True
                promoted += 1
        if promoted:
            logger.debug("fallback: promoted %d file(s) to tests", promoted)

    logger.debug(
        "classify_batch: total=%d, tests=%d, sources=%d, skipped=%d",
        len(classified),
        sum(1 for c in classified if c.is_test),
        sum(1 for c in classified if c.is_source),
        len(skipped),
    )
    return classified, skipped
