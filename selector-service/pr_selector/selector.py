"""
Relevance matching between changed source files and test files.

Two modes are supported. When a repository file index is available, the
conventional test locations of every changed source file are looked up in it.
Without an index, changed source files are scored pairwise against the test
files changed in the same batch. Both modes emit a suggested test location
for sources left without an existing match, then deduplicate by test path,
rank by confidence and truncate.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Set, Tuple
import logging
import re

from .candidates import candidate_paths, first_candidate
from .classifier import classify_test_type
from .config import AnalysisSettings
from .models import ClassifiedFile, Origin, TestCandidate
from .patterns import PatternRegistry, default_registry, file_extension

logger = logging.getLogger("selector.core")

DIRECT_CONFIDENCE = 1.0
CONVENTION_CONFIDENCE = 0.90
FALLBACK_CONFIDENCE = 0.60
SUGGESTED_CONFIDENCE = 0.60

BASENAME_WEIGHT = 0.5
DIRECTORY_WEIGHT = 0.3
TOKEN_WEIGHT = 0.2

DIRECT_REASON = "direct test file modification"
SUGGESTED_REASON = "suggested: no existing test detected"

GENERIC_TOKENS = frozenset({"src", "test", "tests", "spec", "specs", "lib", "main", "java", "app"})

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")
_TEST_AFFIXES = (
    re.compile(r"[._-](test|spec|tests)$", re.IGNORECASE),
    re.compile(r"(Test|Tests|Spec)$"),
    re.compile(r"^test_", re.IGNORECASE),
)


def _split(path: str) -> Tuple[List[str], str]:
    parts = path.split("/")
    return parts[:-1], parts[-1]


def _stem(filename: str) -> str:
    if "." in filename.lstrip("."):
        return filename.rsplit(".", 1)[0]
    return filename


def strip_test_affix(filename: str) -> str:
    """Base name of a test file with its test/spec affix removed."""
    stem = _stem(filename)
    for rx in _TEST_AFFIXES:
        stripped = rx.sub("", stem)
        if stripped and stripped != stem:
            return stripped
    return stem


def identifier_tokens(path: str) -> Set[str]:
    ext = file_extension(path)
    tokens = {t for t in _TOKEN_SPLIT.split(path.lower()) if t}
    tokens -= GENERIC_TOKENS
    if ext:
        tokens.discard(ext)
    return tokens


def _dirs_related(a: List[str], b: List[str]) -> bool:
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    return longer[:len(shorter)] == shorter


def score_pair(source_path: str, test_path: str) -> Tuple[float, str]:
    """
    Weighted relevance of ``test_path`` for ``source_path``.

    +0.5 when the test's base name (minus its test/spec affix) equals the
    source base name, +0.3 when the directories are equal or nested, +0.2 for
    every shared identifier token. Capped at 1.0.

    Returns:
        Tuple of (score, reason)
    """
    src_dirs, src_name = _split(source_path)
    test_dirs, test_name = _split(test_path)
    score = 0.0
    reasons: List[str] = []

    if strip_test_affix(test_name).lower() == _stem(src_name).lower():
        score += BASENAME_WEIGHT
        reasons.append("matching file name")
    if _dirs_related(src_dirs, test_dirs):
        score += DIRECTORY_WEIGHT
        reasons.append("same directory tree")
    shared = sorted(identifier_tokens(source_path) & identifier_tokens(test_path))
    if shared:
        score += TOKEN_WEIGHT * len(shared)
        reasons.append("shared identifiers: " + ", ".join(shared))

    return round(min(1.0, score), 2), "; ".join(reasons)


def _direct_candidates(tests: Iterable[ClassifiedFile]) -> List[TestCandidate]:
    out = []
    for t in tests:
        out.append(TestCandidate(
            test_path=t.path,
            source_path=t.path,
            origin=Origin.EXISTING,
            confidence=FALLBACK_CONFIDENCE if t.via_fallback else DIRECT_CONFIDENCE,
            reason=DIRECT_REASON,
            language=t.language,
        ))
    return out


def _indexed_candidates(source: ClassifiedFile, lookup: Set[str],
                        registry: PatternRegistry) -> List[TestCandidate]:
    out = []
    for path in candidate_paths(source.path):
        if path not in lookup:
            continue
        strict = registry.match_test_pattern(path) is not None
        out.append(TestCandidate(
            test_path=path,
            source_path=source.path,
            origin=Origin.EXISTING,
            confidence=CONVENTION_CONFIDENCE if strict else FALLBACK_CONFIDENCE,
            reason="test file at conventional location" if strict else "file at conventional test location",
            language=source.language,
        ))
    return out


def _scored_candidates(source: ClassifiedFile, tests: List[ClassifiedFile],
                       min_relevance: float) -> List[TestCandidate]:
    out = []
    for t in tests:
        score, reason = score_pair(source.path, t.path)
        if t.via_fallback:
            score = min(score, FALLBACK_CONFIDENCE)
        if score <= min_relevance:
            continue
        out.append(TestCandidate(
            test_path=t.path,
            source_path=source.path,
            origin=Origin.EXISTING,
            confidence=score,
            reason=reason,
            language=t.language,
        ))
    return out


def _suggested_candidate(source: ClassifiedFile, removed: Set[str]) -> Optional[TestCandidate]:
    path = first_candidate(source.path, exclude=removed)
    if path is None:
        return None
    return TestCandidate(
        test_path=path,
        source_path=source.path,
        origin=Origin.SUGGESTED,
        confidence=SUGGESTED_CONFIDENCE,
        reason=SUGGESTED_REASON,
        language=source.language,
    )


def deduplicate(candidates: Iterable[TestCandidate]) -> List[TestCandidate]:
    """
    Collapse candidates sharing a test path into one entry.

    The highest confidence wins; on a tie an existing test beats a suggestion.
    Source paths of the losers are kept in ``related_sources`` of the winner.
    Result keeps discovery order of the winners.
    """
    winners: Dict[str, Tuple[int, TestCandidate]] = {}
    sources: Dict[str, List[str]] = {}
    for seq, cand in enumerate(candidates):
        bucket = sources.setdefault(cand.test_path, [])
        if cand.source_path and cand.source_path != cand.test_path and cand.source_path not in bucket:
            bucket.append(cand.source_path)
        current = winners.get(cand.test_path)
        if current is None:
            winners[cand.test_path] = (seq, cand)
            continue
        best = current[1]
        if cand.confidence > best.confidence or (
            cand.confidence == best.confidence and cand.is_existing and not best.is_existing
        ):
            winners[cand.test_path] = (seq, cand)

    out = []
    for test_path, (_, cand) in sorted(winners.items(), key=lambda kv: kv[1][0]):
        cand.related_sources = [s for s in sources[test_path] if s != cand.source_path]
        out.append(cand)
    return out


def rank(candidates: List[TestCandidate]) -> List[TestCandidate]:
    """Confidence descending; existing before suggested; otherwise discovery order."""
    return sorted(candidates, key=lambda c: (-c.confidence, 0 if c.is_existing else 1))


def describe(candidates: Iterable[TestCandidate], registry: PatternRegistry) -> None:
    """Fill in the test framework and the unit/integration/e2e type of each candidate."""
    for cand in candidates:
        profile = registry.profile(cand.language)
        if profile is not None and profile.frameworks:
            cand.framework = profile.frameworks[0]
        cand.test_type = classify_test_type(cand.test_path)


def collect_candidates(classified: List[ClassifiedFile],
                       repository_index: Optional[Iterable[str]] = None,
                       registry: Optional[PatternRegistry] = None,
                       settings: Optional[AnalysisSettings] = None) -> List[TestCandidate]:
    """
    Build the full, ranked and deduplicated candidate list (not truncated).

    Test files deleted by the change are never reported as existing tests:
    they are left out of the direct matches, removed from the repository
    index and skipped when picking a suggested location.

    Args:
        classified: Output of ``classify_batch`` for one change set
        repository_index: Every file path of the repository, if known
        registry: Pattern registry used to grade conventional locations
        settings: Analysis settings (relevance threshold)

    Returns:
        Ranked list of TestCandidate
    """
    registry = registry or default_registry()
    settings = settings or AnalysisSettings()
    tests = [c for c in classified if c.is_test and not c.is_deleted]
    removed = {c.path for c in classified if c.is_test and c.is_deleted}
    sources = [c for c in classified if c.is_source]

    found: List[TestCandidate] = _direct_candidates(tests)
    suggested: List[TestCandidate] = []

    lookup: Optional[Set[str]] = None
    if repository_index is not None:
        lookup = set(repository_index)
        lookup.update(t.path for t in tests)
        lookup -= removed
    logger.debug(
        "collect_candidates: mode=%s, sources=%d, tests=%d, deleted_tests=%d",
        "index" if lookup is not None else "heuristic", len(sources), len(tests), len(removed),
    )

    for src in sources:
        if lookup is not None:
            matches = _indexed_candidates(src, lookup, registry)
        else:
            matches = _scored_candidates(src, tests, settings.min_relevance)
        if matches:
            found.extend(matches)
            continue
        s = _suggested_candidate(src, removed)
        if s is not None:
            suggested.append(s)

    ranked = rank(deduplicate(found + suggested))
    describe(ranked, registry)
    logger.debug("collect_candidates: raw=%d, unique=%d", len(found) + len(suggested), len(ranked))
    return ranked


def truncate(ranked: List[TestCandidate], max_results: int) -> List[TestCandidate]:
    if len(ranked) > max_results:
        logger.info("truncating %d candidates to %d", len(ranked), max_results)
    return ranked[:max_results]


def match_tests(classified: List[ClassifiedFile],
                repository_index: Optional[Iterable[str]] = None,
                registry: Optional[PatternRegistry] = None,
                settings: Optional[AnalysisSettings] = None) -> List[TestCandidate]:
    """Ranked candidates truncated to ``settings.max_results``."""
    settings = settings or AnalysisSettings()
    ranked = collect_candidates(classified, repository_index, registry, settings)
    return truncate(ranked, settings.max_results)
