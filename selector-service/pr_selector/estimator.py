"""
Coverage and risk estimation from match results.

Coverage here is a path-based proxy: the share of changed source files that
have at least one existing test candidate. It is not a line or branch
coverage measurement.
"""
from __future__ import annotations
from typing import Iterable, List, Optional, Set, Tuple
import logging
import math

from .models import ClassifiedFile, FileRisk, TestCandidate

logger = logging.getLogger("selector.estimator")

BONUS_PER_EXTRA_TEST = 5
MAX_BONUS = 20
BONUS_CAP = 95
UNCOVERED_PENALTY = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def covered_sources(candidates: Iterable[TestCandidate]) -> Set[str]:
    covered: Set[str] = set()
    for c in candidates:
        if c.is_existing:
            covered.update(c.covered_sources())
    return covered


def estimate_coverage(source_files: List[ClassifiedFile], candidates: List[TestCandidate]) -> int:
    """
    Percentage of source files with an existing test, plus a bonus.

    When more distinct existing tests were matched than there are source
    files, a bonus of 5 per extra test (at most 20) is added, but the bonus
    can only lift the figure up to 95. A figure of 100 earned from the ratio
    alone is kept.
    """
    if not source_files:
        return 100
    covered = covered_sources(candidates)
    covered_count = sum(1 for s in source_files if s.path in covered)
    base = round_half_up(covered_count / len(source_files) * 100)

    test_count = len({c.test_path for c in candidates if c.is_existing})
    if test_count > len(source_files):
        bonus = min(MAX_BONUS, (test_count - len(source_files)) * BONUS_PER_EXTRA_TEST)
        base = max(base, min(BONUS_CAP, base + bonus))
    return max(0, min(100, base))


def _size_risk(changes: int) -> int:
    if changes > 100:
        return 30
    if changes > 50:
        return 20
    if changes > 10:
        return 10
    return 0


def file_risks(files: List[ClassifiedFile], candidates: List[TestCandidate]) -> List[FileRisk]:
    """Per-file risk, highest first. Untested source files carry a penalty."""
    covered = covered_sources(candidates)
    risks = []
    for f in files:
        risk = _size_risk(f.changes)
        if f.is_source and f.path not in covered:
            risk += UNCOVERED_PENALTY
        risks.append(FileRisk(path=f.path, risk=min(risk, 100), changes=f.changes))
    return sorted(risks, key=lambda r: -r.risk)


def estimate_risk(files: List[ClassifiedFile], candidates: List[TestCandidate]) -> int:
    if not files:
        return 0
    total = sum(r.risk for r in file_risks(files, candidates))
    return max(0, min(100, round_half_up(total / len(files))))


def estimate(source_files: List[ClassifiedFile], candidates: List[TestCandidate],
             changed_files: Optional[List[ClassifiedFile]] = None) -> Tuple[int, int]:
    """
    Compute the coverage estimate and the risk score.

    Args:
        source_files: Classified source files of the change set
        candidates: Deduplicated match results
        changed_files: Files the risk is averaged over; defaults to the
            source files

    Returns:
        Tuple of (coverage_estimate_percent, risk_score)
    """
    coverage = estimate_coverage(source_files, candidates)
    risk = estimate_risk(changed_files if changed_files is not None else source_files, candidates)
    logger.debug("estimate: sources=%d, coverage=%d, risk=%d", len(source_files), coverage, risk)
    return coverage, risk


def coverage_rating(percent: int) -> str:
    if percent >= 80:
        return "Excellent"
    if percent >= 60:
        return "Good"
    if percent >= 40:
        return "Fair"
    return "Poor"


def estimate_runtime_minutes(test_count: int) -> float:
    if test_count <= 0:
        return 0.0
    # two minutes of pipeline overhead plus thirty seconds per test file
    return 2 + 0.5 * test_count
