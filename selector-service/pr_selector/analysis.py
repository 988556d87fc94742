"""
End-to-end analysis of one change set.

This module wires the engine stages together: classify the changed files,
match tests, estimate coverage and risk, and build recommendations. It is a
pure function of its inputs; the registry and settings are passed in.
"""
from __future__ import annotations
from typing import Iterable, List, Optional
import logging

from .classifier import classify_batch
from .config import AnalysisSettings
from .estimator import (
    coverage_rating,
    estimate,
    estimate_runtime_minutes,
    file_risks,
)
from .models import AnalysisResult, ChangedFile
from .patterns import PatternRegistry, default_registry
from .recommendations import build_recommendations, build_test_suggestions
from .selector import collect_candidates, truncate

logger = logging.getLogger("selector.core")


def analyze_changes(changed_files: List[ChangedFile],
                    repository_index: Optional[Iterable[str]] = None,
                    registry: Optional[PatternRegistry] = None,
                    settings: Optional[AnalysisSettings] = None) -> AnalysisResult:
    """
    Analyse a change set and return the ranked relevant tests.

    Args:
        changed_files: Files touched by the pull/merge request
        repository_index: Every file path of the repository; switches the
            matcher to index-aware mode when given
        registry: Language pattern registry
        settings: Result limits and thresholds

    Returns:
        AnalysisResult. An empty change set yields no tests, coverage 100,
        risk 0 and no recommendations.
    """
    registry = registry or default_registry()
    settings = settings or AnalysisSettings()
    logger.debug(
        "analyze_changes: changed_files=%d, index=%s, max_results=%d",
        len(changed_files),
        "none" if repository_index is None else "provided",
        settings.max_results,
    )

    classified, skipped = classify_batch(changed_files, registry)
    sources = [c for c in classified if c.is_source]
    tests = [c for c in classified if c.is_test]
    relevant = [c for c in classified if c.is_source or c.is_test]
    changed_tests = {t.path for t in tests}

    candidates = collect_candidates(classified, repository_index, registry, settings)
    coverage, risk = estimate(sources, candidates, relevant)
    recommendations = build_recommendations(sources, candidates)
    identified = truncate(candidates, settings.max_results)

    result = AnalysisResult(
        identified_tests=identified,
        source_files=sources,
        coverage_estimate_percent=coverage,
        risk_score=risk,
        recommendations=recommendations,
        test_suggestions=build_test_suggestions(sources),
        file_risks=[r for r in file_risks(relevant, candidates) if r.risk > 0],
        coverage_rating=coverage_rating(coverage),
        statistics={
            "total_files": len(changed_files),
            "source_files": len(sources),
            "test_files": len(tests),
            "related_tests": sum(1 for c in candidates if c.is_existing and c.test_path not in changed_tests),
            "suggested_tests": sum(1 for c in candidates if not c.is_existing),
            "truncated": max(0, len(candidates) - len(identified)),
        },
        skipped_paths=skipped,
        estimated_runtime_minutes=estimate_runtime_minutes(len(identified)),
    )
    if identified:
        logger.info(
            "analyze_changes: returning %d tests, coverage=%d, risk=%d",
            len(identified), coverage, risk,
        )
    else:
        logger.info("analyze_changes: no tests identified, coverage=%d, risk=%d", coverage, risk)
    return result
