"""
Analysis settings.

A settings object is built once by the caller and passed into every engine
call; the engine itself never reads the environment.
"""
from __future__ import annotations
from dataclasses import dataclass
import os

DEFAULT_MAX_RESULTS = 50
DEFAULT_MIN_RELEVANCE = 0.30
DEFAULT_COVERAGE_THRESHOLD = 80


@dataclass(frozen=True)
class AnalysisSettings:
    max_results: int = DEFAULT_MAX_RESULTS
    # pairs scoring at or below this are treated as coincidental
    min_relevance: float = DEFAULT_MIN_RELEVANCE
    coverage_threshold: int = DEFAULT_COVERAGE_THRESHOLD

    @classmethod
    def from_env(cls) -> "AnalysisSettings":
        return cls(
            max_results=int(os.environ.get("MAX_RESULTS", str(DEFAULT_MAX_RESULTS))),
            min_relevance=float(os.environ.get("MIN_RELEVANCE", str(DEFAULT_MIN_RELEVANCE))),
            coverage_threshold=int(os.environ.get("COVERAGE_THRESHOLD", str(DEFAULT_COVERAGE_THRESHOLD))),
        )
