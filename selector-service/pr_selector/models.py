"""
Core data structures shared by the relevance engine.

These are plain dataclasses: the engine never talks to the network or the
filesystem, so everything it consumes and produces lives here. The API layer
converts its pydantic schemas into these types before calling the engine.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ChangeStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class Role(str, Enum):
    TEST = "test"
    SOURCE = "source"
    IGNORED = "ignored"


class Origin(str, Enum):
    EXISTING = "existing"
    SUGGESTED = "suggested"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


UNKNOWN_LANGUAGE = "unknown"


@dataclass
class ChangedFile:
    """A file touched by a pull/merge request."""
    path: str
    status: ChangeStatus = ChangeStatus.MODIFIED
    additions: int = 0
    deletions: int = 0
    diff_text: Optional[str] = None
    previous_path: Optional[str] = None

    @property
    def changes(self) -> int:
        return self.additions + self.deletions


@dataclass
class ClassifiedFile:
    """
    Result of running the path classifier over one changed file.

    ``via_fallback`` is only ever set for test files that were promoted by the
    loose fallback heuristic rather than a strict test glob.
    """
    path: str
    language: str
    role: Role
    via_fallback: bool = False
    status: ChangeStatus = ChangeStatus.MODIFIED
    additions: int = 0
    deletions: int = 0
    diff_text: Optional[str] = None
    changed_functions: List[str] = field(default_factory=list)

    @property
    def changes(self) -> int:
        return self.additions + self.deletions

    @property
    def is_deleted(self) -> bool:
        return self.status is ChangeStatus.DELETED

    @property
    def is_test(self) -> bool:
        return self.role is Role.TEST

    @property
    def is_source(self) -> bool:
        return self.role is Role.SOURCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "language": self.language,
            "role": self.role.value,
            "status": self.status.value,
            "additions": self.additions,
            "deletions": self.deletions,
            "changes": self.changes,
            "changed_functions": list(self.changed_functions),
        }


@dataclass
class TestCandidate:
    """A test file believed to be relevant to (or proposed for) a source file."""
    __test__ = False  # keep pytest from collecting this class

    test_path: str
    source_path: Optional[str]
    origin: Origin
    confidence: float
    reason: str
    language: str = UNKNOWN_LANGUAGE
    related_sources: List[str] = field(default_factory=list)
    framework: str = UNKNOWN_LANGUAGE
    test_type: str = "unit"

    @property
    def is_existing(self) -> bool:
        return self.origin is Origin.EXISTING

    def covered_sources(self) -> List[str]:
        """Every source path this candidate vouches for, in discovery order."""
        out: List[str] = []
        for p in [self.source_path, *self.related_sources]:
            if p and p not in out:
                out.append(p)
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_path": self.test_path,
            "source_path": self.source_path,
            "origin": self.origin.value,
            "confidence": round(self.confidence, 2),
            "reason": self.reason,
            "language": self.language,
            "related_sources": list(self.related_sources),
            "framework": self.framework,
            "test_type": self.test_type,
        }


@dataclass
class Recommendation:
    source_path: str
    severity: Severity
    message: str
    suggested_test_path: Optional[str]
    template: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_path": self.source_path,
            "severity": self.severity.value,
            "message": self.message,
            "suggested_test_path": self.suggested_test_path,
            "template": self.template,
        }


@dataclass
class TestSuggestion:
    """A unit test proposed for one function touched by the change."""
    __test__ = False  # keep pytest from collecting this class

    source_path: str
    function: str
    description: str
    template: str
    test_type: str = "unit"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_path": self.source_path,
            "function": self.function,
            "description": self.description,
            "template": self.template,
            "test_type": self.test_type,
        }


@dataclass
class FileRisk:
    path: str
    risk: int
    changes: int


@dataclass
class AnalysisResult:
    """
    Top-level output of one analysis run.

    ``identified_tests`` is already ranked and truncated. ``test_paths()``
    flattens it, suggestions included; ``existing_test_paths()`` keeps only
    files that exist and is what the CI trigger runs.
    """
    identified_tests: List[TestCandidate] = field(default_factory=list)
    source_files: List[ClassifiedFile] = field(default_factory=list)
    coverage_estimate_percent: int = 100
    risk_score: int = 0
    recommendations: List[Recommendation] = field(default_factory=list)
    test_suggestions: List[TestSuggestion] = field(default_factory=list)
    file_risks: List[FileRisk] = field(default_factory=list)
    coverage_rating: str = "Excellent"
    statistics: Dict[str, int] = field(default_factory=dict)
    skipped_paths: List[str] = field(default_factory=list)
    estimated_runtime_minutes: float = 0.0

    def test_paths(self) -> List[str]:
        return [c.test_path for c in self.identified_tests]

    def existing_test_paths(self) -> List[str]:
        return [c.test_path for c in self.identified_tests if c.is_existing]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identified_tests": [c.to_dict() for c in self.identified_tests],
            "source_files": [s.to_dict() for s in self.source_files],
            "coverage_estimate_percent": self.coverage_estimate_percent,
            "risk_score": self.risk_score,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "test_suggestions": [s.to_dict() for s in self.test_suggestions],
            "file_risks": [{"path": r.path, "risk": r.risk, "changes": r.changes} for r in self.file_risks],
            "coverage_rating": self.coverage_rating,
            "statistics": dict(self.statistics),
            "skipped_paths": list(self.skipped_paths),
            "estimated_runtime_minutes": self.estimated_runtime_minutes,
        }
