"""
Pydantic schemas for the PR test selector API.

This module defines the request and response models for the /analyze and
/trigger endpoints, including the nested structures for changed files,
repository metadata, per-request settings and analysis results.
"""
from pydantic import AliasChoices, BaseModel, Field
from typing import Dict, List, Optional

from .config import AnalysisSettings, DEFAULT_COVERAGE_THRESHOLD, DEFAULT_MAX_RESULTS, DEFAULT_MIN_RELEVANCE
from .diff_parser import count_changes
from .models import ChangedFile, ChangeStatus


class ChangedFileIn(BaseModel):
    """
    A file touched by the pull/merge request, as reported by the VCS API.

    ``filename`` is accepted as an alias of ``path`` (GitHub naming). When only
    a raw diff is supplied the line counts are derived from it.
    """
    path: str = Field(validation_alias=AliasChoices("path", "filename"))
    status: str = Field("modified", pattern=r"^(added|modified|deleted|renamed)$")
    additions: int = Field(0, ge=0)
    deletions: int = Field(0, ge=0)
    diff_text: Optional[str] = Field(None, validation_alias=AliasChoices("diff_text", "patch"))
    previous_path: Optional[str] = None

    def to_changed_file(self) -> ChangedFile:
        additions, deletions = self.additions, self.deletions
        if not additions and not deletions and self.diff_text:
            additions, deletions = count_changes(self.diff_text)
        return ChangedFile(
            path=self.path,
            status=ChangeStatus(self.status),
            additions=additions,
            deletions=deletions,
            diff_text=self.diff_text,
            previous_path=self.previous_path,
        )


class RepoInfo(BaseModel):
    """Repository and pull-request metadata."""
    name: str = ""
    repo_url: str = ""
    base_commit: Optional[str] = None
    head_commit: Optional[str] = None
    pr_number: Optional[int] = Field(None, gt=0)
    branch: str = ""


class Settings(BaseModel):
    """Per-request overrides of the analysis settings."""
    max_results: int = Field(DEFAULT_MAX_RESULTS, ge=1)
    min_relevance: float = Field(DEFAULT_MIN_RELEVANCE, ge=0.0, le=1.0)
    coverage_threshold: int = Field(DEFAULT_COVERAGE_THRESHOLD, ge=0, le=100)

    def to_analysis_settings(self) -> AnalysisSettings:
        return AnalysisSettings(
            max_results=self.max_results,
            min_relevance=self.min_relevance,
            coverage_threshold=self.coverage_threshold,
        )


class AnalyzeRequest(BaseModel):
    """
    Request payload for an analysis run.

    ``repository_files`` is the full path listing of the repository; when it
    is omitted the matcher falls back to heuristic pairing within the batch.
    """
    repo: RepoInfo = Field(default_factory=RepoInfo)
    changed_files: List[ChangedFileIn] = Field(default_factory=list)
    repository_files: Optional[List[str]] = None
    settings: Optional[Settings] = None


class TestCandidateOut(BaseModel):
    test_path: str
    source_path: Optional[str] = None
    origin: str
    confidence: float
    reason: str
    language: str
    related_sources: List[str] = Field(default_factory=list)
    framework: str = "unknown"
    test_type: str = "unit"


class SourceFileOut(BaseModel):
    path: str
    language: str
    role: str
    status: str
    additions: int
    deletions: int
    changes: int
    changed_functions: List[str] = Field(default_factory=list)


class RecommendationOut(BaseModel):
    source_path: str
    severity: str
    message: str
    suggested_test_path: Optional[str] = None
    template: Optional[str] = None


class TestSuggestionOut(BaseModel):
    source_path: str
    function: str
    description: str
    template: str
    test_type: str = "unit"


class FileRiskOut(BaseModel):
    path: str
    risk: int
    changes: int


class AnalyzeResponse(BaseModel):
    """Analysis result: ranked tests, coverage and risk figures, recommendations."""
    identified_tests: List[TestCandidateOut]
    source_files: List[SourceFileOut]
    coverage_estimate_percent: int = Field(ge=0, le=100)
    risk_score: int = Field(ge=0, le=100)
    recommendations: List[RecommendationOut]
    test_suggestions: List[TestSuggestionOut] = Field(default_factory=list)
    file_risks: List[FileRiskOut] = Field(default_factory=list)
    coverage_rating: str
    statistics: Dict[str, int] = Field(default_factory=dict)
    skipped_paths: List[str] = Field(default_factory=list)
    estimated_runtime_minutes: float = 0.0


class BuildOut(BaseModel):
    success: bool
    backend: str
    test_files: List[str]
    queue_location: Optional[str] = None
    build_url: Optional[str] = None
    error: Optional[str] = None
    timestamp: str


class TriggerResponse(BaseModel):
    analysis: AnalyzeResponse
    build: BuildOut
