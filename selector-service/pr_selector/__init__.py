"""Path-based selection of the tests relevant to a pull/merge request."""
from .analysis import analyze_changes
from .models import AnalysisResult, ChangedFile, ChangeStatus, TestCandidate

__version__ = "0.1.0"

__all__ = ["analyze_changes", "AnalysisResult", "ChangedFile", "ChangeStatus", "TestCandidate"]
