import os, sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from pr_selector.analysis import analyze_changes  # type: ignore
from pr_selector.config import AnalysisSettings  # type: ignore
from pr_selector.models import ChangedFile, ChangeStatus, Origin, Severity  # type: ignore


def test_empty_change_set_is_a_valid_result():
    result = analyze_changes([])
    assert result.identified_tests == []
    assert result.coverage_estimate_percent == 100
    assert result.risk_score == 0
    assert result.recommendations == []
    assert result.estimated_runtime_minutes == 0.0


def test_existing_sibling_test_is_identified():
    result = analyze_changes(
        [ChangedFile("src/user.js", additions=10, deletions=2)],
        repository_index=["src/user.js", "src/user.test.js", "package.json"],
    )
    assert result.test_paths() == ["src/user.test.js"]
    assert result.identified_tests[0].origin is Origin.EXISTING
    assert result.identified_tests[0].confidence == 0.90
    assert result.coverage_estimate_percent == 100
    assert result.recommendations == []
    # 12 changed lines, covered: 10 for size only
    assert result.risk_score == 10


def test_untested_large_change_is_high_severity():
    result = analyze_changes([
        ChangedFile("src/a.js", status=ChangeStatus.ADDED, additions=80),
        ChangedFile("README.md", additions=3),
    ])
    assert len(result.recommendations) == 1
    rec = result.recommendations[0]
    assert rec.source_path == "src/a.js"
    assert rec.severity is Severity.HIGH
    assert rec.suggested_test_path == "src/a.test.js"
    assert result.coverage_estimate_percent == 0
    assert result.coverage_rating == "Poor"
    assert [c.origin for c in result.identified_tests] == [Origin.SUGGESTED]


def test_vendored_test_helper_is_not_a_test():
    result = analyze_changes([ChangedFile("vendor/lib/test_helper.js", additions=5)])
    assert result.identified_tests == []
    assert result.source_files == []
    assert result.statistics["test_files"] == 0


def test_heuristic_run_covers_paired_sources():
    result = analyze_changes([
        ChangedFile("app/services/billing.py", additions=30),
        ChangedFile("tests/services/test_billing.py", additions=12),
        ChangedFile("app/services/shipping.py", additions=4),
    ])
    paths = result.test_paths()
    assert paths[0] == "tests/services/test_billing.py"
    assert "app/services/shipping.test.py" in paths
    assert result.coverage_estimate_percent == 50
    assert [r.source_path for r in result.recommendations] == ["app/services/shipping.py"]
    assert result.statistics == {
        "total_files": 3,
        "source_files": 2,
        "test_files": 1,
        "related_tests": 0,
        "suggested_tests": 1,
        "truncated": 0,
    }


def test_malformed_paths_are_reported_not_fatal():
    result = analyze_changes([ChangedFile("../etc/passwd"), ChangedFile("src/ok.go", additions=1)])
    assert result.skipped_paths == ["../etc/passwd"]
    assert [s.path for s in result.source_files] == ["src/ok.go"]


def test_truncation_respects_settings():
    files = [ChangedFile("src/m%d.ts" % i) for i in range(10)]
    result = analyze_changes(files, settings=AnalysisSettings(max_results=3))
    assert len(result.identified_tests) == 3
    assert result.statistics["truncated"] == 7
    assert len(result.recommendations) == 10


def test_scores_stay_in_bounds():
    files = [ChangedFile("src/f%d.java" % i, additions=400, deletions=300) for i in range(20)]
    files += [ChangedFile("src/test/java/F%dTest.java" % i, additions=2) for i in range(3)]
    result = analyze_changes(files)
    assert 0 <= result.coverage_estimate_percent <= 100
    assert 0 <= result.risk_score <= 100


def test_result_serialises():
    data = analyze_changes([ChangedFile("lib/a.rb", additions=1)]).to_dict()
    assert data["identified_tests"][0]["origin"] == "suggested"
    assert data["source_files"][0]["role"] == "source"
    assert data["recommendations"][0]["severity"] == "medium"


def test_deleted_test_leaves_its_source_uncovered():
    result = analyze_changes(
        [
            ChangedFile("src/user.js", additions=80),
            ChangedFile("src/user.test.js", status=ChangeStatus.DELETED, deletions=40),
        ],
        repository_index=["src/user.js", "package.json"],
    )
    assert "src/user.test.js" not in result.test_paths()
    assert result.existing_test_paths() == []
    assert result.coverage_estimate_percent == 0
    assert len(result.recommendations) == 1
    rec = result.recommendations[0]
    assert rec.source_path == "src/user.js"
    assert rec.severity is Severity.HIGH
    assert rec.suggested_test_path == "src/user.spec.js"


def test_changed_functions_become_test_suggestions():
    diff = (
        "@@ -1,2 +1,8 @@\n"
        " import math\n"
        "+def net_total(items):\n"
        "+    return sum(items)\n"
        "+\n"
        "+class Invoice:\n"
        "+    pass\n"
        "-def gross_total(items):\n"
    )
    result = analyze_changes([ChangedFile("billing/invoice.py", additions=5, deletions=1, diff_text=diff)])
    assert result.source_files[0].changed_functions == ["net_total", "Invoice"]
    assert [(s.function, s.description) for s in result.test_suggestions] == [
        ("net_total", "Test for net_total in billing/invoice.py"),
        ("Invoice", "Test for Invoice in billing/invoice.py"),
    ]
    assert "def test_net_total_normal_case():" in result.test_suggestions[0].template
    template = result.recommendations[0].template
    assert "def test_net_total_normal_case():" in template
    assert "def test_invoice_normal_case():" in template
    assert result.to_dict()["test_suggestions"][1]["test_type"] == "unit"


def test_deleted_sources_get_no_function_suggestions():
    result = analyze_changes([
        ChangedFile("lib/old.js", status=ChangeStatus.DELETED, deletions=3, diff_text="+function stale() {}\n"),
    ])
    assert result.test_suggestions == []
