import os, sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from pr_selector.estimator import (  # type: ignore
    coverage_rating, estimate, estimate_coverage, estimate_risk, estimate_runtime_minutes, file_risks,
)
from pr_selector.models import ClassifiedFile, Origin, Role, TestCandidate  # type: ignore


def _src(path, changes=0):
    return ClassifiedFile(path=path, language="javascript", role=Role.SOURCE, additions=changes)


def _test(path, changes=0):
    return ClassifiedFile(path=path, language="javascript", role=Role.TEST, additions=changes)


def _existing(test_path, source_path):
    return TestCandidate(test_path, source_path, Origin.EXISTING, 0.9, "r")


def _suggested(test_path, source_path):
    return TestCandidate(test_path, source_path, Origin.SUGGESTED, 0.6, "r")


def test_no_sources_means_full_coverage():
    assert estimate([], []) == (100, 0)


def test_full_ratio_is_not_capped():
    """Three sources, three existing tests: 100, no bonus, no cap."""
    sources = [_src("a.js"), _src("b.js"), _src("c.js")]
    cands = [_existing("a.test.js", "a.js"), _existing("b.test.js", "b.js"), _existing("c.test.js", "c.js")]
    assert estimate_coverage(sources, cands) == 100


def test_suggestions_do_not_count_as_coverage():
    sources = [_src("a.js"), _src("b.js")]
    cands = [_existing("a.test.js", "a.js"), _suggested("b.test.js", "b.js")]
    assert estimate_coverage(sources, cands) == 50


def test_bonus_for_extra_tests():
    sources = [_src("a.js"), _src("b.js")]
    cands = [_existing("a.test.js", "a.js")] + [_existing("t%d.test.js" % i, "t%d.test.js" % i) for i in range(3)]
    # base 50, four tests for two sources: +10
    assert estimate_coverage(sources, cands) == 60


def test_bonus_is_capped_at_95():
    sources = [_src("s%d.js" % i) for i in range(5)]
    cands = [_existing("s%d.test.js" % i, "s%d.js" % i) for i in range(4)]
    cands += [_existing("x%d.test.js" % i, "x%d.test.js" % i) for i in range(5)]
    # base 80, bonus min(20, 4 * 5) = 20, capped at 95
    assert estimate_coverage(sources, cands) == 95


def test_related_sources_count_as_covered():
    sources = [_src("src/a.js")]
    cand = _existing("src/a.test.js", "src/a.test.js")
    cand.related_sources = ["src/a.js"]
    assert estimate_coverage(sources, [cand]) == 100


def test_coverage_rounds_half_up():
    sources = [_src("s%d.js" % i) for i in range(8)]
    assert estimate_coverage(sources, [_existing("s0.test.js", "s0.js")]) == 13


def test_risk_bands():
    files = [_src("a.js", 5), _src("b.js", 11), _src("c.js", 51), _src("d.js", 101)]
    risks = {r.path: r.risk for r in file_risks(files, [])}
    assert risks == {"a.js": 10, "b.js": 20, "c.js": 30, "d.js": 40}


def test_risk_is_averaged_and_tests_are_not_penalised():
    files = [_src("big.js", 120), _test("big.test.js", 5)]
    assert estimate_risk(files, []) == 20
    covered = [_existing("big.test.js", "big.js")]
    assert estimate_risk(files, covered) == 15


def test_risk_rounds_half_up():
    files = [_src("a.js"), _test("a.test.js"), _test("b.test.js"), _test("c.test.js")]
    assert estimate_risk(files, []) == 3


def test_file_risks_sorted_highest_first():
    files = [_src("small.js", 1), _src("huge.js", 500)]
    assert [r.path for r in file_risks(files, [])] == ["huge.js", "small.js"]


def test_bounds():
    files = [_src("f%d.js" % i, 1000) for i in range(10)]
    coverage, risk = estimate(files, [], files)
    assert 0 <= coverage <= 100
    assert 0 <= risk <= 100


def test_rating_and_runtime():
    assert coverage_rating(80) == "Excellent"
    assert coverage_rating(60) == "Good"
    assert coverage_rating(40) == "Fair"
    assert coverage_rating(39) == "Poor"
    assert estimate_runtime_minutes(0) == 0.0
    assert estimate_runtime_minutes(4) == 4.0
