import ast
import os, sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from pr_selector.models import ChangeStatus, ClassifiedFile, Origin, Role, Severity, TestCandidate  # type: ignore
from pr_selector.recommendations import (  # type: ignore
    build_recommendations, build_test_suggestions, synthesize_template,
)


def _src(path, changes, language="javascript"):
    return ClassifiedFile(path=path, language=language, role=Role.SOURCE, additions=changes)


def test_untested_sources_get_recommendations():
    sources = [_src("src/a.js", 80), _src("src/b.js", 50), _src("src/c.js", 3)]
    cands = [TestCandidate("src/c.test.js", "src/c.js", Origin.EXISTING, 0.9, "r")]
    recs = build_recommendations(sources, cands)

    assert [r.source_path for r in recs] == ["src/a.js", "src/b.js"]
    assert recs[0].severity is Severity.HIGH
    assert recs[1].severity is Severity.MEDIUM
    assert recs[0].suggested_test_path == "src/a.test.js"
    assert "src/a.js" in recs[0].message


def test_suggested_candidates_do_not_silence_recommendations():
    sources = [_src("src/a.js", 1)]
    cands = [TestCandidate("src/a.test.js", "src/a.js", Origin.SUGGESTED, 0.6, "r")]
    assert len(build_recommendations(sources, cands)) == 1


def test_recommendation_carries_template():
    rec = build_recommendations([_src("app/models/user_profile.py", 5, "python")], [])[0]
    assert "def test_user_profile_normal_case" in rec.template


def test_python_template_parses():
    tree = ast.parse(synthesize_template("UserService", "python"))
    names = [n.name for n in tree.body]
    assert names == ["test_user_service_normal_case", "test_user_service_edge_cases"]


def test_templates_reference_the_name():
    assert "describe('userService'" in synthesize_template("src/userService.js", "javascript")
    assert "describe('widget'" in synthesize_template("widget", "typescript")
    assert "testUserServiceNormalCase" in synthesize_template("userService", "java")
    assert "func TestUserService(t *testing.T)" in synthesize_template("user_service.go", "go")
    assert "RSpec.describe 'cart'" in synthesize_template("lib/cart.rb", "ruby")
    assert "fn test_parser_normal_case" in synthesize_template("parser", "rust")


def test_unknown_language_gets_placeholder():
    out = synthesize_template("thing", "cobol")
    assert out.startswith("// Test template for thing")


def test_suggested_path_follows_the_matcher():
    sources = [_src("src/a.js", 1)]
    cands = [TestCandidate("src/a.spec.js", "src/a.js", Origin.SUGGESTED, 0.6, "r")]
    assert build_recommendations(sources, cands)[0].suggested_test_path == "src/a.spec.js"


def test_one_skeleton_per_changed_function():
    src = _src("src/cart.js", 12)
    src.changed_functions = ["addItem", "removeItem"]
    rec = build_recommendations([src], [])[0]
    assert "describe('addItem'" in rec.template
    assert "describe('removeItem'" in rec.template
    assert "describe('cart'" not in rec.template


def test_function_suggestions_skip_renamed_and_deleted_files():
    added = _src("src/new.go", 4, "go")
    added.status = ChangeStatus.ADDED
    added.changed_functions = ["ParseConfig"]
    gone = _src("src/old.go", 4, "go")
    gone.status = ChangeStatus.DELETED
    gone.changed_functions = ["Legacy"]
    moved = _src("src/moved.go", 4, "go")
    moved.status = ChangeStatus.RENAMED
    moved.changed_functions = ["Moved"]

    suggestions = build_test_suggestions([added, gone, moved])
    assert [(s.source_path, s.function) for s in suggestions] == [("src/new.go", "ParseConfig")]
    assert suggestions[0].description == "Test for ParseConfig in src/new.go"
    assert suggestions[0].template.startswith("func TestParseConfig(t *testing.T) {")
