"""
Missing-test recommendations and test skeletons.
"""
from __future__ import annotations
from typing import List
import logging
import re

from .candidates import first_candidate
from .estimator import covered_sources
from .models import ChangeStatus, ClassifiedFile, Recommendation, Severity, TestCandidate, TestSuggestion

logger = logging.getLogger("selector.recommendations")

HIGH_SEVERITY_CHANGES = 50


def _identifier(name: str) -> str:
    base = name.rsplit("/", 1)[-1]
    if "." in base.lstrip("."):
        base = base.rsplit(".", 1)[0]
    ident = re.sub(r"[^0-9A-Za-z_]+", "_", base).strip("_") or "subject"
    if ident[0].isdigit():
        ident = "_" + ident
    return ident


def _pascal(ident: str) -> str:
    return "".join(p[:1].upper() + p[1:] for p in ident.split("_") if p) or "Subject"


def _snake(ident: str) -> str:
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", ident).lower()


def synthesize_template(name: str, language: str) -> str:
    """
    Empty test skeleton for ``name`` in the idiom of ``language``.

    ``name`` may be a function name or a file path; for paths the file stem
    is used. Unknown languages get a comment-only placeholder.
    """
    ident = _identifier(name)
    pascal = _pascal(ident)
    snake = _snake(ident)

    if language in ("javascript", "typescript"):
        return (
            f"describe('{ident}', () => {{\n"
            f"  it('should handle normal case', () => {{\n"
            f"    // Test implementation\n"
            f"  }});\n"
            f"\n"
            f"  it('should handle edge cases', () => {{\n"
            f"    // Test implementation\n"
            f"  }});\n"
            f"}});\n"
        )
    if language == "python":
        return (
            f"def test_{snake}_normal_case():\n"
            f"    # Test implementation\n"
            f"    pass\n"
            f"\n"
            f"\n"
            f"def test_{snake}_edge_cases():\n"
            f"    # Test implementation\n"
            f"    pass\n"
        )
    if language == "java":
        return (
            f"@Test\n"
            f"public void test{pascal}NormalCase() {{\n"
            f"    // Test implementation\n"
            f"}}\n"
            f"\n"
            f"@Test\n"
            f"public void test{pascal}EdgeCases() {{\n"
            f"    // Test implementation\n"
            f"}}\n"
        )
    if language == "kotlin":
        return (
            f"@Test\n"
            f"fun `{ident} handles normal case`() {{\n"
            f"    // Test implementation\n"
            f"}}\n"
        )
    if language == "csharp":
        return (
            f"[Test]\n"
            f"public void {pascal}_HandlesNormalCase()\n"
            f"{{\n"
            f"    // Test implementation\n"
            f"}}\n"
        )
    if language == "go":
        return (
            f"func Test{pascal}(t *testing.T) {{\n"
            f"\t// Test implementation\n"
            f"}}\n"
        )
    if language == "php":
        return (
            f"public function test{pascal}NormalCase(): void\n"
            f"{{\n"
            f"    // Test implementation\n"
            f"}}\n"
        )
    if language == "ruby":
        return (
            f"RSpec.describe '{ident}' do\n"
            f"  it 'handles the normal case' do\n"
            f"    # Test implementation\n"
            f"  end\n"
            f"end\n"
        )
    if language == "rust":
        return (
            f"#[test]\n"
            f"fn test_{snake}_normal_case() {{\n"
            f"    // Test implementation\n"
            f"}}\n"
        )
    return (
        f"// Test template for {ident}\n"
        f"// Add appropriate test cases here\n"
    )


def _template_for(src: ClassifiedFile) -> str:
    if not src.changed_functions:
        return synthesize_template(src.path, src.language)
    return "\n".join(synthesize_template(fn, src.language) for fn in src.changed_functions)


def build_recommendations(source_files: List[ClassifiedFile],
                          candidates: List[TestCandidate]) -> List[Recommendation]:
    """
    One recommendation per source file without an existing test candidate.

    Severity is ``high`` when more than 50 lines changed, ``medium`` otherwise.
    The suggested location is the one the matcher proposed for the file, or
    the first conventional test path. The template holds one skeleton per
    function defined on the added lines, or a file-level skeleton when the
    diff is unknown.
    """
    covered = covered_sources(candidates)
    proposed = {c.source_path: c.test_path for c in candidates if not c.is_existing}
    recs: List[Recommendation] = []
    for src in source_files:
        if src.path in covered:
            continue
        recs.append(Recommendation(
            source_path=src.path,
            severity=Severity.HIGH if src.changes > HIGH_SEVERITY_CHANGES else Severity.MEDIUM,
            message=f"No test file found for {src.path}",
            suggested_test_path=proposed.get(src.path) or first_candidate(src.path),
            template=_template_for(src),
        ))
    logger.debug("build_recommendations: sources=%d, missing=%d", len(source_files), len(recs))
    return recs


def build_test_suggestions(source_files: List[ClassifiedFile]) -> List[TestSuggestion]:
    """A unit test suggestion for every function added or modified in a source file."""
    out: List[TestSuggestion] = []
    for src in source_files:
        if src.status not in (ChangeStatus.ADDED, ChangeStatus.MODIFIED):
            continue
        for fn in src.changed_functions:
            out.append(TestSuggestion(
                source_path=src.path,
                function=fn,
                description=f"Test for {fn} in {src.path}",
                template=synthesize_template(fn, src.language),
            ))
    return out
