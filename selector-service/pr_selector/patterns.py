"""
Language profiles and test-file glob patterns.

Each profile lists the file extensions of a language, the glob patterns that
identify its test files and the test frameworks commonly used with it. Globs
are compiled to anchored regular expressions once, when a registry is built,
and the registry is never mutated afterwards.

Supported glob syntax:
- ``**``  any number of path segments, including zero
- ``*``   any characters except ``/``
- ``?``   a single character except ``/``
Everything else (dots included) is matched literally.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Pattern, Tuple
import logging
import re

logger = logging.getLogger("selector.patterns")


@dataclass(frozen=True)
class LanguageProfile:
    id: str
    extensions: Tuple[str, ...]
    test_patterns: Tuple[str, ...]
    frameworks: Tuple[str, ...]


DEFAULT_PROFILES: Tuple[LanguageProfile, ...] = (
    LanguageProfile(
        id="javascript",
        extensions=("js", "jsx", "mjs"),
        test_patterns=("**/*.test.js", "**/*.spec.js", "**/test/**/*.js", "**/tests/**/*.js", "**/__tests__/**/*.js"),
        frameworks=("jest", "mocha", "jasmine", "vitest"),
    ),
    LanguageProfile(
        id="typescript",
        extensions=("ts", "tsx"),
        test_patterns=("**/*.test.ts", "**/*.spec.ts", "**/test/**/*.ts", "**/tests/**/*.ts", "**/__tests__/**/*.ts"),
        frameworks=("jest", "mocha", "jasmine", "vitest"),
    ),
    LanguageProfile(
        id="python",
        extensions=("py",),
        test_patterns=("**/test_*.py", "**/*_test.py", "**/tests/**/*.py", "**/test/**/*.py"),
        frameworks=("pytest", "unittest", "nose2"),
    ),
    LanguageProfile(
        id="java",
        extensions=("java",),
        test_patterns=("**/src/test/**/*.java", "**/*Test.java", "**/*Tests.java", "**/test/**/*.java"),
        frameworks=("junit", "testng", "spock"),
    ),
    LanguageProfile(
        id="csharp",
        extensions=("cs",),
        test_patterns=("**/*.Test.cs", "**/*.Tests.cs", "**/test/**/*.cs", "**/tests/**/*.cs"),
        frameworks=("nunit", "mstest", "xunit"),
    ),
    LanguageProfile(
        id="go",
        extensions=("go",),
        test_patterns=("**/*_test.go",),
        frameworks=("testing", "testify", "ginkgo"),
    ),
    LanguageProfile(
        id="php",
        extensions=("php",),
        test_patterns=("**/tests/**/*.php", "**/*Test.php", "**/test/**/*.php"),
        frameworks=("phpunit", "pest", "codeception"),
    ),
    LanguageProfile(
        id="ruby",
        extensions=("rb",),
        test_patterns=("**/spec/**/*.rb", "**/*_spec.rb", "**/test/**/*.rb", "**/*_test.rb"),
        frameworks=("rspec", "minitest", "test-unit"),
    ),
    LanguageProfile(
        id="rust",
        extensions=("rs",),
        test_patterns=("**/tests/**/*.rs", "**/*_test.rs"),
        frameworks=("cargo test",),
    ),
    LanguageProfile(
        id="kotlin",
        extensions=("kt", "kts"),
        test_patterns=("**/src/test/**/*.kt", "**/*Test.kt", "**/*Tests.kt"),
        frameworks=("junit", "spek", "kotest"),
    ),
)


def compile_glob(pattern: str) -> Pattern[str]:
    """Compile a glob into an anchored regular expression."""
    parts: List[str] = []
    i, n = 0, len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(parts) + "$")


def file_extension(path: str) -> Optional[str]:
    """Lowercased extension of the last path segment, without the dot."""
    name = path.rsplit("/", 1)[-1]
    if "." not in name.lstrip("."):
        return None
    return name.rsplit(".", 1)[1].lower() or None


class PatternRegistry:
    """
    Read-only table of language profiles with pre-compiled test globs.

    Profiles are kept in the order given; that order is the tie-break for both
    overlapping extensions and overlapping test globs.
    """

    def __init__(self, profiles: Iterable[LanguageProfile] = DEFAULT_PROFILES):
        self._profiles: Tuple[LanguageProfile, ...] = tuple(profiles)
        self._by_id: Dict[str, LanguageProfile] = {p.id: p for p in self._profiles}
        self._by_extension: Dict[str, LanguageProfile] = {}
        for p in self._profiles:
            for ext in p.extensions:
                self._by_extension.setdefault(ext.lower(), p)
        self._compiled: Tuple[Tuple[LanguageProfile, Tuple[Pattern[str], ...]], ...] = tuple(
            (p, tuple(compile_glob(g) for g in p.test_patterns)) for p in self._profiles
        )
        logger.debug("registry built: profiles=%d, extensions=%d", len(self._profiles), len(self._by_extension))

    def all_profiles(self) -> List[LanguageProfile]:
        return list(self._profiles)

    def profile(self, language_id: str) -> Optional[LanguageProfile]:
        return self._by_id.get(language_id)

    def profile_for(self, extension: Optional[str]) -> Optional[LanguageProfile]:
        if not extension:
            return None
        return self._by_extension.get(extension.lstrip(".").lower())

    def profile_for_path(self, path: str) -> Optional[LanguageProfile]:
        return self.profile_for(file_extension(path))

    def match_test_pattern(self, path: str) -> Optional[LanguageProfile]:
        """First profile (in registry order) owning a test glob that matches ``path``."""
        for profile, regexes in self._compiled:
            for rx in regexes:
                if rx.match(path):
                    return profile
        return None


_DEFAULT_REGISTRY: Optional[PatternRegistry] = None


def default_registry() -> PatternRegistry:
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = PatternRegistry(DEFAULT_PROFILES)
    return _DEFAULT_REGISTRY
