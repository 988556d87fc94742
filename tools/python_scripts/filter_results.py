#!/usr/bin/env python3
"""
Filter selector output down to runnable test files.
Keeps existing tests only (suggestions do not exist yet), drops unsafe paths
and writes the list the CI job feeds to its test runner.
"""

import json
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..', 'selector-service')))
from pr_selector.ci_adapter import validate_test_files  # noqa: E402


def filter_selected_tests(min_confidence: float):
    """Filter selector_output.json and write tools/output/test_files.txt."""
    with open('selector_output.json', 'r') as f:
        sel = json.load(f)

    runnable = [
        t['test_path'] for t in sel.get('identified_tests', [])
        if t.get('origin') == 'existing' and float(t.get('confidence', 0)) >= min_confidence
    ]
    valid, invalid = validate_test_files(runnable)
    if invalid:
        print(f'Dropped {len(invalid)} unsafe test path(s)', file=sys.stderr)

    os.makedirs('tools/output', exist_ok=True)
    with open('tools/output/test_files.txt', 'w', encoding='utf-8') as f:
        f.write('\n'.join(valid) + ('\n' if valid else ''))

    print(f'Wrote tools/output/test_files.txt ({len(valid)} tests)')


def main():
    """Main entry point."""
    filter_selected_tests(float(os.environ.get('MIN_CONFIDENCE', '0.6')))


if __name__ == '__main__':
    main()
