#!/usr/bin/env python3
"""
Build the input JSON payload for the selector service.
Assembles repository metadata, changed files and the repository file listing.
"""

import json
import os
import subprocess


def list_repository_files():
    """Every tracked file of the checkout, via `git ls-files`."""
    repo = os.environ.get("REPO_CWD", "").strip()
    args = ["git"]
    if repo:
        args += ["-C", repo]
    args += ["ls-files"]
    try:
        out = subprocess.check_output(args, text=True)
    except (OSError, subprocess.CalledProcessError):
        # without a listing the service falls back to heuristic matching
        return None
    return [line.strip() for line in out.splitlines() if line.strip()]


def load_json(path, default):
    if os.path.exists(path):
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    return default


def parse_pr_number(raw):
    """Positive PR number from an env value, else None."""
    raw = (raw or "").strip()
    if not raw.isdigit():
        return None
    number = int(raw)
    return number if number > 0 else None


def build_payload():
    """Assemble the /analyze request body from environment and tool outputs."""
    payload = {
        "repo": {
            "name": os.path.basename(os.getcwd()),
            "repo_url": os.environ.get('REPO_URL', ''),
            "base_commit": os.environ.get('BASE_REF', 'origin/main'),
            "head_commit": os.environ.get('HEAD_REF', 'HEAD'),
            "pr_number": parse_pr_number(os.environ.get('PR_NUMBER')),
            "branch": os.environ.get('BRANCH', ''),
        },
        "changed_files": load_json('tools/output/changed_files.json', []),
        "settings": {
            "max_results": int(os.environ.get('MAX_RESULTS', '50')),
            "min_relevance": float(os.environ.get('MIN_RELEVANCE', '0.3')),
            "coverage_threshold": int(os.environ.get('COVERAGE_THRESHOLD', '80')),
        },
    }
    files = list_repository_files()
    if files is not None:
        payload["repository_files"] = files
    return payload


def main():
    """Build and write the input JSON for the selector service."""
    os.makedirs('tools/output', exist_ok=True)
    with open('tools/output/input_for_selector.json', 'w') as f:
        json.dump(build_payload(), f, indent=2)

    print('Wrote tools/output/input_for_selector.json')


if __name__ == '__main__':
    main()
