#!/usr/bin/env python3
"""
Turn git diff output into the changed_files list of an analysis request.
Reads a saved diff file, or runs `git diff BASE_REF HEAD_REF` when none is given.
"""

import json
import os
import subprocess
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..', 'selector-service')))
from pr_selector.diff_parser import parse_unified_diff  # noqa: E402


def git_args(*args):
    """Build a git command honouring REPO_CWD."""
    repo = os.environ.get("REPO_CWD", "").strip()
    cmd = ["git"]
    if repo:
        cmd += ["-C", repo]
    return cmd + list(args)


def read_diff(diff_path=None):
    """Return diff text from a file, or from git when no file is given."""
    if diff_path:
        with open(diff_path, 'r', encoding='utf-8', errors='ignore') as f:
            return f.read()
    base = os.environ.get("BASE_REF", "origin/main")
    head = os.environ.get("HEAD_REF", "HEAD")
    return subprocess.check_output(git_args("diff", "-M", base, head), text=True, errors='ignore')


def changed_files_payload(diff_text):
    """Serialise parsed diff entries the way the /analyze endpoint expects them."""
    out = []
    for cf in parse_unified_diff(diff_text):
        out.append({
            "path": cf.path,
            "status": cf.status.value,
            "additions": cf.additions,
            "deletions": cf.deletions,
            "previous_path": cf.previous_path,
            "diff_text": cf.diff_text,
        })
    return out


def main():
    """Main entry point."""
    if len(sys.argv) < 2:
        print("Usage: process_changed_files.py <output_file> [diff_file]", file=sys.stderr)
        sys.exit(1)

    out_path = sys.argv[1]
    diff_path = sys.argv[2] if len(sys.argv) > 2 else None

    changed = changed_files_payload(read_diff(diff_path))
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)

    with open(out_path, 'w', encoding='utf-8') as out:
        json.dump(changed, out, indent=2)

    print(f"Wrote {out_path} ({len(changed)} files)")


if __name__ == '__main__':
    main()
