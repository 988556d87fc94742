import os, sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..', 'tools', 'python_scripts')))
from build_input import parse_pr_number  # type: ignore


def test_pr_number_must_be_positive():
    """Zero, negative or missing PR numbers are sent as null."""
    assert parse_pr_number("42") == 42
    assert parse_pr_number(" 7 ") == 7
    assert parse_pr_number("0") is None
    assert parse_pr_number("-3") is None
    assert parse_pr_number("") is None
    assert parse_pr_number(None) is None
