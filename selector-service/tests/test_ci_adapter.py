import os, sys
import pytest
import requests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from pr_selector import ci_adapter  # type: ignore
from pr_selector.ci_adapter import (  # type: ignore
    BuildRequest, JenkinsTrigger, MockTrigger, trigger_from_env, validate_test_files,
)


class FakeResponse:
    def __init__(self, status_code, headers=None):
        self.status_code = status_code
        self.headers = headers or {}


def _jenkins():
    return JenkinsTrigger(url="https://ci.example.com/", username="bot", token="secret-token", job_name="pr-tests")


def test_validate_test_files():
    valid, invalid = validate_test_files(["src/a.test.js", "../etc/passwd", "x<script>.js", ""])
    assert valid == ["src/a.test.js"]
    assert invalid == ["../etc/passwd", "x<script>.js", ""]


def test_mock_trigger_records_requests():
    trigger = MockTrigger()
    outcome = trigger.trigger(BuildRequest(test_files=["a.test.js", "../b.js"], pr_number=7))
    assert outcome.success
    assert outcome.backend == "mock"
    assert outcome.test_files == ["a.test.js"]
    assert trigger.requests[0].pr_number == 7


def test_jenkins_requires_configuration(monkeypatch):
    for var in ("JENKINS_URL", "JENKINS_USER", "JENKINS_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    with pytest.raises(RuntimeError):
        JenkinsTrigger().trigger(BuildRequest(test_files=[]))


def test_jenkins_rejects_invalid_url():
    trigger = JenkinsTrigger(url="ftp://ci", username="bot", token="secret-token", job_name="pr-tests")
    with pytest.raises(ValueError):
        trigger.trigger(BuildRequest(test_files=[]))


def test_jenkins_build_with_parameters(monkeypatch):
    calls = {}

    def fake_post(url, params=None, auth=None, timeout=None):
        calls.update(url=url, params=params, auth=auth)
        return FakeResponse(201, {"Location": "https://ci.example.com/queue/item/42/"})

    monkeypatch.setattr(ci_adapter.requests, "post", fake_post)
    build = BuildRequest(test_files=["src/a.test.js", "src/b.test.js"], repo_url="https://git.example.com/r.git",
                         pr_number=12, branch="feature/x", coverage_threshold=70)
    outcome = _jenkins().trigger(build)

    assert outcome.success
    assert outcome.queue_location == "https://ci.example.com/queue/item/42/"
    assert calls["url"] == "https://ci.example.com/job/pr-tests/buildWithParameters"
    assert calls["auth"] == ("bot", "secret-token")
    assert calls["params"] == {
        "REPO_URL": "https://git.example.com/r.git",
        "PR_NUMBER": "12",
        "TEST_FILES": "src/a.test.js,src/b.test.js",
        "BRANCH": "feature/x",
        "COVERAGE_THRESHOLD": "70",
    }


def test_jenkins_http_error_is_reported(monkeypatch):
    monkeypatch.setattr(ci_adapter.requests, "post", lambda *a, **k: FakeResponse(403))
    outcome = _jenkins().trigger(BuildRequest(test_files=["a.test.js"]))
    assert not outcome.success
    assert outcome.error == "http:403"


def test_jenkins_network_error_is_reported(monkeypatch):
    def boom(*a, **k):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(ci_adapter.requests, "post", boom)
    outcome = _jenkins().trigger(BuildRequest(test_files=["a.test.js"]))
    assert not outcome.success
    assert outcome.error == "network:ConnectionError"


def test_trigger_from_env(monkeypatch):
    monkeypatch.setenv("CI_MODE", "mock")
    assert isinstance(trigger_from_env(), MockTrigger)
    monkeypatch.setenv("CI_MODE", "jenkins")
    assert isinstance(trigger_from_env(), JenkinsTrigger)
    monkeypatch.setenv("CI_MODE", "travis")
    with pytest.raises(ValueError):
        trigger_from_env()
