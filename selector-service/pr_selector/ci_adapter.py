"""
CI trigger adapters.

The relevance engine only produces a list of test paths; starting a build
with them is the job of an adapter. Each adapter implements the same
``trigger`` interface and returns a TriggerOutcome instead of raising on
network or HTTP failures, so the caller always gets a well-formed answer.
"""
import os
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests


logger = logging.getLogger("selector.ci")

_UNSAFE_FRAGMENTS = ('../', '.\\', '<script', 'javascript:')


@dataclass
class BuildRequest:
    """Pull-request metadata handed to the CI system alongside the tests."""
    test_files: List[str]
    repo_url: str = ''
    pr_number: Optional[int] = None
    branch: str = ''
    coverage_threshold: int = 80


@dataclass
class TriggerOutcome:
    success: bool
    backend: str
    test_files: List[str] = field(default_factory=list)
    queue_location: Optional[str] = None
    build_url: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'backend': self.backend,
            'test_files': list(self.test_files),
            'queue_location': self.queue_location,
            'build_url': self.build_url,
            'error': self.error,
            'timestamp': self.timestamp,
        }


def is_safe_test_path(path: str) -> bool:
    if not path or not isinstance(path, str):
        return False
    return not any(frag in path for frag in _UNSAFE_FRAGMENTS)


def validate_test_files(test_files: List[str]) -> Tuple[List[str], List[str]]:
    """
    Split test paths into ones safe to pass to a build and ones to drop.

    Returns:
        Tuple of (valid_files, invalid_files)
    """
    valid, invalid = [], []
    for f in test_files:
        (valid if is_safe_test_path(f) else invalid).append(f)
    return valid, invalid


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


class MockTrigger:
    """
    Trigger that records requests and never leaves the process.

    Used in ``CI_MODE=mock`` and in tests.
    """
    def __init__(self):
        self.requests: List[BuildRequest] = []

    def trigger(self, build: BuildRequest) -> TriggerOutcome:
        valid, invalid = validate_test_files(build.test_files)
        if invalid:
            logger.warning("MockTrigger: dropped %d unsafe test path(s)", len(invalid))
        self.requests.append(build)
        logger.debug("MockTrigger.trigger: tests=%d", len(valid))
        return TriggerOutcome(success=True, backend='mock', test_files=valid)


class JenkinsTrigger:
    """
    Starts a parameterised Jenkins job through ``buildWithParameters``.

    Expected environment variables:
    - JENKINS_URL: Base URL of the Jenkins server
    - JENKINS_USER: User name for basic auth
    - JENKINS_TOKEN: API token for basic auth
    - JENKINS_JOB: Job name (default: test-runner-pipeline)
    - JENKINS_TIMEOUT: Request timeout in seconds (default 30)

    Build parameters sent: REPO_URL, PR_NUMBER, TEST_FILES (comma separated),
    BRANCH, COVERAGE_THRESHOLD.
    """

    def __init__(self, url: Optional[str] = None, username: Optional[str] = None,
                 token: Optional[str] = None, job_name: Optional[str] = None):
        self.url = (url or os.environ.get('JENKINS_URL', '')).strip().rstrip('/')
        self.username = (username or os.environ.get('JENKINS_USER', '')).strip()
        self.token = (token or os.environ.get('JENKINS_TOKEN', '')).strip()
        self.job_name = (job_name or os.environ.get('JENKINS_JOB', 'test-runner-pipeline')).strip()
        self.timeout = float(os.environ.get('JENKINS_TIMEOUT', '30'))

    def _check_config(self) -> None:
        if not (self.url and self.username and self.token and self.job_name):
            raise RuntimeError('JenkinsTrigger not configured: set JENKINS_URL, JENKINS_USER, JENKINS_TOKEN')
        if not is_valid_url(self.url):
            raise ValueError(f'Invalid Jenkins URL: {self.url}')

    def build_parameters(self, build: BuildRequest, test_files: List[str]) -> Dict[str, str]:
        return {
            'REPO_URL': build.repo_url,
            'PR_NUMBER': '' if build.pr_number is None else str(build.pr_number),
            'TEST_FILES': ','.join(test_files),
            'BRANCH': build.branch,
            'COVERAGE_THRESHOLD': str(build.coverage_threshold),
        }

    def trigger(self, build: BuildRequest) -> TriggerOutcome:
        self._check_config()
        valid, invalid = validate_test_files(build.test_files)
        if invalid:
            logger.warning("JenkinsTrigger: dropped %d unsafe test path(s)", len(invalid))

        endpoint = f'{self.url}/job/{self.job_name}/buildWithParameters'
        job_url = f'{self.url}/job/{self.job_name}'
        params = self.build_parameters(build, valid)
        logger.info("JenkinsTrigger.trigger: job=%s tests=%d pr=%s", self.job_name, len(valid), params['PR_NUMBER'])
        try:
            resp = requests.post(endpoint, params=params, auth=(self.username, self.token), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("JenkinsTrigger network error: %s", e.__class__.__name__)
            return TriggerOutcome(success=False, backend='jenkins', test_files=valid, build_url=job_url,
                                  error=f'network:{e.__class__.__name__}')

        if resp.status_code >= 400:
            logger.warning("JenkinsTrigger HTTP error: %s", resp.status_code)
            return TriggerOutcome(success=False, backend='jenkins', test_files=valid, build_url=job_url,
                                  error=f'http:{resp.status_code}')

        location = resp.headers.get('Location')
        logger.info("JenkinsTrigger: build queued at %s", location)
        return TriggerOutcome(success=True, backend='jenkins', test_files=valid,
                              queue_location=location, build_url=job_url)


def trigger_from_env():
    """Build the adapter selected by ``CI_MODE`` (mock | jenkins)."""
    mode = os.environ.get('CI_MODE', 'mock').lower()
    if mode == 'mock':
        return MockTrigger()
    if mode == 'jenkins':
        return JenkinsTrigger()
    raise ValueError(f'Unsupported CI_MODE {mode}')
