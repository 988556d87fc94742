"""
FastAPI service that selects the tests relevant to a pull/merge request.

The service receives the changed files of a PR (and optionally the full file
listing of the repository), runs the path-based relevance engine and returns
the ranked test files together with a coverage estimate, a risk score and
recommendations for source files that have no test. The /trigger endpoint
additionally hands the selected tests to a CI adapter.

Supported CI modes (CI_MODE):
- mock: record the request, do not contact any CI system
- jenkins: start a parameterised Jenkins job
"""
import os
import logging
from fastapi import FastAPI, HTTPException
from .schemas import AnalyzeRequest, AnalyzeResponse, TriggerResponse
from .analysis import analyze_changes
from .ci_adapter import BuildRequest, trigger_from_env
from .config import AnalysisSettings
from .env_loader import load_dotenv_once
from .patterns import default_registry

load_dotenv_once()
logging.basicConfig(level=os.environ.get('LOG_LEVEL', 'INFO'))
logger = logging.getLogger("selector-service")

app = FastAPI(title="PR Test Selector Service", version="0.1.0")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "selector"}


def _run_analysis(req: AnalyzeRequest):
    settings = req.settings.to_analysis_settings() if req.settings else AnalysisSettings.from_env()
    changed = [cf.to_changed_file() for cf in req.changed_files]
    logger.info("analysis request: changed=%d, index=%s, max_results=%d",
                len(changed),
                'none' if req.repository_files is None else len(req.repository_files),
                settings.max_results)
    result = analyze_changes(
        changed_files=changed,
        repository_index=req.repository_files,
        registry=default_registry(),
        settings=settings,
    )
    for path in result.skipped_paths:
        logger.warning("skipped malformed path: %r", path)
    return result, settings


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze_endpoint(req: AnalyzeRequest):
    """
    Identify the tests relevant to a change set.

    Args:
        req: AnalyzeRequest with changed files, optional repository listing and settings

    Returns:
        AnalyzeResponse with ranked tests, coverage, risk and recommendations

    Raises:
        HTTPException: For processing errors
    """
    try:
        result, _ = _run_analysis(req)
        logger.info("/analyze response: tests=%d, coverage=%d, risk=%d",
                    len(result.identified_tests), result.coverage_estimate_percent, result.risk_score)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("selected sample: %s", result.test_paths()[:10])
        return AnalyzeResponse(**result.to_dict())
    except Exception as e:
        logger.exception("Analysis failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/trigger", response_model=TriggerResponse)
def trigger_endpoint(req: AnalyzeRequest):
    """
    Analyse a change set and start a CI build with the selected existing tests.

    Synchronous handler: the Jenkins adapter blocks on its HTTP call.

    Raises:
        HTTPException: 400 for an unsupported CI_MODE, 500 for other failures
    """
    try:
        trigger = trigger_from_env()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result, settings = _run_analysis(req)
        build = BuildRequest(
            test_files=result.existing_test_paths(),
            repo_url=req.repo.repo_url,
            pr_number=req.repo.pr_number,
            branch=req.repo.branch,
            coverage_threshold=settings.coverage_threshold,
        )
        outcome = trigger.trigger(build)
        logger.info("/trigger response: backend=%s, success=%s, tests=%d",
                    outcome.backend, outcome.success, len(outcome.test_files))
        return TriggerResponse(
            analysis=AnalyzeResponse(**result.to_dict()),
            build=outcome.to_dict(),
        )
    except Exception as e:
        logger.exception("Trigger failed")
        raise HTTPException(status_code=500, detail=str(e))


def _run_dev():
    import uvicorn
    uvicorn.run("pr_selector.main:app", host="0.0.0.0", port=int(os.environ.get("PORT", "8000")), reload=False)


if __name__ == "__main__":
    _run_dev()
