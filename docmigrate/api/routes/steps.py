"""Step execution and progress endpoints."""

import dataclasses
import logging

from fastapi import APIRouter, HTTPException, Request

from ...exceptions import MigrationError
from ...models.migration import MigrationConfig
from ..models import ProgressResponse, StepReportResponse, StepRunRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_config(request: Request, step_id: str) -> MigrationConfig:
    config: MigrationConfig = request.app.state.config
    if step_id != config.step_id:
        raise HTTPException(status_code=404, detail=f"Step not found: {step_id}")
    return config


@router.get("/{step_id}/progress", response_model=ProgressResponse)
async def get_progress(step_id: str, request: Request):
    """List the documents a step has completed."""
    _get_config(request, step_id)
    processed = request.app.state.progress.get_processed_entities(step_id)
    return ProgressResponse(step_id=step_id, processed=sorted(processed))


@router.delete("/{step_id}/progress")
async def reset_progress(step_id: str, request: Request):
    """Forget a step's progress so every document is migrated again."""
    _get_config(request, step_id)
    request.app.state.progress.reset(step_id)
    return {"status": "reset"}


@router.post("/{step_id}/run", response_model=StepReportResponse)
def run_step(step_id: str, data: StepRunRequest, request: Request):
    """Run a step to completion and return its report."""
    config = _get_config(request, step_id)
    if data.direct_document_copy is not None:
        config = dataclasses.replace(config, direct_document_copy=data.direct_document_copy)

    progress = request.app.state.progress
    if data.reset:
        progress.reset(step_id)

    try:
        runner = request.app.state.runner_factory(config, progress)
    except MigrationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    try:
        report = runner.run()
    except MigrationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        logger.error(f"Step {step_id} failed: {e}")
        raise HTTPException(status_code=500, detail=f"Step {step_id} failed: {e}")
    finally:
        runner.close()

    return report.to_dict()
