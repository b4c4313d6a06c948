"""FastAPI application entry point."""

from typing import Callable, Optional

from fastapi import FastAPI

from .. import __version__
from ..models.migration import MigrationConfig
from ..orchestrator import MigrationStepRunner
from ..services.progress import JsonFileProgressStore, ProgressStore
from .routes import steps

RunnerFactory = Callable[[MigrationConfig, ProgressStore], MigrationStepRunner]


def _default_runner_factory(config: MigrationConfig, progress: ProgressStore) -> MigrationStepRunner:
    return MigrationStepRunner.from_config(config, progress=progress)


def create_app(
    config: MigrationConfig,
    progress: Optional[ProgressStore] = None,
    runner_factory: Optional[RunnerFactory] = None
) -> FastAPI:
    """Build the API for one configured migration step."""
    app = FastAPI(
        title="Document Migration API",
        description="Run and inspect document migration steps",
        version=__version__,
    )

    app.state.config = config
    app.state.progress = progress or JsonFileProgressStore(config.progress_file)
    app.state.runner_factory = runner_factory or _default_runner_factory

    app.include_router(steps.router, prefix="/api/steps", tags=["steps"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
