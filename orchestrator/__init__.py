"""Pipeline orchestration and run artifacts."""

from .service import PipelineOrchestrator, build_orchestrator
from .store import RunArtifactStore

__all__ = [
    "PipelineOrchestrator",
    "RunArtifactStore",
    "build_orchestrator",
]
