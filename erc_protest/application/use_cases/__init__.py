"""Use cases."""
from .pipeline_factory import build_orchestrator, build_text_generator
from .pipeline_orchestrator import PipelineOrchestrator

__all__ = ["PipelineOrchestrator", "build_orchestrator", "build_text_generator"]
