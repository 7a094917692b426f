"""Configuration package."""
from .config import PipelineSettings, load_pipeline_settings

__all__ = ["PipelineSettings", "load_pipeline_settings"]
