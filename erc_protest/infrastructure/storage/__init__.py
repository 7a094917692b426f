"""Artifact storage infrastructure."""
from .s3 import S3ArtifactSink

__all__ = ["S3ArtifactSink"]
