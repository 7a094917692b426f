"""Presentation layer - FastAPI request surface for the pipeline."""
