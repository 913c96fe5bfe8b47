"""Batch pipeline wrapping the tier orchestrator."""

from dateline.pipeline.validation_pipeline import (
    BatchReport,
    ValidatedEvent,
    ValidationPipeline,
)

__all__ = ["BatchReport", "ValidatedEvent", "ValidationPipeline"]
