"""Report stage registry."""

from __future__ import annotations

from typing import Callable, Dict

from .core import PipelineContext, StageResult
from .report import attributes, coefficients, confusion, hyperparameters, prose, render, scores

StageFn = Callable[[PipelineContext], StageResult]

STAGES: Dict[str, StageFn] = {
    "attributes": attributes.run,
    "hyperparameters": hyperparameters.run,
    "confusion_matrices": confusion.run,
    "scores": scores.run,
    "coefficients": coefficients.run,
    "discussion": prose.run,
    "render": render.run,
}

__all__ = ["STAGES", "StageFn"]
