"""Report section stages."""

from . import attributes, charts, coefficients, confusion, hyperparameters, prose, render, scores

__all__ = [
    "attributes",
    "charts",
    "coefficients",
    "confusion",
    "hyperparameters",
    "prose",
    "render",
    "scores",
]
