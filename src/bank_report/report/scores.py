"""
Scores Stage: accuracy / precision / recall / F1 tables per model.

Scores are hand-entered constants in the config. A model may instead point at
a predictions CSV, in which case the four scores are computed here.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd
from sklearn.metrics import accuracy_score, f1_score, precision_score, recall_score

from ..core import PipelineContext, StageResult
from ..document import prose_block
from ..tables import load_table, table_block
from ..utils import require, stage_logger

SCORE_NAMES = ("accuracy", "precision", "recall", "f1")
SCORE_LABELS = {
    "accuracy": "Accuracy",
    "precision": "Precision",
    "recall": "Recall",
    "f1": "F1-score",
}
F1_TOLERANCE = 0.01


def literal_scores(values: Mapping[str, Any], *, model: str) -> Dict[str, float]:
    """Validate hand-entered scores: all four present, each within [0, 1]."""
    missing = [k for k in SCORE_NAMES if k not in values]
    if missing:
        raise KeyError(f"Model '{model}' is missing score(s) {missing}")
    scores = {}
    for key in SCORE_NAMES:
        value = float(values[key])
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Model '{model}' has {key}={value}, expected a value in [0, 1]")
        scores[key] = value
    return scores


def load_predictions(path: Path, *, true_col: str = "y_true", pred_col: str = "y_pred") -> pd.DataFrame:
    df = load_table(path, columns=[true_col, pred_col])
    return df[[true_col, pred_col]].rename(columns={true_col: "y_true", pred_col: "y_pred"})


def scores_from_predictions(preds: pd.DataFrame, *, pos_label: Any = 1) -> Dict[str, float]:
    y_true, y_pred = preds["y_true"], preds["y_pred"]
    return {
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "precision": float(precision_score(y_true, y_pred, pos_label=pos_label, zero_division=0)),
        "recall": float(recall_score(y_true, y_pred, pos_label=pos_label, zero_division=0)),
        "f1": float(f1_score(y_true, y_pred, pos_label=pos_label, zero_division=0)),
    }


def harmonic_f1(precision: float, recall: float) -> float:
    if precision + recall == 0:
        return 0.0
    return 2 * precision * recall / (precision + recall)


def check_f1(scores: Mapping[str, float], *, model: str, logger: logging.Logger, tolerance: float = F1_TOLERANCE) -> bool:
    """Warn when a reported F1 disagrees with its own precision and recall."""
    expected = harmonic_f1(scores["precision"], scores["recall"])
    if abs(expected - scores["f1"]) > tolerance:
        logger.warning(
            "Model '%s' reports F1=%.4f but precision/recall imply %.4f",
            model, scores["f1"], expected,
        )
        return False
    return True


def score_frame(scores: Mapping[str, float]) -> pd.DataFrame:
    """One-row table, one column per metric, in the fixed metric order."""
    return pd.DataFrame([{SCORE_LABELS[k]: scores[k] for k in SCORE_NAMES}])


def comparison_frame(by_model: Mapping[str, Mapping[str, float]]) -> pd.DataFrame:
    rows = [{"Model": name, **{SCORE_LABELS[k]: s[k] for k in SCORE_NAMES}} for name, s in by_model.items()]
    return pd.DataFrame(rows)


def run(context: PipelineContext, *, force: bool = False) -> StageResult:
    cfg = context.stage("scores")
    logger = stage_logger(context, "scores", force=force)

    models: List[Dict[str, Any]] = require(cfg, "models", stage="scores")
    precision: Optional[int] = cfg.get("precision", 4)
    section = context.document.section("scores", cfg.get("title", "Model Scores"))
    if cfg.get("intro"):
        section.add(prose_block(cfg["intro"]))

    by_model: Dict[str, Dict[str, float]] = {}
    for model in models:
        name = require(model, "name", stage="scores")
        if model.get("scores") is not None:
            scores = literal_scores(model["scores"], model=name)
            check_f1(scores, model=name, logger=logger)
            source = "literal"
        elif model.get("predictions"):
            path = context.resolve(model["predictions"])
            logger.info("Computing scores for %s from %s", name, path)
            preds = load_predictions(
                path,
                true_col=model.get("true_col", "y_true"),
                pred_col=model.get("pred_col", "y_pred"),
            )
            scores = scores_from_predictions(preds, pos_label=model.get("pos_label", 1))
            source = "predictions"
        else:
            raise KeyError(f"Model '{name}' needs either 'scores' or 'predictions' in stage 'scores'")

        logger.info("%s scores (%s): %s", name, source, {k: round(v, 4) for k, v in scores.items()})
        section.add(table_block(score_frame(scores), model.get("caption", f"Test-set scores: {name}"), precision=precision))
        by_model[name] = scores

    if cfg.get("compare", False) and len(by_model) > 1:
        section.add(table_block(comparison_frame(by_model), "Model comparison", precision=precision))

    return StageResult(name="scores", status="success", outputs={"models": list(by_model)}, artifacts={"scores": by_model})
