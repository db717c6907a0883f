"""
Confusion Matrix Stage: embeds the pre-rendered confusion-matrix image of each model.

A model without an image but with a predictions CSV gets a heatmap drawn here.
"""
from __future__ import annotations

from typing import Any, Dict, List

from sklearn.metrics import confusion_matrix

from ..core import PipelineContext, StageResult
from ..document import Block, image_block, prose_block
from ..utils import require, stage_logger
from . import charts
from .scores import load_predictions


def heatmap_block(context: PipelineContext, model: Dict[str, Any], *, caption: str) -> Block:
    path = context.resolve(model["predictions"])
    preds = load_predictions(
        path,
        true_col=model.get("true_col", "y_true"),
        pred_col=model.get("pred_col", "y_pred"),
    )
    labels = model.get("labels") or sorted(set(preds["y_true"]) | set(preds["y_pred"]), key=str)
    cm = confusion_matrix(preds["y_true"], preds["y_pred"], labels=labels)
    names = [str(label) for label in labels]
    fig = charts.confusion_heatmap(cm, names, title=caption)
    return Block(
        kind="chart",
        html=charts.figure_to_img_tag(fig, alt=caption),
        caption=caption,
        data={"matrix": cm.tolist(), "labels": names},
    )


def run(context: PipelineContext, *, force: bool = False) -> StageResult:
    cfg = context.stage("confusion_matrices")
    logger = stage_logger(context, "confusion_matrices", force=force)

    models: List[Dict[str, Any]] = require(cfg, "models", stage="confusion_matrices")
    section = context.document.section("confusion_matrices", cfg.get("title", "Confusion Matrices"))
    if cfg.get("intro"):
        section.add(prose_block(cfg["intro"]))

    embedded: Dict[str, str] = {}
    for model in models:
        name = require(model, "name", stage="confusion_matrices")
        caption = model.get("caption", f"Confusion matrix: {name}")
        if model.get("image"):
            path = context.resolve(model["image"])
            logger.info("Embedding confusion matrix for %s from %s", name, path)
            section.add(image_block(path, caption))
            embedded[name] = str(path)
        elif model.get("predictions"):
            logger.info("Drawing confusion matrix for %s from predictions", name)
            section.add(heatmap_block(context, model, caption=caption))
            embedded[name] = "generated"
        else:
            raise KeyError(f"Model '{name}' needs either 'image' or 'predictions' in stage 'confusion_matrices'")

    return StageResult(name="confusion_matrices", status="success", outputs={"images": embedded})
