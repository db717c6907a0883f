"""
Hyper-parameter Stage: one table of best search parameters per model.
"""
from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from ..core import PipelineContext, StageResult
from ..document import prose_block
from ..tables import load_table, table_block, wide_to_long
from ..utils import require, stage_logger

LAYOUTS = ("auto", "long", "wide")
LONG_KEYS = ("parameter", "param", "name")


def detect_layout(df: pd.DataFrame) -> str:
    """A long table is two columns headed by a key column; any other one-row dump is wide."""
    if df.shape[1] == 2 and str(df.columns[0]).strip().lower() in LONG_KEYS:
        return "long"
    return "wide" if len(df) == 1 else "long"


def normalize_params(df: pd.DataFrame, *, layout: str = "auto", strip_prefix: str | None = None) -> pd.DataFrame:
    """Return (parameter, value) rows; long tables pass through untouched."""
    if layout not in LAYOUTS:
        raise ValueError(f"Unknown hyper-parameter layout '{layout}' (expected one of {LAYOUTS})")
    if layout == "auto":
        layout = detect_layout(df)
    if layout == "wide":
        return wide_to_long(df, strip_prefix=strip_prefix)
    if strip_prefix:
        first = df.columns[0]
        df = df.copy()
        df[first] = df[first].astype(str).str.removeprefix(strip_prefix)
    return df


def run(context: PipelineContext, *, force: bool = False) -> StageResult:
    cfg = context.stage("hyperparameters")
    logger = stage_logger(context, "hyperparameters", force=force)

    models: List[Dict[str, Any]] = require(cfg, "models", stage="hyperparameters")
    section = context.document.section("hyperparameters", cfg.get("title", "Best Hyper-parameters"))
    if cfg.get("intro"):
        section.add(prose_block(cfg["intro"]))

    counts: Dict[str, int] = {}
    for model in models:
        name = require(model, "name", stage="hyperparameters")
        path = context.resolve(require(model, "path", stage="hyperparameters"))
        logger.info("Loading best parameters for %s from %s", name, path)
        df = normalize_params(
            # literal "None" is a real setting value; only empty cells are missing
            load_table(path, keep_default_na=False, na_values=[""]),
            layout=model.get("layout", "auto"),
            strip_prefix=model.get("strip_prefix"),
        )
        section.add(table_block(df, model.get("caption", f"Best hyper-parameters: {name}")))
        if model.get("notes"):
            section.add(prose_block(model["notes"]))
        counts[name] = len(df)

    return StageResult(name="hyperparameters", status="success", outputs={"parameters": counts})
