"""
Coefficient Stage: ranks logistic-regression coefficients and charts the
strongest positive and negative features.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Optional, Tuple

import pandas as pd

from ..core import PipelineContext, StageResult
from ..document import Block, prose_block
from ..tables import load_table
from ..utils import bool_from_cfg, require, stage_logger
from . import charts

TWO_PLACES = Decimal("0.01")


def load_coefficients(path: Path, *, feature_col: str = "feature", value_col: str = "coefficient") -> pd.DataFrame:
    """Load (feature, coefficient) rows; coefficients must be numeric."""
    df = load_table(path, columns=[feature_col, value_col])
    df = df[[feature_col, value_col]].rename(columns={feature_col: "feature", value_col: "coefficient"})
    values = pd.to_numeric(df["coefficient"], errors="coerce")
    if values.isna().any():
        rows = df.index[values.isna()].tolist()
        raise ValueError(f"{path} has missing or non-numeric coefficients at rows {rows[:10]}")
    df["coefficient"] = values.astype(float)
    df["feature"] = df["feature"].astype(str)
    return df


def sort_coefficients(df: pd.DataFrame, *, value_col: str = "coefficient") -> pd.DataFrame:
    """Sort descending; the stable sort keeps original row order among ties."""
    return df.sort_values(value_col, ascending=False, kind="mergesort").reset_index(drop=True)


def split_top_bottom(df: pd.DataFrame, top_n: int, bottom_n: Optional[int] = None) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Take the first `top_n` and the last `bottom_n` rows of an already sorted table.

    Selection is by position only. `bottom_n` defaults to `top_n`. Sizes larger
    than the table return all rows, so on short tables the two slices overlap.
    """
    if bottom_n is None:
        bottom_n = top_n
    top_n, bottom_n = int(top_n), int(bottom_n)
    if top_n < 0 or bottom_n < 0:
        raise ValueError(f"Slice sizes must be non-negative, got top_n={top_n}, bottom_n={bottom_n}")
    top = df.head(top_n)
    bottom = df.tail(bottom_n) if bottom_n else df.iloc[0:0]
    return top.copy(), bottom.copy()


def format_coefficient(value: float) -> str:
    """Two-decimal label, half-up (away from zero) on the decimal repr: 2.345 -> '2.35'."""
    rounded = Decimal(repr(float(value))).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)
    return f"{rounded:.2f}"


def _chart_block(df: pd.DataFrame, title: str, *, backend: str, png_path: Optional[Path]) -> Block:
    labels = [format_coefficient(v) for v in df["coefficient"]]
    if backend == "interactive":
        html = charts.interactive_coefficient_chart(df, labels, title=title)
    else:
        fig = charts.coefficient_bar_chart(df, labels, title=title)
        html = charts.figure_to_img_tag(fig, alt=title, save_to=png_path)
    return Block(kind="chart", html=html, caption=title, data={"features": df["feature"].tolist(), "labels": labels})


def run(context: PipelineContext, *, force: bool = False) -> StageResult:
    cfg = context.stage("coefficients")
    logger = stage_logger(context, "coefficients", force=force)

    path = context.resolve(require(cfg, "path", stage="coefficients"))
    top_n = int(cfg.get("top_n", 10))
    bottom_n = int(cfg.get("bottom_n", top_n))
    backend = cfg.get("chart_backend", "static")
    if backend not in charts.BACKENDS:
        raise ValueError(f"Unknown chart_backend '{backend}' (expected one of {charts.BACKENDS})")

    if top_n != bottom_n:
        logger.warning(
            "Top and bottom slice sizes differ (top_n=%d, bottom_n=%d); charts will not be symmetric",
            top_n, bottom_n,
        )

    logger.info("Loading coefficients from %s", path)
    ranked = sort_coefficients(
        load_coefficients(
            path,
            feature_col=cfg.get("feature_col", "feature"),
            value_col=cfg.get("value_col", "coefficient"),
        )
    )
    top, bottom = split_top_bottom(ranked, top_n, bottom_n)
    logger.info("Ranked %d coefficients; charting top %d and bottom %d", len(ranked), len(top), len(bottom))

    png_dir = None
    if bool_from_cfg(cfg.get("save_png"), default=False):
        png_dir = context.resolve(cfg.get("png_dir", "reports/figures"))
        png_dir.mkdir(parents=True, exist_ok=True)

    section = context.document.section("coefficients", cfg.get("title", "Logistic Regression Coefficients"))
    if cfg.get("intro"):
        section.add(prose_block(cfg["intro"]))
    section.add(_chart_block(
        top,
        cfg.get("top_title", f"Top {len(top)} coefficients"),
        backend=backend,
        png_path=png_dir / "coefficients_top.png" if png_dir else None,
    ))
    section.add(_chart_block(
        bottom,
        cfg.get("bottom_title", f"Bottom {len(bottom)} coefficients"),
        backend=backend,
        png_path=png_dir / "coefficients_bottom.png" if png_dir else None,
    ))
    if cfg.get("notes"):
        section.add(prose_block(cfg["notes"]))

    outputs = {"features": len(ranked), "top": len(top), "bottom": len(bottom)}
    if png_dir:
        outputs["png_dir"] = str(png_dir)
    return StageResult(
        name="coefficients",
        status="success",
        outputs=outputs,
        artifacts={"top": top, "bottom": bottom},
    )
