"""CSV loading and HTML table rendering shared by the report stages."""
from __future__ import annotations

import html
import logging
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from .document import Block

logger = logging.getLogger(__name__)


def load_table(path: Path, *, columns: Optional[Sequence[str]] = None, **read_kwargs) -> pd.DataFrame:
    """Read a CSV fully. Missing or malformed files raise; there is no fallback."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Table not found at {path}")
    df = pd.read_csv(path, **read_kwargs)
    if columns:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise KeyError(f"{path} is missing column(s) {missing}; found {list(df.columns)}")
    logger.debug("Loaded %s (%d rows, %d cols)", path, len(df), df.shape[1])
    return df


def render_table(frame: pd.DataFrame, caption: Optional[str] = None, *, precision: Optional[int] = None) -> str:
    """
    Render a DataFrame as an HTML table.

    Rows and columns come out exactly as they are in `frame`; the index is hidden.
    """
    styler = frame.style.hide(axis="index")
    if caption:
        styler = styler.set_caption(html.escape(caption))
    if precision is not None:
        styler = styler.format(precision=int(precision), na_rep="", escape="html")
    else:
        styler = styler.format(na_rep="", escape="html")
    # Styler truncates past styler.render.max_elements unless told otherwise
    with pd.option_context(
        "styler.render.max_elements", max(frame.size, 1),
        "styler.render.max_rows", None,
        "styler.render.max_columns", None,
    ):
        return styler.set_table_attributes('class="report-table"').to_html()


def table_block(frame: pd.DataFrame, caption: Optional[str] = None, *, precision: Optional[int] = None) -> Block:
    return Block(
        kind="table",
        html=render_table(frame, caption, precision=precision),
        caption=caption,
        data={"rows": len(frame), "columns": list(frame.columns)},
    )


def wide_to_long(frame: pd.DataFrame, *, key: str = "parameter", value: str = "value", strip_prefix: Optional[str] = None) -> pd.DataFrame:
    """
    Turn a single-row table (one column per parameter) into key/value rows.

    Column order becomes row order. Values keep their text form so mixed
    types (ints, floats, None, strings) display as written.
    """
    if len(frame) != 1:
        raise ValueError(f"Expected exactly one row to reshape, got {len(frame)}")
    names = [str(c) for c in frame.columns]
    if strip_prefix:
        names = [n[len(strip_prefix):] if n.startswith(strip_prefix) else n for n in names]
    values = ["" if pd.isna(v) else str(v) for v in frame.iloc[0].tolist()]
    return pd.DataFrame({key: names, value: values})


__all__ = ["load_table", "render_table", "table_block", "wide_to_long"]
