"""
Chart helpers: coefficient bar charts (matplotlib or Plotly) and confusion-matrix heatmaps.
"""
from __future__ import annotations

import html
import io
from pathlib import Path
from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import plotly.express as px
import seaborn as sns
from matplotlib.colors import Normalize
from matplotlib.figure import Figure

from ..document import data_uri

BACKENDS = ("static", "interactive")
DIVERGING_CMAP = "coolwarm"


def coefficient_colors(values: Sequence[float], cmap: str = DIVERGING_CMAP) -> np.ndarray:
    """RGBA per value on a colormap centred on zero: sign picks the side, magnitude the depth."""
    arr = np.asarray(values, dtype=float)
    bound = float(np.abs(arr).max()) if arr.size else 0.0
    norm = Normalize(vmin=-(bound or 1.0), vmax=bound or 1.0)
    return matplotlib.colormaps[cmap](norm(arr))


def coefficient_bar_chart(df: pd.DataFrame, labels: Sequence[str], *, title: str, cmap: str = DIVERGING_CMAP) -> Figure:
    """Horizontal bars, first row on top, each bar labelled with its rounded value."""
    values = df["coefficient"].to_numpy(dtype=float)
    positions = np.arange(len(values))
    fig, ax = plt.subplots(figsize=(9, 0.45 * len(values) + 1.6))
    bars = ax.barh(positions, values, color=coefficient_colors(values, cmap), edgecolor="none")
    ax.set_yticks(positions)
    ax.set_yticklabels(df["feature"].tolist())
    ax.invert_yaxis()
    ax.axvline(0, color="#64748b", linewidth=0.8)
    ax.bar_label(bars, labels=list(labels), padding=3, fontsize=9)
    ax.margins(x=0.15)
    ax.set_xlabel("Coefficient")
    ax.set_title(title)
    sns.despine(ax=ax, left=True)
    fig.tight_layout()
    return fig


def interactive_coefficient_figure(df: pd.DataFrame, labels: Sequence[str], *, title: str):
    plot_df = df.assign(label=list(labels))
    fig = px.bar(
        plot_df,
        x="coefficient",
        y="feature",
        orientation="h",
        color="coefficient",
        color_continuous_scale="RdBu_r",
        color_continuous_midpoint=0,
        text="label",
        title=title,
    )
    fig.update_traces(textposition="outside", cliponaxis=False)
    fig.update_yaxes(autorange="reversed", title=None)
    fig.update_layout(
        template="simple_white",
        height=160 + 28 * len(plot_df),
        coloraxis_showscale=False,
    )
    return fig


def interactive_coefficient_chart(df: pd.DataFrame, labels: Sequence[str], *, title: str) -> str:
    fig = interactive_coefficient_figure(df, labels, title=title)
    return fig.to_html(full_html=False, include_plotlyjs=True)


def confusion_heatmap(cm: np.ndarray, labels: Sequence[str], *, title: str) -> Figure:
    fig, ax = plt.subplots(figsize=(5, 4.2))
    sns.heatmap(
        cm,
        annot=True,
        fmt="d",
        cmap="Blues",
        cbar=False,
        xticklabels=list(labels),
        yticklabels=list(labels),
        ax=ax,
    )
    ax.set_xlabel("Predicted")
    ax.set_ylabel("Actual")
    ax.set_title(title)
    fig.tight_layout()
    return fig


def figure_png(fig: Figure, *, dpi: int = 120) -> bytes:
    buffer = io.BytesIO()
    fig.savefig(buffer, format="png", dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return buffer.getvalue()


def figure_to_img_tag(fig: Figure, *, alt: str, save_to: Optional[Path] = None) -> str:
    """Encode a figure as an inline PNG; optionally also write it to disk."""
    payload = figure_png(fig)
    if save_to is not None:
        save_to = Path(save_to)
        save_to.parent.mkdir(parents=True, exist_ok=True)
        save_to.write_bytes(payload)
    return f'<img src="{data_uri(payload, "image/png")}" alt="{html.escape(alt)}"/>'
