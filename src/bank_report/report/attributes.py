"""
Attributes Stage: renders the dataset attribute description table.
"""
from __future__ import annotations

from ..core import PipelineContext, StageResult
from ..document import prose_block
from ..tables import load_table, table_block
from ..utils import require, stage_logger


def run(context: PipelineContext, *, force: bool = False) -> StageResult:
    cfg = context.stage("attributes")
    logger = stage_logger(context, "attributes", force=force)

    path = context.resolve(require(cfg, "path", stage="attributes"))
    columns = cfg.get("columns")

    logger.info("Loading attribute descriptions from %s", path)
    df = load_table(path, columns=columns)
    if columns:
        df = df[list(columns)]

    section = context.document.section("attributes", cfg.get("title", "Dataset Attributes"))
    if cfg.get("intro"):
        section.add(prose_block(cfg["intro"]))
    section.add(table_block(df, cfg.get("caption", "Attribute descriptions")))

    return StageResult(
        name="attributes",
        status="success",
        outputs={"rows": len(df)},
        artifacts={"path": str(path)},
    )
