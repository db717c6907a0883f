"""
Discussion Stage: static commentary sections (interpretation, conclusion).
"""
from __future__ import annotations

from pathlib import Path

from ..core import PipelineContext, StageResult
from ..document import prose_block
from ..utils import require, stage_logger


def run(context: PipelineContext, *, force: bool = False) -> StageResult:
    cfg = context.stage("discussion", required=False)
    logger = stage_logger(context, "discussion", force=force)

    sections = cfg.get("sections") or []
    if not sections:
        return StageResult(name="discussion", status="skipped", details="no discussion sections configured")

    keys = []
    for entry in sections:
        title = require(entry, "title", stage="discussion")
        key = entry.get("key") or title.lower().replace(" ", "_")
        if entry.get("file"):
            # Long commentary can live in a text file next to the data
            path = context.resolve(entry["file"])
            if not path.exists():
                raise FileNotFoundError(f"Discussion text not found at {path}")
            text = Path(path).read_text(encoding="utf-8")
        else:
            text = require(entry, "text", stage="discussion")
        block = prose_block(text)
        context.document.section(key, title).add(block)
        logger.debug("Added %d paragraph(s) to '%s'", block.data["paragraphs"], title)
        keys.append(key)

    return StageResult(name="discussion", status="success", outputs={"sections": keys})
