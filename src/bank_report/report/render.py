"""
Render Stage: writes the collected report document as one self-contained HTML file.
"""
from __future__ import annotations

import datetime as dt

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from ..core import PipelineContext, StageResult
from ..document import ReportDocument
from ..utils import stage_logger

TEMPLATE_NAME = "report.html.j2"


def build_environment() -> Environment:
    return Environment(
        loader=PackageLoader("bank_report", "templates"),
        autoescape=select_autoescape(["html", "j2"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_document(document: ReportDocument, *, env: Environment | None = None) -> str:
    """Lay the sections out through the HTML template. Block HTML is trusted as-is."""
    env = env or build_environment()
    template = env.get_template(TEMPLATE_NAME)
    sections = [
        {
            "key": section.key,
            "title": section.title,
            "blocks": [
                {"kind": b.kind, "caption": b.caption, "html": Markup(b.html)}
                for b in section.blocks
            ],
        }
        for section in document.sections
    ]
    return template.render(
        title=document.title,
        subtitle=document.subtitle,
        author=document.author,
        date=document.date,
        sections=sections,
    )


def run(context: PipelineContext, *, force: bool = False, output: str | None = None) -> StageResult:
    cfg = context.stage("render", required=False)
    logger = stage_logger(context, "render", force=force)
    report_cfg = context.config.report

    doc = context.document
    doc.title = report_cfg.get("title", doc.title)
    doc.subtitle = report_cfg.get("subtitle", doc.subtitle)
    doc.author = report_cfg.get("author", doc.author)
    doc.date = str(report_cfg.get("date") or dt.date.today().isoformat())

    if not doc.sections:
        return StageResult(name="render", status="failed", details="Report document has no sections; nothing to render.")

    out_path = context.resolve(output or cfg.get("output") or report_cfg.get("output", "reports/bank_marketing_report.html"))
    out_path.parent.mkdir(parents=True, exist_ok=True)

    html_text = render_document(doc)
    out_path.write_text(html_text, encoding="utf-8")
    logger.info("Report written to %s (%d sections, %d blocks)", out_path, len(doc.sections), len(doc.blocks()))

    return StageResult(
        name="render",
        status="success",
        outputs={"report": str(out_path)},
        artifacts={"html": html_text},
    )
