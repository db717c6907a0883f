"""
In-memory report document shared by the stages.

Stages append sections in run order; the render stage walks them once and
writes the HTML file. Blocks carry ready-made HTML fragments so the template
only has to lay them out.
"""
from __future__ import annotations

import base64
import html
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

BLOCK_KINDS = ("table", "image", "chart", "prose")


@dataclass
class Block:
    kind: str
    html: str
    caption: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.kind not in BLOCK_KINDS:
            raise ValueError(f"Unknown block kind '{self.kind}' (expected one of {BLOCK_KINDS})")


@dataclass
class Section:
    key: str
    title: str
    blocks: List[Block] = field(default_factory=list)

    def add(self, block: Block) -> Block:
        self.blocks.append(block)
        return block


@dataclass
class ReportDocument:
    title: str = "Bank Telemarketing Model Report"
    subtitle: Optional[str] = None
    author: Optional[str] = None
    date: Optional[str] = None
    sections: List[Section] = field(default_factory=list)

    def section(self, key: str, title: str) -> Section:
        """Return the section for `key`, creating it at the end if needed."""
        for existing in self.sections:
            if existing.key == key:
                return existing
        created = Section(key=key, title=title)
        self.sections.append(created)
        return created

    def get(self, key: str) -> Optional[Section]:
        return next((s for s in self.sections if s.key == key), None)

    def blocks(self, kind: Optional[str] = None) -> List[Block]:
        return [b for s in self.sections for b in s.blocks if kind is None or b.kind == kind]


def prose_block(text: str) -> Block:
    """Split text on blank lines into escaped <p> paragraphs."""
    paragraphs = [p.strip() for p in str(text).split("\n\n") if p.strip()]
    body = "\n".join(f"<p>{html.escape(' '.join(p.split()))}</p>" for p in paragraphs)
    return Block(kind="prose", html=body, data={"paragraphs": len(paragraphs)})


def data_uri(payload: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def image_block(path: Path, caption: Optional[str] = None, *, alt: Optional[str] = None) -> Block:
    """Embed an image file verbatim as a base64 data URI."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found at {path}")
    mime, _ = mimetypes.guess_type(path.name)
    if not mime or not mime.startswith("image/"):
        raise ValueError(f"{path} does not look like an image file")
    payload = path.read_bytes()
    alt_text = html.escape(alt or caption or path.stem)
    tag = f'<img src="{data_uri(payload, mime)}" alt="{alt_text}"/>'
    return Block(kind="image", html=tag, caption=caption, data={"path": str(path), "bytes": len(payload), "mime": mime})


__all__ = ["Block", "Section", "ReportDocument", "prose_block", "image_block", "data_uri", "BLOCK_KINDS"]
