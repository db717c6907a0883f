import base64

import pytest

from bank_report.document import Block, ReportDocument, image_block, prose_block
from bank_report.report.render import render_document

from conftest import PNG_BYTES


def test_section_is_created_once_and_keeps_order():
    doc = ReportDocument()
    first = doc.section("a", "A")
    doc.section("b", "B")

    assert doc.section("a", "ignored") is first
    assert [s.key for s in doc.sections] == ["a", "b"]


def test_block_kind_is_validated():
    with pytest.raises(ValueError):
        Block(kind="video", html="")


def test_prose_block_splits_paragraphs_and_escapes():
    block = prose_block("Line one\ncontinues here.\n\n<script>alert(1)</script>\n\n\n")

    assert block.data["paragraphs"] == 2
    assert "<p>Line one continues here.</p>" in block.html
    assert "&lt;script&gt;" in block.html
    assert "<script>" not in block.html


def test_image_block_embeds_bytes_verbatim(tmp_path):
    path = tmp_path / "cm.png"
    path.write_bytes(PNG_BYTES)

    block = image_block(path, "Confusion matrix")

    encoded = base64.b64encode(PNG_BYTES).decode("ascii")
    assert f'src="data:image/png;base64,{encoded}"' in block.html
    assert block.data["bytes"] == len(PNG_BYTES)
    assert block.caption == "Confusion matrix"


def test_image_block_uses_jpeg_mime(tmp_path):
    path = tmp_path / "cm.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake")

    assert image_block(path).data["mime"] == "image/jpeg"


def test_image_block_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        image_block(tmp_path / "absent.png")


def test_image_block_rejects_non_image(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hi", encoding="utf-8")

    with pytest.raises(ValueError):
        image_block(path)


def test_render_document_lays_out_sections():
    doc = ReportDocument(title="T & Co", author="Analytics", date="2024-05-01")
    doc.section("intro", "Introduction").add(prose_block("Hello."))
    doc.section("tables", "Tables").add(Block(kind="table", html="<table><tr><td>1</td></tr></table>", caption="cap"))

    html = render_document(doc)

    assert "<title>T &amp; Co</title>" in html
    assert '<section id="intro">' in html
    assert html.index('id="intro"') < html.index('id="tables"')
    assert "<table><tr><td>1</td></tr></table>" in html
    assert "<p>Hello.</p>" in html
    assert '<a href="#tables">Tables</a>' in html
