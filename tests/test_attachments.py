"""Tests for answer_consensus/attachments.py."""

from pathlib import Path

import pytest

from answer_consensus.attachments import load_attachments, media_type_for, summarize_attachment


def test_text_is_decoded():
    att = summarize_attachment("notes.txt", "text/plain", b"hello world")
    assert att.text_summary == "hello world"
    assert att.name == "notes.txt"
    assert att.media_type == "text/plain"


def test_json_and_csv_count_as_text():
    assert summarize_attachment("a.json", "application/json", b'{"a": 1}').text_summary == '{"a": 1}'
    assert summarize_attachment("a.csv", "text/csv", b"x,y").text_summary == "x,y"


def test_text_truncated_to_budget():
    att = summarize_attachment("big.txt", "text/plain", b"a" * 50, text_budget=10)
    assert att.text_summary.startswith("a" * 10)
    assert "a" * 11 not in att.text_summary
    assert "truncated, 40 more bytes" in att.text_summary


def test_pdf_is_placeholder():
    att = summarize_attachment("paper.pdf", "application/pdf", b"%PDF-1.7" + b"\x00" * 92)
    assert att.text_summary == "[PDF file: paper.pdf, 100 bytes - content not extracted]"


def test_image_is_placeholder():
    att = summarize_attachment("shot.png", "image/png", b"\x89PNG")
    assert att.text_summary.startswith("[Image file: shot.png, 4 bytes")


def test_other_types_unsupported():
    att = summarize_attachment("a.zip", "application/zip", b"PK")
    assert att.text_summary == "[Unsupported file type: application/zip]"


def test_invalid_utf8_is_replaced():
    att = summarize_attachment("bad.txt", "text/plain", b"ok \xff end")
    assert att.text_summary.startswith("ok ")
    assert att.text_summary.endswith(" end")


def test_media_type_from_extension():
    assert media_type_for(Path("x.csv")) == "text/csv"
    assert media_type_for(Path("x.pdf")) == "application/pdf"
    assert media_type_for(Path("x.unknownext")) == "application/octet-stream"


def test_load_attachments_reads_files(tmp_path: Path):
    (tmp_path / "data.csv").write_text("a,b\n1,2", encoding="utf-8")
    (tmp_path / "doc.pdf").write_bytes(b"%PDF")
    atts = load_attachments([tmp_path / "data.csv", tmp_path / "doc.pdf"])
    assert [a.name for a in atts] == ["data.csv", "doc.pdf"]
    assert atts[0].text_summary == "a,b\n1,2"
    assert atts[1].text_summary.startswith("[PDF file")


def test_load_attachments_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_attachments([tmp_path / "nope.txt"])
