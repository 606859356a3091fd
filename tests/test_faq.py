# SPDX-License-Identifier: CC0-1.0

import json
from datetime import datetime, timezone

from faqbot.faq import FAQ, load_faq, build_faq_context


def test_load_faq_reads_camel_case_records(tmp_path):
    path = tmp_path / "faq.json"
    path.write_text(json.dumps([
        {
            "id": "faq-1",
            "question": "Kargom ne zaman gelir?",
            "answer": "2-5 gün.",
            "keywords": ["kargo", "kargo", "teslimat"],
            "category": "Kargo",
            "clickCount": 12,
            "createdAt": "2024-01-10T09:00:00Z",
            "updatedAt": "2024-02-01T10:00:00+00:00",
        },
    ], ensure_ascii=False), encoding="utf-8")

    [faq] = load_faq(path)
    assert faq.id == "faq-1"
    assert faq.keywords == ("kargo", "kargo", "teslimat")
    assert faq.click_count == 12
    assert faq.created_at == datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
    assert faq.updated_at.month == 2


def test_malformed_record_gets_empty_defaults():
    faq = FAQ.from_dict({"id": 3, "question": "Q", "answer": "A", "keywords": None})
    assert faq.id == "3"
    assert faq.keywords == ()
    assert faq.category == ""
    assert faq.click_count == 0
    assert faq.created_at is None


def test_build_faq_context_empty():
    ctx = build_faq_context([])
    assert "bulunamadı" in ctx


def test_build_faq_context_non_empty():
    ctx = build_faq_context([FAQ("a", "Q1", "A1")])
    assert "Q1" in ctx
    assert "A1" in ctx
