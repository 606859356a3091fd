# SPDX-License-Identifier: CC0-1.0

import json
from pathlib import Path

from faqbot.session import JsonlLogger, SessionState, SessionStats


def make_state(tmp_path: Path) -> SessionState:
    return SessionState(
        session_id="test",
        brand="Shoply",
        model="gpt-4o-mini",
        logger=JsonlLogger(tmp_path / "session.jsonl"),
    )


def read_log(tmp_path: Path):
    lines = (tmp_path / "session.jsonl").read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_usage_totals_accumulate(tmp_path: Path):
    state = make_state(tmp_path)

    state.log_usage_step({"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15})
    state.log_usage_step({"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5})

    assert state.usage_totals.prompt_tokens == 13
    assert state.usage_totals.completion_tokens == 7
    assert state.usage_totals.total_tokens == 20


def test_log_event_writes_jsonl(tmp_path: Path):
    state = make_state(tmp_path)
    state.init_meta()
    state.log_event("assistant", "Merhaba", source="faq")
    state.log_usage_summary()

    meta, message, summary = read_log(tmp_path)
    assert meta["type"] == "meta"
    assert meta["session_id"] == "test"
    assert message["content"] == "Merhaba"
    assert message["source"] == "faq"
    assert "usage" not in message
    assert summary["type"] == "usage_summary"


def test_history_is_trimmed(tmp_path: Path):
    state = make_state(tmp_path)
    for i in range(15):
        state.add_history("user", str(i))
    assert len(state.history) == 10
    assert state.history[0]["content"] == "5"


def test_stats_dashboard_numbers():
    stats = SessionStats()
    stats.record("Kargom ne zaman gelir?", ["kargo"], 10.0)
    stats.record("Kargom ne zaman gelir?", ["kargo", "sure"], 30.0)
    stats.record(None, (), 20.0)
    stats.record("İade nasıl yapılır?", ["iade"], 40.0)

    assert stats.conversations == 4
    assert stats.auto_answered == 3
    assert stats.auto_answer_rate == 75.0
    assert stats.median_response_time_ms == 25.0
    assert stats.top_keywords(1) == [("kargo", 2)]
    assert stats.top_questions(1) == [("Kargom ne zaman gelir?", 2)]

    data = stats.to_dict()
    assert data["todayConversations"] == 4
    assert data["topKeywords"][0] == {"keyword": "kargo", "count": 2}


def test_empty_stats():
    stats = SessionStats()
    assert stats.auto_answer_rate == 0.0
    assert stats.median_response_time_ms == 0.0
