# SPDX-License-Identifier: CC0-1.0

from __future__ import annotations

import json
import statistics
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonlLogger:
    def __init__(self, path: Path):
        self.path = path

    def write(self, record: Dict[str, Any]):
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")


@dataclass
class UsageTotals:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def add_step(self, usage: Dict[str, int]):
        self.prompt_tokens += usage.get("prompt_tokens", 0)
        self.completion_tokens += usage.get("completion_tokens", 0)
        self.total_tokens += usage.get("total_tokens", 0)


@dataclass
class SessionStats:
    """
    Dashboard numbers for one session: how many questions were asked,
    how many were answered straight from the FAQ and how fast.
    """
    conversations: int = 0
    auto_answered: int = 0
    keyword_counts: Counter = field(default_factory=Counter)
    question_counts: Counter = field(default_factory=Counter)
    response_times_ms: List[float] = field(default_factory=list)

    def record(self, question: Optional[str], matched_keywords: Sequence[str], elapsed_ms: float):
        self.conversations += 1
        self.response_times_ms.append(elapsed_ms)
        if question is not None:
            self.auto_answered += 1
            self.question_counts[question] += 1
            self.keyword_counts.update(matched_keywords)

    @property
    def auto_answer_rate(self) -> float:
        if not self.conversations:
            return 0.0
        return round(100 * self.auto_answered / self.conversations, 1)

    @property
    def median_response_time_ms(self) -> float:
        if not self.response_times_ms:
            return 0.0
        return statistics.median(self.response_times_ms)

    def top_keywords(self, n: int = 5) -> List[Tuple[str, int]]:
        return self.keyword_counts.most_common(n)

    def top_questions(self, n: int = 5) -> List[Tuple[str, int]]:
        return self.question_counts.most_common(n)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "todayConversations": self.conversations,
            "autoAnswerRate": self.auto_answer_rate,
            "topKeywords": [{"keyword": k, "count": c} for k, c in self.top_keywords()],
            "medianResponseTime": self.median_response_time_ms,
            "topQuestions": [{"question": q, "count": c} for q, c in self.top_questions()],
        }


@dataclass
class SessionState:
    session_id: str
    brand: str
    model: str
    logger: JsonlLogger
    history: List[Dict[str, str]] = field(default_factory=list)
    usage_totals: UsageTotals = field(default_factory=UsageTotals)
    stats: SessionStats = field(default_factory=SessionStats)

    def log_event(self, role: str, content: str, usage: Dict[str, Any] | None = None, **extra: Any):
        event = {
            "type": "message",
            "timestamp": _now(),
            "role": role,
            "content": content,
        }
        if usage is not None:
            event["usage"] = usage
        event.update(extra)
        self.logger.write(event)

    def init_meta(self):
        self.logger.write({
            "type": "meta",
            "timestamp": _now(),
            "session_id": self.session_id,
            "brand": self.brand,
            "model": self.model,
        })

    def add_history(self, role: str, content: str):
        self.history.append({"role": role, "content": content})
        self.history = self.history[-10:]

    def log_usage_step(self, usage: Dict[str, int]):
        self.usage_totals.add_step(usage)

    def log_usage_summary(self):
        self.logger.write({
            "type": "usage_summary",
            "timestamp": _now(),
            "usage": {
                "prompt_tokens": self.usage_totals.prompt_tokens,
                "completion_tokens": self.usage_totals.completion_tokens,
                "total_tokens": self.usage_totals.total_tokens,
            },
        })

    def log_stats_summary(self):
        self.logger.write({
            "type": "stats_summary",
            "timestamp": _now(),
            "stats": self.stats.to_dict(),
        })
