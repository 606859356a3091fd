# SPDX-License-Identifier: CC0-1.0

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class FAQ:
    id: str
    question: str
    answer: str
    keywords: Tuple[str, ...] = ()
    category: str = ""
    click_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        # callers may pass a list or None
        object.__setattr__(self, "keywords", tuple(self.keywords or ()))

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "FAQ":
        """
        Records use the widget's camelCase field names. A record without
        keywords or category still loads, with empty values.
        """
        return cls(
            id=str(raw["id"]),
            question=raw.get("question", ""),
            answer=raw.get("answer", ""),
            keywords=tuple(raw.get("keywords") or ()),
            category=raw.get("category") or "",
            click_count=int(raw.get("clickCount") or 0),
            created_at=_parse_timestamp(raw.get("createdAt")),
            updated_at=_parse_timestamp(raw.get("updatedAt")),
        )


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # fromisoformat does not accept a trailing "Z" before 3.11
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def load_faq(path: Path) -> List[FAQ]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return [FAQ.from_dict(item) for item in raw]


def build_faq_context(candidates: Sequence[FAQ]) -> str:
    if not candidates:
        return (
            "SSS içinde benzer bir soru bulunamadı. "
            "Kullanıcıdan sorusunu biraz daha açmasını iste."
        )

    blocks = []
    for faq in candidates:
        blocks.append(f"Soru: {faq.question}\nCevap: {faq.answer}")
    return "SSS'den yakın sonuçlar (kesin eşleşme değil):\n\n" + "\n\n".join(blocks)
