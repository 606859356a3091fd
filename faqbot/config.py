# SPDX-License-Identifier: CC0-1.0

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
LOGS_DIR = BASE_DIR / "logs"
LOGS_DIR.mkdir(exist_ok=True)


@dataclass
class Settings:
    openai_api_key: Optional[str]
    openai_model: str
    brand_name: str
    log_level: str
    llm_timeout: float
    faq_path: Path
    rules_path: Path

    @classmethod
    def load(cls) -> "Settings":
        env_path = BASE_DIR / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        timeout_raw = os.getenv("LLM_TIMEOUT", "15")
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise RuntimeError(f"LLM_TIMEOUT must be a number, got {timeout_raw!r}") from None

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            brand_name=os.getenv("BRAND_NAME", "Shoply"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            llm_timeout=timeout,
            faq_path=Path(os.getenv("FAQ_PATH", DATA_DIR / "faq.json")),
            rules_path=Path(os.getenv("RULES_PATH", DATA_DIR / "rules.json")),
        )


@dataclass(frozen=True)
class RulesConfig:
    min_score: int = 3
    language: str = "tr"
    normalize: bool = True
    stopwords: FrozenSet[str] = frozenset()
    synonym_groups: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if self.min_score < 0:
            raise ValueError(f"minScore must be non-negative, got {self.min_score}")

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "RulesConfig":
        groups = raw.get("synonymGroups") or {}
        return cls(
            min_score=int(3 if raw.get("minScore") is None else raw["minScore"]),
            language=raw.get("language") or "tr",
            normalize=bool(raw.get("normalize", True)),
            stopwords=frozenset(raw.get("stopwords") or ()),
            synonym_groups=MappingProxyType(
                {root: tuple(synonyms or ()) for root, synonyms in groups.items()}
            ),
        )


def load_rules(path: Path) -> RulesConfig:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return RulesConfig.from_dict(raw)
