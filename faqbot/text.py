# SPDX-License-Identifier: CC0-1.0

from __future__ import annotations

import re
from types import MappingProxyType
from typing import AbstractSet, Callable, List, Optional

# Turkish letters folded to their plain Latin base, both cases.
TURKISH_FOLD = MappingProxyType(str.maketrans("çğıöşüÇĞİÖŞÜ", "cgiosucgiosu"))

_PUNCT_RE = re.compile(r"[.,!?;:()\[\]{}\"']")
_SPACE_RE = re.compile(r"\s+")

Normalizer = Callable[[str], str]


def normalize_text(text: str) -> str:
    """
    Folding runs before lower(): "İ".lower() yields "i" plus a combining dot.
    """
    folded = text.translate(TURKISH_FOLD).lower()
    folded = _PUNCT_RE.sub(" ", folded)
    return _SPACE_RE.sub(" ", folded).strip()


def lowercase_text(text: str) -> str:
    return text.lower()


def select_normalizer(normalize: bool) -> Normalizer:
    return normalize_text if normalize else lowercase_text


def remove_stopwords(text: str, stopwords: Optional[AbstractSet[str]] = None) -> List[str]:
    stopwords = stopwords or frozenset()
    return [token for token in text.split(" ") if token and token not in stopwords]


def tokenize(text: str, normalizer: Normalizer, stopwords: Optional[AbstractSet[str]] = None) -> List[str]:
    return remove_stopwords(normalizer(text), stopwords)
