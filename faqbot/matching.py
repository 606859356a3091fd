# SPDX-License-Identifier: CC0-1.0

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import RulesConfig
from .faq import FAQ
from .text import Normalizer, select_normalizer, tokenize

logger = logging.getLogger(__name__)

EXACT_MATCH_POINTS = 2
SYNONYM_MATCH_POINTS = 1
CATEGORY_MATCH_POINTS = 1


@dataclass(frozen=True)
class MatchDetails:
    exact_matches: int = 0
    synonym_matches: int = 0
    category_match: bool = False


@dataclass(frozen=True)
class MatchResult:
    faq_id: Optional[str]
    score: int
    matched_keywords: Tuple[str, ...]
    details: MatchDetails

    @classmethod
    def no_match(cls) -> "MatchResult":
        return cls(faq_id=None, score=0, matched_keywords=(), details=MatchDetails())

    @property
    def matched(self) -> bool:
        return self.faq_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "faqId": self.faq_id,
            "score": self.score,
            "matchedKeywords": list(self.matched_keywords),
            "matchDetails": {
                "exactMatches": self.details.exact_matches,
                "synonymMatches": self.details.synonym_matches,
                "categoryMatch": self.details.category_match,
            },
        }


@dataclass(frozen=True)
class RankedMatch(MatchResult):
    faq: FAQ

    def as_result(self) -> MatchResult:
        return MatchResult(
            faq_id=self.faq_id,
            score=self.score,
            matched_keywords=self.matched_keywords,
            details=self.details,
        )


def expand_keywords(
        keywords: Iterable[str],
        synonym_groups: Optional[Mapping[str, Sequence[str]]],
) -> FrozenSet[str]:
    keywords = list(keywords or ())
    expanded = set(keywords)
    groups = synonym_groups or {}

    for keyword in keywords:
        for root, synonyms in groups.items():
            if keyword == root or keyword in synonyms:
                expanded.add(root)
                expanded.update(synonyms)

    return frozenset(expanded)


def score_faq(
        tokens: Sequence[str],
        faq: FAQ,
        expanded: FrozenSet[str],
        normalizer: Normalizer,
) -> Tuple[int, MatchDetails]:
    literal = set(faq.keywords)
    score = 0
    exact = 0
    synonym = 0

    for token in tokens:
        if token in literal:
            score += EXACT_MATCH_POINTS
            exact += 1
        elif token in expanded:
            score += SYNONYM_MATCH_POINTS
            synonym += 1

    category_tokens = set(normalizer(faq.category).split(" "))
    category_match = any(token in category_tokens for token in tokens)
    if category_match:
        score += CATEGORY_MATCH_POINTS

    return score, MatchDetails(exact_matches=exact, synonym_matches=synonym, category_match=category_match)


def find_matched_keywords(tokens: Sequence[str], faq: FAQ, normalizer: Normalizer) -> Tuple[str, ...]:
    """
    Keywords to highlight in the UI. Independent from the score counters:
    a multi-word keyword never equals a single token, so it is not
    reported here even if its words were counted as matches elsewhere.
    """
    token_set = set(tokens)
    return tuple(keyword for keyword in faq.keywords if normalizer(keyword) in token_set)


def rank_faqs(text: str, faqs: Sequence[FAQ], config: RulesConfig) -> List[RankedMatch]:
    normalizer = select_normalizer(config.normalize)
    tokens = tokenize(text, normalizer, config.stopwords)

    expansions: Dict[Tuple[str, ...], FrozenSet[str]] = {}
    ranked = []
    for faq in faqs:
        if faq.keywords not in expansions:
            expansions[faq.keywords] = expand_keywords(faq.keywords, config.synonym_groups)
        score, details = score_faq(tokens, faq, expansions[faq.keywords], normalizer)
        ranked.append(RankedMatch(
            faq_id=faq.id,
            score=score,
            matched_keywords=find_matched_keywords(tokens, faq, normalizer),
            details=details,
            faq=faq,
        ))

    # sorted() is stable: equal scores keep catalog order
    return sorted(ranked, key=lambda entry: entry.score, reverse=True)


def select_best(ranked: Sequence[RankedMatch], config: RulesConfig) -> Optional[RankedMatch]:
    if not ranked:
        return None

    best = ranked[0]
    logger.debug("best candidate %s scored %d (min %d)", best.faq_id, best.score, config.min_score)
    # a zero score never wins, even with min_score == 0
    if best.score > 0 and best.score >= config.min_score:
        return best
    return None


def match_message(text: str, faqs: Sequence[FAQ], config: RulesConfig) -> MatchResult:
    best = select_best(rank_faqs(text, faqs, config), config)
    if best is None:
        return MatchResult.no_match()
    return best.as_result()


def match_all_faqs(text: str, faqs: Sequence[FAQ], config: RulesConfig) -> List[RankedMatch]:
    return rank_faqs(text, faqs, config)
