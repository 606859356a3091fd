# SPDX-License-Identifier: CC0-1.0
import asyncio
import json
import logging
import time
from datetime import datetime
from typing import Protocol, Sequence

from .config import Settings, RulesConfig, LOGS_DIR, load_rules
from .faq import FAQ, load_faq, build_faq_context
from .llm import build_chain, build_static_chain, generate_fallback_answer
from .logging_setup import setup_logging
from .matching import match_all_faqs, select_best
from .session import SessionState, JsonlLogger

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("/exit", "exit", "/quit", "quit")
GOODBYE = "İyi günler!"


class SupportsAInvoke(Protocol):
    async def ainvoke(self, inp: dict, config: dict) -> object: ...


def format_candidates(text: str, faqs: Sequence[FAQ], rules: RulesConfig) -> str:
    ranked = match_all_faqs(text, faqs, rules)
    if not ranked:
        return "SSS kataloğu boş."

    lines = []
    for entry in ranked:
        marker = "*" if entry.score >= rules.min_score and entry.score > 0 else " "
        lines.append(f"{marker} [{entry.score:>2}] {entry.faq_id}: {entry.faq.question}")
        lines.append("       " + json.dumps(entry.to_dict()["matchDetails"], ensure_ascii=False))
    return "\n".join(lines)


def format_stats(state: SessionState) -> str:
    stats = state.stats
    keywords = ", ".join(f"{k} ({c})" for k, c in stats.top_keywords()) or "-"
    return (
        f"Konuşma: {stats.conversations}, otomatik cevap oranı: %{stats.auto_answer_rate}, "
        f"medyan cevap süresi: {stats.median_response_time_ms:.0f} ms. "
        f"En çok eşleşen anahtar kelimeler: {keywords}"
    )


def answer_question(
        user_input: str,
        state: SessionState,
        chain: SupportsAInvoke,
        faqs: Sequence[FAQ],
        rules: RulesConfig,
        llm_timeout: float = 15,
) -> str:
    started = time.perf_counter()
    ranked = match_all_faqs(user_input, faqs, rules)
    best = select_best(ranked, rules)

    if best is not None:
        reply = best.faq.answer
        state.log_event("assistant", reply, source="faq", match=best.as_result().to_dict())
        state.stats.record(best.faq.question, best.matched_keywords, (time.perf_counter() - started) * 1000)
        return reply

    # no FAQ cleared the threshold: near misses go to the LLM as context
    near = [entry.faq for entry in ranked[:3] if entry.score > 0]
    try:
        reply, usage = asyncio.run(generate_fallback_answer(
            chain,
            user_input,
            session_id=state.session_id,
            context=build_faq_context(near),
            timeout=llm_timeout,
        ))
    except Exception as e:
        logger.exception("LLM fallback failed")
        reply = f"LLM hatası: {e}"
        state.log_event("assistant", reply, source="error")
        state.stats.record(None, (), (time.perf_counter() - started) * 1000)
        return reply

    if usage:
        state.log_usage_step(usage)
    state.log_event("assistant", reply, usage=usage, source="fallback")
    state.stats.record(None, (), (time.perf_counter() - started) * 1000)
    return reply


def handle_user_input(
        user_input: str,
        state: SessionState,
        chain: SupportsAInvoke,
        faqs: Sequence[FAQ],
        rules: RulesConfig,
        llm_timeout: float = 15,
) -> tuple[bool, str | None]:
    if not user_input:
        return False, None

    state.log_event("user", user_input)

    if user_input.lower() in EXIT_COMMANDS:
        state.log_event("assistant", GOODBYE, note="session_end")
        return True, GOODBYE

    if user_input.startswith("/stats"):
        return False, format_stats(state)

    if user_input.startswith("/candidates"):
        text = user_input[len("/candidates"):].strip()
        if not text:
            return False, "Doğru kullanım: /candidates <mesaj>"
        return False, format_candidates(text, faqs, rules)

    state.add_history("user", user_input)
    reply = answer_question(user_input, state, chain, faqs, rules, llm_timeout)
    state.add_history("assistant", reply)
    return False, reply


def run_bot(input_fn=input, print_fn=print):
    settings = Settings.load()
    setup_logging(settings.log_level)

    faqs = load_faq(settings.faq_path)
    rules = load_rules(settings.rules_path)
    logger.info("loaded %d FAQ records, min score %d", len(faqs), rules.min_score)

    session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    state = SessionState(
        session_id=session_id,
        brand=settings.brand_name,
        model=settings.openai_model,
        logger=JsonlLogger(LOGS_DIR / f"session_{session_id}.jsonl"),
    )
    state.init_meta()

    if settings.openai_api_key:
        chain, _ = build_chain(
            model_name=settings.openai_model,
            brand=settings.brand_name,
            api_key=settings.openai_api_key,
            timeout=settings.llm_timeout,
        )
    else:
        logger.warning("OPENAI_API_KEY is not set, unmatched questions get a canned reply")
        chain, _ = build_static_chain()

    print_fn(f"{settings.brand_name} destek botu. /candidates <mesaj>, /stats, çıkmak için /exit.")

    while True:
        try:
            user_input = input_fn("Siz: ").strip()
        except (EOFError, KeyboardInterrupt):
            print_fn(f"\nBot: {GOODBYE}")
            break

        should_exit, reply = handle_user_input(
            user_input=user_input,
            state=state,
            chain=chain,
            faqs=faqs,
            rules=rules,
            llm_timeout=settings.llm_timeout,
        )

        if reply is not None:
            print_fn(f"Bot: {reply}")
        if should_exit:
            break

    state.log_usage_summary()
    state.log_stats_summary()
