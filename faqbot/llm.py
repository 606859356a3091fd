# SPDX-License-Identifier: CC0-1.0

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from langchain_core.chat_history import InMemoryChatMessageHistory
from langchain_core.messages import AIMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_core.runnables import RunnableLambda
from langchain_core.runnables.history import RunnableWithMessageHistory
from langchain_openai import ChatOpenAI

logger = logging.getLogger(__name__)

SYSTEM_TEMPLATE = """
Sen {brand} mağazasının destek asistanısın.
Kurallar:
- Kullanıcının sorusu SSS'deki hiçbir kayıtla kesin olarak eşleşmedi.
- Kısa, nazik ve net cevap ver.
- Sadece verilen bağlamı kullan, bağlam dışında bilgi uydurma.
- Emin değilsen kullanıcıdan sorusunu biraz daha açmasını iste.
- Türkçe cevap ver.
""".strip()


def clarifying_reply(message: str) -> str:
    return (
        "Bu sorunuz hakkında kesin bir cevabım yok, ancak size yardımcı olmaya çalışayım. "
        f"\"{message}\" ile ilgili daha fazla bilgi verebilir misiniz? "
        "Böylece size daha iyi yardımcı olabilirim."
    )


def _with_history(chain):
    store: Dict[str, InMemoryChatMessageHistory] = {}

    def get_history(session_id: str):
        if session_id not in store:
            store[session_id] = InMemoryChatMessageHistory()
        return store[session_id]

    chain_with_history = RunnableWithMessageHistory(
        chain,
        get_history,
        input_messages_key="question",
        history_messages_key="history",
    )
    return chain_with_history, get_history


def build_chain(model_name: str, brand: str, api_key: Optional[str] = None, timeout: float = 15):
    chat = ChatOpenAI(
        model=model_name,
        api_key=api_key,
        temperature=0,
        timeout=timeout,
    )

    prompt = ChatPromptTemplate.from_messages([
        ("system", SYSTEM_TEMPLATE.format(brand=brand)),
        ("system", "{context}"),
        MessagesPlaceholder("history"),
        ("human", "{question}"),
    ])

    return _with_history(prompt | chat)


def build_static_chain():
    """
    Used when no OpenAI key is configured: answers every question with the
    canned clarifying reply, through the same history-aware interface.
    """
    chain = RunnableLambda(lambda inp: AIMessage(content=clarifying_reply(inp["question"])))
    return _with_history(chain)


async def generate_fallback_answer(
        chain,
        message: str,
        session_id: str,
        context: str = "",
        timeout: float = 15,
):
    """
    Asks the LLM for a reply to a message no FAQ matched.

    On timeout the pending call is cancelled and the canned clarifying reply
    is returned with usage None. Other errors propagate to the caller.
    Returns (reply, usage).
    """
    try:
        response = await asyncio.wait_for(
            chain.ainvoke(
                {"question": message, "context": context},
                {"configurable": {"session_id": session_id}},
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning("LLM fallback timed out after %.1fs", timeout)
        return clarifying_reply(message), None

    usage_meta = getattr(response, "usage_metadata", None)
    usage = None
    if usage_meta:
        usage = {
            "prompt_tokens": usage_meta.get("input_tokens", usage_meta.get("prompt_tokens", 0)),
            "completion_tokens": usage_meta.get("output_tokens", usage_meta.get("completion_tokens", 0)),
            "total_tokens": usage_meta.get("total_tokens", 0),
        }
    return response.content.strip(), usage
