"""
Unit tests for the text chat session.
"""

import asyncio

import pytest

from pitchdeck.application.chat import ChatSession
from pitchdeck.domain.exceptions import ChatBusyError, EmptyMessageError
from pitchdeck.domain.profile import PRESTIGE_FOODS
from pitchdeck.domain.slide import ChatRole
from pitchdeck.infra.llm.langchain_client import build_llm_client

from tests._helpers.fakes import FakeLLM, llm_factory

pytestmark = pytest.mark.asyncio


async def collect(chat, text):
    return [u async for u in chat.send(text)]


async def test_starts_with_greeting(settings, fake_llm):
    chat = ChatSession(settings, llm_factory=llm_factory(fake_llm))

    assert chat.history() == [{"role": "model", "text": PRESTIGE_FOODS.chat_greeting}]


async def test_chunks_accumulate_into_one_trailing_message(settings):
    llm = FakeLLM(chunks=["Hola", " amigo"])
    chat = ChatSession(settings, llm_factory=llm_factory(llm))

    updates = await collect(chat, "  ¿Qué es el lulo?  ")

    assert [(u.kind, u.text) for u in updates] == [("delta", "Hola"), ("delta", " amigo")]
    assert len(chat.messages) == 3
    assert chat.messages[1].role is ChatRole.USER
    assert chat.messages[1].text == "¿Qué es el lulo?"
    assert chat.messages[-1].role is ChatRole.MODEL
    assert chat.messages[-1].text == "Hola amigo"
    assert chat.is_loading is False


async def test_empty_stream_still_leaves_a_model_reply(settings):
    chat = ChatSession(settings, llm_factory=llm_factory(FakeLLM(chunks=[])))

    updates = await collect(chat, "Hola")

    assert updates == []
    assert [m.role for m in chat.messages] == [ChatRole.MODEL, ChatRole.USER, ChatRole.MODEL]
    assert chat.messages[-1].text == ""
    assert chat.is_loading is False


async def test_history_is_sent_with_each_message(settings):
    llm = FakeLLM(chunks=["Sí"])
    chat = ChatSession(settings, llm_factory=llm_factory(llm))

    await collect(chat, "Primera")
    await collect(chat, "Segunda")

    assert llm.histories[1] == (
        ("model", PRESTIGE_FOODS.chat_greeting),
        ("user", "Primera"),
        ("model", "Sí"),
    )


async def test_stream_failure_appends_apology(settings):
    llm = FakeLLM(chunks=["Hola", " amigo"], error=RuntimeError("reset"), fail_after=1)
    chat = ChatSession(settings, llm_factory=llm_factory(llm))

    updates = await collect(chat, "Hola")

    assert [u.kind for u in updates] == ["delta", "apology"]
    assert chat.messages[-2].text == "Hola"
    assert chat.messages[-1].text == PRESTIGE_FOODS.chat_apology
    assert chat.is_loading is False


async def test_failure_before_first_chunk_only_adds_apology(settings):
    chat = ChatSession(settings, llm_factory=llm_factory(FakeLLM(error=RuntimeError("x"))))

    await collect(chat, "Hola")

    assert [m.role for m in chat.messages] == [ChatRole.MODEL, ChatRole.USER, ChatRole.MODEL]
    assert chat.messages[-1].text == PRESTIGE_FOODS.chat_apology


async def test_missing_credential_is_contained(settings_without_key):
    chat = ChatSession(settings_without_key, llm_factory=build_llm_client)

    updates = await collect(chat, "Hola")

    assert updates[-1].kind == "apology"


@pytest.mark.parametrize("text", ["", "   ", None])
async def test_empty_message_is_rejected(settings, fake_llm, text):
    chat = ChatSession(settings, llm_factory=llm_factory(fake_llm))

    with pytest.raises(EmptyMessageError):
        await collect(chat, text)
    assert len(chat.messages) == 1


async def test_concurrent_send_is_rejected(settings):
    gate = asyncio.Event()
    chat = ChatSession(settings, llm_factory=llm_factory(FakeLLM(chunks=["a"], gate=gate)))

    first = asyncio.create_task(collect(chat, "uno"))
    await asyncio.sleep(0)
    assert chat.is_loading is True

    with pytest.raises(ChatBusyError):
        await collect(chat, "dos")

    gate.set()
    await first
    assert chat.messages[-1].text == "a"


async def test_reset_returns_to_greeting(settings, fake_llm):
    chat = ChatSession(settings, llm_factory=llm_factory(fake_llm))
    await collect(chat, "Hola")

    chat.reset()

    assert len(chat.messages) == 1
    assert chat.messages[0].text == PRESTIGE_FOODS.chat_greeting
