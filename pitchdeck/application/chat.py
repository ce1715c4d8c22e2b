"""
Text chat with the export consultant.

A failed reply never propagates: it is logged and replaced by the profile's
apology so the conversation stays usable.
"""

from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional

from pitchdeck.domain.exceptions import ChatBusyError, EmptyMessageError
from pitchdeck.domain.profile import PRESTIGE_FOODS, PresentationProfile
from pitchdeck.domain.slide import ChatMessage, ChatRole
from pitchdeck.infra import metrics
from pitchdeck.infra.config.logging_config import get_logger
from pitchdeck.infra.config.settings import Settings
from pitchdeck.infra.llm.langchain_client import LangChainClient, build_llm_client

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChatUpdate:
    kind: str  # "delta" | "apology"
    text: str


class ChatSession:
    def __init__(
        self,
        settings: Settings,
        profile: PresentationProfile = PRESTIGE_FOODS,
        llm_factory: Callable[[Settings], LangChainClient] = build_llm_client,
    ):
        self.settings = settings
        self.profile = profile
        self._llm_factory = llm_factory
        self.is_loading = False
        self.messages: List[ChatMessage] = []
        self.reset()

    def reset(self) -> None:
        if self.is_loading:
            raise ChatBusyError()
        self.messages = [ChatMessage(ChatRole.MODEL, self.profile.chat_greeting)]

    def history(self) -> List[dict]:
        return [m.to_dict() for m in self.messages]

    async def send(self, text: str) -> AsyncIterator[ChatUpdate]:
        """Append the user's message and stream the reply into a trailing model message."""
        text = (text or "").strip()
        if not text:
            raise EmptyMessageError()
        if self.is_loading:
            raise ChatBusyError()

        self.is_loading = True
        history = [(m.role.value, m.text) for m in self.messages]
        self.messages.append(ChatMessage(ChatRole.USER, text))
        metrics.CHAT_MESSAGES.inc()
        logger.info("chat.send", length=len(text))

        reply: Optional[ChatMessage] = None
        try:
            llm = self._llm_factory(self.settings)
            messages = llm.create_messages(
                user_prompt=text,
                system_prompt=self.profile.chat_instruction,
                conversation_history=history,
            )
            stream = llm.stream_text(messages)
            reply = ChatMessage(ChatRole.MODEL, "")
            self.messages.append(reply)
            async for chunk in stream:
                reply.append(chunk)
                yield ChatUpdate("delta", chunk)
        except Exception as e:
            metrics.CHAT_FAILURES.inc()
            logger.error("chat.reply_failed", error=str(e))
            if reply is not None and not reply.text and self.messages[-1] is reply:
                self.messages.pop()
            self.messages.append(ChatMessage(ChatRole.MODEL, self.profile.chat_apology))
            yield ChatUpdate("apology", self.profile.chat_apology)
        else:
            logger.info("chat.reply", length=len(reply.text))
        finally:
            self.is_loading = False
