"""
Pure infrastructure LLM client for LangChain integration.

This client provides only invoke/stream functionality without any domain
knowledge. Prompts, response schemas and parsing belong to the application
layer.
"""

from typing import Any, AsyncIterator, List, Optional, Sequence, Tuple

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.output_parsers import StrOutputParser
from langchain_openai import ChatOpenAI

from pitchdeck.infra.config.logging_config import get_logger
from pitchdeck.infra.config.settings import Settings


class LangChainClient:
    """
    Infrastructure-layer LLM client.

    No domain knowledge or prompts should be included here.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 4000,
        base_url: Optional[str] = None,
        **kwargs,
    ):
        """Initialize LangChain client with LLM configuration."""
        llm_kwargs = {
            "api_key": api_key,
            "model": model_name,
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        }

        # Add base_url if provided (for OpenAI-compatible servers)
        if base_url:
            llm_kwargs["base_url"] = base_url

        self.llm = ChatOpenAI(**llm_kwargs)
        self._text_parser = StrOutputParser()
        self._log = get_logger("infra.llm")

    async def invoke_text(self, messages: List[BaseMessage], **bind_kwargs: Any) -> str:
        """
        Invoke LLM with messages and return the raw text response.

        Args:
            messages: List of LangChain message objects
            **bind_kwargs: Extra request parameters (e.g. ``response_format``)

        Returns:
            Raw text response from LLM
        """
        llm = self.llm.bind(**bind_kwargs) if bind_kwargs else self.llm
        response = await llm.ainvoke(messages)
        self._log.info("llm.invoke.text")
        return self._text_parser.invoke(response)

    async def stream_text(self, messages: List[BaseMessage]) -> AsyncIterator[str]:
        """
        Stream text response from LLM.

        Yields:
            Chunks of text as they arrive from LLM
        """
        async for chunk in self.llm.astream(messages):
            if isinstance(chunk.content, str) and chunk.content:
                yield chunk.content
        self._log.info("llm.stream.end")

    def create_messages(
        self,
        user_prompt: Optional[str] = None,
        system_prompt: Optional[str] = None,
        conversation_history: Sequence[Tuple[str, str]] = (),
    ) -> List[BaseMessage]:
        """
        Utility method to create message list for common patterns.

        Args:
            user_prompt: Optional trailing user message
            system_prompt: Optional system message
            conversation_history: ``(role, text)`` pairs, role ``user`` or ``model``

        Returns:
            List of BaseMessage objects ready for LLM invocation
        """
        messages: List[BaseMessage] = []

        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))

        for role, text in conversation_history:
            if role == "user":
                messages.append(HumanMessage(content=text))
            else:
                messages.append(AIMessage(content=text))

        if user_prompt:
            messages.append(HumanMessage(content=user_prompt))

        return messages


def build_llm_client(settings: Settings) -> LangChainClient:
    """Create a client from settings; raises ConfigurationError without a key."""
    return LangChainClient(
        api_key=settings.require_api_key(),
        model_name=settings.openai_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        base_url=settings.openai_base_url,
    )
