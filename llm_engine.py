"""
LLM Engine - chat model factory for the UniAsset AI gateway.
Talks to OpenAI-compatible endpoints, either a hosted API ("cloud") or an
Ollama-style server ("local"). Backend defaults come from config.py.
"""

from typing import Any, Dict, List, Literal, Optional
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
import logging

from config import get_settings
from prompts import ADVISOR_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

LLM_MODES = ("cloud", "local")


class LLMClient:
    """
    Thin wrapper around a LangChain chat model.

    Pass ``llm`` to reuse an existing model (tests use a fake one); otherwise a
    ChatOpenAI client is built for the requested mode.
    """

    def __init__(
        self,
        mode: Optional[Literal["cloud", "local"]] = None,
        model_name: Optional[str] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        llm: Optional[BaseChatModel] = None
    ):
        """
        Args:
            mode: "cloud" or "local"; defaults to LLM_MODE
            model_name: Overrides OPENAI_MODEL / LOCAL_MODEL
            base_url: Overrides OPENAI_BASE_URL / LOCAL_LLM_URL
            api_key: Overrides OPENAI_API_KEY (ignored by most local servers)
            temperature: Overrides LLM_TEMPERATURE
            max_tokens: Response length cap, unlimited when None
            llm: Ready-made chat model

        Raises:
            ValueError: on an unknown mode or missing cloud credentials
        """
        settings = get_settings()
        self.mode = mode or settings.llm_mode
        self.model_name = model_name
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.max_tokens = max_tokens

        if llm is None:
            params = self._backend_params(base_url, api_key)
            logger.info(f"Initializing {self.mode} LLM: {params['model']} at {params['base_url'] or 'OpenAI official'}")
            llm = ChatOpenAI(temperature=self.temperature, max_tokens=self.max_tokens, **params)
        self.llm = llm

    def _backend_params(self, base_url: Optional[str], api_key: Optional[str]) -> Dict[str, Any]:
        """Resolve model, endpoint and key for the configured mode."""
        settings = get_settings()
        if self.mode not in LLM_MODES:
            raise ValueError(f"Invalid mode: {self.mode}. Must be 'cloud' or 'local'.")

        if self.mode == "local":
            return {
                "model": self.model_name or settings.local_model,
                "base_url": base_url or settings.local_llm_url,
                "api_key": api_key or "ollama",
            }

        model = self.model_name or settings.openai_model
        key = api_key or settings.openai_api_key
        if not key:
            raise ValueError("API key not found. Set OPENAI_API_KEY environment variable.")
        if not model:
            raise ValueError("Model name not found. Set OPENAI_MODEL environment variable.")
        return {"model": model, "base_url": base_url or settings.openai_base_url, "api_key": key}

    def get_llm(self) -> BaseChatModel:
        return self.llm

    def get_mode(self) -> str:
        return self.mode

    @staticmethod
    def build_messages(
        message: str,
        system_message: Optional[str] = None,
        image_b64: Optional[str] = None,
        image_mime: str = "image/png"
    ) -> List[BaseMessage]:
        """System prompt plus one user turn, multimodal when an image is attached."""
        content: Any = message
        if image_b64:
            content = [
                {"type": "text", "text": message},
                {"type": "image_url", "image_url": {"url": f"data:{image_mime};base64,{image_b64}"}},
            ]
        return [SystemMessage(content=system_message or ADVISOR_SYSTEM_PROMPT), HumanMessage(content=content)]

    def invoke(
        self,
        message: str,
        system_message: Optional[str] = None,
        image_b64: Optional[str] = None,
        image_mime: str = "image/png"
    ) -> str:
        """
        Send a single-turn request and return the reply text.

        Args:
            message: User turn
            system_message: Replaces the advisor system prompt
            image_b64: Optional base64 image sent with the text
            image_mime: MIME type of the image

        Returns:
            Reply text; list-shaped content is flattened to its text parts
        """
        response = self.llm.invoke(self.build_messages(message, system_message, image_b64, image_mime))
        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return content or ""
