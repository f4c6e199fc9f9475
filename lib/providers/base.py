"""Base class for AI providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ProviderCapability(Enum):
    """Capabilities that providers may support."""
    TEXT = "text"
    DOCUMENTS = "documents"


@dataclass
class GenerationConfig:
    """Configuration for text generation."""
    temperature: float = 0.3
    max_tokens: int = 65536


@dataclass
class Document:
    """An inline file sent alongside the prompt."""
    data: bytes
    mime_type: str = "application/pdf"


@dataclass
class GenerationResult:
    """Result from a generation request."""
    text: str
    model: str
    provider: str
    # promptTokens / outputTokens / totalTokens
    usage: dict = field(default_factory=dict)
    metadata: dict = field(default_factory=dict)


class AIProvider(ABC):
    """Abstract base class for AI providers."""

    PROVIDER_NAME: str = "base"
    CAPABILITIES: set[ProviderCapability] = set()

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key
        self._client = None

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
    ) -> GenerationResult:
        """
        Generate text from a prompt.

        Args:
            prompt: The text prompt
            config: Optional generation configuration

        Returns:
            GenerationResult with the response
        """
        pass

    @abstractmethod
    async def generate_with_documents(
        self,
        prompt: str,
        documents: list[Document],
        config: Optional[GenerationConfig] = None,
    ) -> GenerationResult:
        """
        Generate text from a prompt and attached files (PDFs).

        Args:
            prompt: The text prompt
            documents: Files sent inline before the prompt
            config: Optional generation configuration

        Returns:
            GenerationResult with the response
        """
        pass

    def supports(self, capability: ProviderCapability) -> bool:
        """Check if this provider supports a capability."""
        return capability in self.CAPABILITIES

    @abstractmethod
    async def close(self):
        """Close any open connections."""
        pass
