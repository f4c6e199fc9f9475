"""Google Gemini provider implementation."""

import base64
import logging
import httpx
from typing import Optional

from lib.errors import FatalGenerationError, ProviderError
from .base import AIProvider, Document, GenerationConfig, GenerationResult, ProviderCapability

logger = logging.getLogger(__name__)


class GoogleProvider(AIProvider):
    """Provider for Google's Gemini models."""

    PROVIDER_NAME = "google"
    CAPABILITIES = {
        ProviderCapability.TEXT,
        ProviderCapability.DOCUMENTS,
    }

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    # Model name mapping from user-facing names to API model IDs
    MODEL_MAP = {
        "gemini-flash": "gemini-2.0-flash",
        "gemini-2-flash": "gemini-2.0-flash",
        "gemini-2.0-flash": "gemini-2.0-flash",
        "gemini-2.5-flash": "gemini-2.5-flash",
        "gemini-2.5-pro": "gemini-2.5-pro",
    }

    DEFAULT_MODEL = "gemini-2.0-flash"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key)
        # Map model name if needed
        self.model = self.MODEL_MAP.get(model, model)
        # Whole-textbook prompts run for minutes; callers enforce their own deadline
        self._client = httpx.AsyncClient(timeout=300.0, transport=transport)

    async def generate(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
    ) -> GenerationResult:
        """Generate text using Gemini."""
        return await self._generate(parts=[{"text": prompt}], config=config)

    async def generate_with_documents(
        self,
        prompt: str,
        documents: list[Document],
        config: Optional[GenerationConfig] = None,
    ) -> GenerationResult:
        """Generate text with inline PDFs using Gemini."""
        # Build parts: documents first, then text
        parts = []
        for document in documents:
            if not document.data:
                raise FatalGenerationError("File is empty (0 bytes).")
            parts.append({
                "inline_data": {
                    "mime_type": document.mime_type,
                    "data": base64.b64encode(document.data).decode("ascii"),
                }
            })
        parts.append({"text": prompt})

        return await self._generate(parts=parts, config=config)

    async def _generate(
        self,
        parts: list[dict],
        config: Optional[GenerationConfig],
    ) -> GenerationResult:
        if not self.api_key:
            raise FatalGenerationError("GEMINI_API_KEY not configured")

        config = config or GenerationConfig()
        url = f"{self.BASE_URL}/{self.model}:generateContent?key={self.api_key}"

        request_body = self._build_request_body(parts=parts, config=config)

        try:
            response = await self._client.post(
                url,
                json=request_body,
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as e:
            raise ProviderError(f"Gemini API request timed out: {e}", status_code=504)
        except httpx.TransportError as e:
            raise ProviderError(f"Gemini API connection failed: {e}", status_code=503)

        data = self._parse_response(response)
        text = self._extract_text(data)
        usage = self._extract_usage(data)
        logger.info("Gemini %s: %d chars, %s tokens", self.model, len(text), usage.get("totalTokens", "N/A"))

        return GenerationResult(
            text=text,
            model=self.model,
            provider=self.PROVIDER_NAME,
            usage=usage,
        )

    def _build_request_body(
        self,
        parts: list[dict],
        config: GenerationConfig,
    ) -> dict:
        """Build the Gemini API request body."""
        return {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": config.temperature,
                "maxOutputTokens": config.max_tokens,
            },
        }

    def _parse_response(self, response: httpx.Response) -> dict:
        """Check the HTTP status and return the decoded body."""
        if response.status_code != 200:
            error_msg = f"HTTP {response.status_code}"
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            if isinstance(error_data, dict) and "error" in error_data:
                error_msg = error_data["error"].get("message", error_msg)

            if response.status_code in (400, 401, 403) and "api key" in error_msg.lower():
                raise FatalGenerationError(f"Gemini API error: {error_msg}")
            raise ProviderError(f"Gemini API error ({response.status_code}): {error_msg}", status_code=response.status_code)

        data = response.json()

        if "error" in data:
            raise ProviderError(f"Gemini API error: {data['error'].get('message', 'Unknown error')}")
        return data

    def _extract_text(self, data: dict) -> str:
        candidates = data.get("candidates", [])
        if not candidates:
            raise ProviderError("Gemini API returned no candidates")

        parts = candidates[0].get("content", {}).get("parts", [])
        text = "".join(part.get("text", "") for part in parts)
        if not text.strip():
            raise ProviderError("Gemini returned empty response")

        return text

    def _extract_usage(self, data: dict) -> dict:
        metadata = data.get("usageMetadata", {})
        return {
            "promptTokens": metadata.get("promptTokenCount", 0),
            "outputTokens": metadata.get("candidatesTokenCount", 0),
            "totalTokens": metadata.get("totalTokenCount", 0),
        }

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
