"""Provider router - maps model names to Gemini provider."""

import os
from typing import Optional

from lib.errors import FatalGenerationError
from .base import AIProvider
from .google import GoogleProvider


# Mapping from user-facing model names to (provider_class, model_id)
MODEL_MAPPING = {
    "Gemini Flash": (GoogleProvider, "gemini-2.0-flash"),
    "Gemini 2.5 Flash": (GoogleProvider, "gemini-2.5-flash"),
    "Gemini 2.5 Pro": (GoogleProvider, "gemini-2.5-pro"),
    "gemini-flash": (GoogleProvider, "gemini-2.0-flash"),
    "gemini-2.0-flash": (GoogleProvider, "gemini-2.0-flash"),
    "gemini-2.5-flash": (GoogleProvider, "gemini-2.5-flash"),
    "gemini-2.5-pro": (GoogleProvider, "gemini-2.5-pro"),
}

DEFAULT_MODEL = "gemini-2.0-flash"


class ProviderRouter:
    """Routes requests to the Gemini provider based on model selection."""

    def __init__(self, gemini_api_key: Optional[str] = None):
        """
        Initialize the router with API key.

        Key can be provided directly or will be read from GEMINI_API_KEY
        (or GOOGLE_API_KEY).
        """
        self.gemini_api_key = (
            gemini_api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        )

        # Cache of active provider instances
        self._providers: dict[str, AIProvider] = {}

    def get_provider(self, model_name: Optional[str] = None) -> AIProvider:
        """
        Get the appropriate provider for a model.

        Args:
            model_name: User-facing model name; defaults to GEMINI_MODEL

        Returns:
            Configured AIProvider instance

        Raises:
            ValueError: If model is not recognized
            FatalGenerationError: If the API key is missing
        """
        model_name = model_name or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
        if model_name not in MODEL_MAPPING:
            raise ValueError(f"Unknown model: {model_name}. Available models: {list(MODEL_MAPPING.keys())}")

        provider_class, model_id = MODEL_MAPPING[model_name]

        # Create a cache key based on provider + model
        cache_key = f"{provider_class.PROVIDER_NAME}:{model_id}"

        if cache_key not in self._providers:
            if not self.gemini_api_key:
                raise FatalGenerationError("GEMINI_API_KEY not configured")

            self._providers[cache_key] = provider_class(api_key=self.gemini_api_key, model=model_id)

        return self._providers[cache_key]

    def supports_model(self, model_name: str) -> bool:
        """Check if a model is supported."""
        return model_name in MODEL_MAPPING

    async def close_all(self):
        """Close all provider connections."""
        for provider in self._providers.values():
            await provider.close()
        self._providers.clear()
