"""AI Provider abstraction layer for Gemini models."""

from .base import AIProvider, ProviderCapability, GenerationConfig, GenerationResult, Document
from .router import ProviderRouter, MODEL_MAPPING
from .google import GoogleProvider

__all__ = [
    "AIProvider",
    "ProviderCapability",
    "GenerationConfig",
    "GenerationResult",
    "Document",
    "ProviderRouter",
    "MODEL_MAPPING",
    "GoogleProvider",
]
