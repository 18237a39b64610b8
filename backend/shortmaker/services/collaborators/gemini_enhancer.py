"""
Footage query enhancement with Gemini
"""

from typing import Optional, Sequence

from google import genai

from ...core import EnhancementFailure, get_logger
from .base import PromptEnhancer

logger = get_logger(__name__, component="gemini_enhancer")


def build_enhancement_prompt(text: str, keywords: Sequence[str]) -> str:
    return (
        f'Create a descriptive video search prompt based on this scene: "{text}". '
        f"Focus on: {', '.join(keywords)}"
    )


def clean_enhanced_text(raw: Optional[str]) -> str:
    return (raw or "").replace("*", "").strip()


class GeminiPromptEnhancer(PromptEnhancer):
    """Turns a scene's narration and keywords into a richer stock-footage query."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", client: Optional[genai.Client] = None):
        if not api_key and client is None:
            raise ValueError("GEMINI_API_KEY is required for prompt enhancement")
        self.model = model
        self.client = client or genai.Client(api_key=api_key)

    async def enhance(self, text: str, keywords: Sequence[str]) -> str:
        prompt = build_enhancement_prompt(text, keywords)
        try:
            response = await self.client.aio.models.generate_content(model=self.model, contents=prompt)
        except Exception as exc:
            raise EnhancementFailure(f"Gemini request failed: {exc}") from exc

        enhanced = clean_enhanced_text(response.text)
        if not enhanced:
            raise EnhancementFailure("Gemini returned an empty prompt")
        return enhanced
