"""Refine plant care recommendations using user feedback."""

import logging
import os
from typing import Optional

from openai import AsyncOpenAI

from services.openai.analysis_prompts import build_feedback_prompt
from services.openai.media_inputs import text_message
from services.openai.response_parser import extract_text

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-5")


class RecommendationImprover:
    """Produce an improved recommendation after negative feedback."""

    SYSTEM_PROMPT = "You are an AI assistant designed to refine plant care recommendations based on user feedback."

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_MODEL) -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model

    async def improve(
        self,
        plant_name: str,
        recommendation: str,
        feedback: str,
        historical_data: Optional[str] = None,
    ) -> str:
        """Return the improved recommendation text."""
        if not feedback.strip():
            raise ValueError("Feedback text is required.")

        try:
            response = await self.client.responses.create(
                model=self.model,
                input=[
                    text_message("system", self.SYSTEM_PROMPT),
                    text_message(
                        "user",
                        build_feedback_prompt(plant_name, recommendation, feedback, historical_data),
                    ),
                ],
            )
        except Exception as exc:
            LOGGER.error("OpenAI Responses API error: %s", exc)
            raise

        improved = extract_text(response).strip()
        if not improved:
            raise RuntimeError("Improved recommendation was empty.")
        return improved
