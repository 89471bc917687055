"""Comprehensive plant health report built from a stored analysis.

The report covers overall health, potential issues, and customized
recommendations for soil, fertilization, watering, and disease treatment.
Historical data is the JSON of a history record's output.
"""

import logging
import os
from typing import Dict

from openai import AsyncOpenAI

from services.openai.analysis_prompts import build_health_report_prompt
from services.openai.analysis_schema import HEALTH_REPORT_FUNCTION, HEALTH_REPORT_FUNCTION_NAME
from services.openai.media_inputs import text_message
from services.openai.response_parser import parse_function_call

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-5")


class HealthReportGenerator:
    """Create a structured health report for one plant."""

    SYSTEM_PROMPT = "You are an expert in plant health and care."

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_MODEL) -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model

    async def generate(self, plant_name: str, plant_description: str, historical_data: str) -> Dict[str, str]:
        """Return `overall_health`, `potential_issues` and `recommendations`."""
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=[
                    text_message("system", self.SYSTEM_PROMPT),
                    text_message("user", build_health_report_prompt(plant_name, plant_description, historical_data)),
                ],
                tools=[HEALTH_REPORT_FUNCTION],
                tool_choice={"type": "function", "name": HEALTH_REPORT_FUNCTION_NAME},
            )
        except Exception as exc:
            LOGGER.error("OpenAI Responses API error: %s", exc)
            raise

        args = parse_function_call(response, tool_name=HEALTH_REPORT_FUNCTION_NAME)
        return {
            "overall_health": args.get("overall_health", ""),
            "potential_issues": args.get("potential_issues", ""),
            "recommendations": args.get("recommendations", ""),
        }
