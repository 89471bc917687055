"""Plant photo diagnosis using OpenAI's Responses API."""

import logging
import os
import time
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from models.analysis_record import ImageDiagnosis
from services.openai.analysis_prompts import (
    DEFAULT_IMAGE_DESCRIPTION,
    build_diagnosis_system_prompt,
    build_diagnosis_user_prompt,
)
from services.openai.analysis_schema import DIAGNOSIS_FUNCTION, DIAGNOSIS_FUNCTION_NAME
from services.openai.media_inputs import build_inputs
from services.openai.response_parser import extract_usage, parse_function_call

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-5")


class PlantDiagnosisService:
    """Detect plant diseases from a photo and recommend treatments."""

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_MODEL) -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model

    async def diagnose(
        self,
        image_reference: str,
        description: Optional[str] = None,
        *,
        history: Optional[str] = None,
        language: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Diagnose the plant shown in `image_reference` (a data URI).

        Args:
            image_reference: Photo as a base64 data URI.
            description: Optional symptoms or context typed by the user.
            history: Optional previous diagnoses and treatments of the plant.
            language: Locale for the output text.

        Returns:
            A dict with `diagnosis` (ImageDiagnosis), `latency`, and token usage.
        """
        start_time = time.time()
        inputs = build_inputs(
            build_diagnosis_system_prompt(language),
            build_diagnosis_user_prompt((description or "").strip() or DEFAULT_IMAGE_DESCRIPTION, history),
            image_reference=image_reference,
        )
        response = await self._create_response(inputs)
        diagnosis = self._parse_response(response)
        result: Dict[str, Any] = {"diagnosis": diagnosis, "latency": time.time() - start_time}
        result.update(extract_usage(response))
        return result

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        try:
            return await self.client.responses.create(
                model=self.model,
                input=inputs,
                tools=[DIAGNOSIS_FUNCTION],
                tool_choice={"type": "function", "name": DIAGNOSIS_FUNCTION_NAME},
            )
        except Exception as exc:
            LOGGER.error("Error during OpenAI Responses API call: %s", exc)
            raise

    def _parse_response(self, response: Any) -> ImageDiagnosis:
        try:
            args = parse_function_call(response, tool_name=DIAGNOSIS_FUNCTION_NAME)
        except Exception as exc:
            LOGGER.error("Error parsing OpenAI response: %s", exc)
            LOGGER.error("Full response object: %r", response)
            raise

        diagnosis = ImageDiagnosis(
            diagnosis=(args.get("diagnosis") or "").strip(),
            treatment_recommendations=(args.get("treatment_recommendations") or "").strip(),
        )
        if not diagnosis.diagnosis:
            raise RuntimeError("Diagnosis output was empty.")
        return diagnosis
