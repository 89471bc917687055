from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Union

IMAGE_ANALYSIS = "image"
VOICE_ANALYSIS = "voice"


@dataclass(frozen=True)
class ImageDiagnosis:
    """Output of an image analysis.

    Attributes:
        diagnosis: Plant identification and detected diseases.
        treatment_recommendations: Recommended treatments for the findings.
    """

    diagnosis: str
    treatment_recommendations: str


@dataclass(frozen=True)
class VoiceRecommendation:
    """Output of a voice analysis: recommendations derived from the transcript."""

    text: str


AnalysisOutput = Union[ImageDiagnosis, VoiceRecommendation]

_OUTPUT_TYPES = {IMAGE_ANALYSIS: ImageDiagnosis, VOICE_ANALYSIS: VoiceRecommendation}


@dataclass(frozen=True)
class AnalysisRecord:
    """A completed analysis kept in the local history.

    Attributes:
        id: Identifier generated when the record is written.
        type: Either ``image`` or ``voice``; selects the shape of ``output``.
        input: Original media as a data URI.
        output: ImageDiagnosis for image records, VoiceRecommendation for voice records.
        date: Creation timestamp (timezone-aware, UTC).
    """

    id: str
    type: str
    input: str
    output: AnalysisOutput
    date: datetime

    def __post_init__(self) -> None:
        expected = _OUTPUT_TYPES.get(self.type)
        if expected is None:
            raise ValueError(f"Unknown analysis type '{self.type}'")
        if not isinstance(self.output, expected):
            raise ValueError(f"Output for '{self.type}' analysis must be {expected.__name__}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "input": self.input,
            "output": asdict(self.output),
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisRecord":
        """Rebuild a record from its stored JSON shape.

        Raises:
            KeyError, TypeError, ValueError: If the stored shape is invalid.
        """
        record_type = data["type"]
        output_cls = _OUTPUT_TYPES.get(record_type)
        if output_cls is None:
            raise ValueError(f"Unknown analysis type '{record_type}'")
        date = datetime.fromisoformat(data["date"])
        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)
        return cls(
            id=str(data["id"]),
            type=record_type,
            input=data["input"],
            output=output_cls(**data["output"]),
            date=date,
        )
