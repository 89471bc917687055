"""Prompt builders for plant analysis flows."""

from typing import Optional

from utils.languages import language_name

DEFAULT_IMAGE_DESCRIPTION = (
    "A user-uploaded plant image. Please identify the plant, check its health, "
    "and describe any visible issues."
)


def build_diagnosis_system_prompt(language: Optional[str]) -> str:
    """Return the system prompt for photo diagnosis."""
    return (
        "You are an expert in plant diseases. Analyze the provided image and description "
        "to detect potential diseases and provide treatment recommendations. "
        f"Respond in the following language: {language_name(language)}."
    )


def build_diagnosis_user_prompt(description: str, history: Optional[str]) -> str:
    """Return the user prompt carrying the description and optional plant history."""
    lines = [f"Description: {description}"]
    if history:
        lines.append(f"History: {history}")
    lines.append("Report the diagnosis and the treatment recommendations for the plant in the image.")
    return "\n".join(lines)


def build_voice_advice_prompt(language: Optional[str]) -> str:
    """Return the system prompt for recommendations from a spoken request."""
    return (
        "You are a helpful AI assistant specialized in providing plant health and growth "
        "recommendations. The user described their plant out loud; the transcript follows. "
        "Analyze it for plant-related inquiries and provide clear, concise, and actionable "
        "recommendations for improving the plant's health and growth. "
        f"Respond in {language_name(language)}, the language the user spoke."
    )


def build_feedback_prompt(
    plant_name: str,
    recommendation: str,
    feedback: str,
    historical_data: Optional[str],
) -> str:
    """Return the prompt that refines a recommendation using user feedback."""
    lines = [
        "You will receive the original recommendation, the user's feedback, the plant name, "
        "and optionally historical data about the plant. Generate an improved recommendation "
        "that takes the feedback into account. Return only the improved recommendation.",
        "",
        f"Original Recommendation: {recommendation}",
        f"User Feedback: {feedback}",
        f"Plant Name: {plant_name}",
    ]
    if historical_data:
        lines.append(f"Historical Data: {historical_data}")
    return "\n".join(lines)


def build_health_report_prompt(plant_name: str, plant_description: str, historical_data: str) -> str:
    """Return the prompt for a full plant health report."""
    return (
        "Based on the provided information, generate a comprehensive health report for the plant.\n\n"
        f"Plant Name: {plant_name}\n"
        f"Plant Description: {plant_description}\n"
        f"Historical Data: {historical_data}\n\n"
        "Consider the plant's historical data, description, and any potential issues to provide "
        "customized recommendations for soil, fertilization, watering, and disease treatment."
    )
