"""Function tool schemas for structured plant analysis output."""

from typing import Any, Dict

DIAGNOSIS_FUNCTION_NAME = "report_plant_diagnosis"

DIAGNOSIS_FUNCTION: Dict[str, Any] = {
    "type": "function",
    "name": DIAGNOSIS_FUNCTION_NAME,
    "description": "Return the diagnosis of the plant and the recommended treatments.",
    "parameters": {
        "type": "object",
        "properties": {
            "diagnosis": {
                "type": "string",
                "description": "The diagnosis of the plant, including potential diseases.",
            },
            "treatment_recommendations": {
                "type": "string",
                "description": "Recommended treatments for the identified diseases.",
            },
        },
        "required": ["diagnosis", "treatment_recommendations"],
        "additionalProperties": False,
    },
    "strict": True,
}

HEALTH_REPORT_FUNCTION_NAME = "report_plant_health"

HEALTH_REPORT_FUNCTION: Dict[str, Any] = {
    "type": "function",
    "name": HEALTH_REPORT_FUNCTION_NAME,
    "description": "Return a structured health report for the plant.",
    "parameters": {
        "type": "object",
        "properties": {
            "overall_health": {
                "type": "string",
                "description": "An assessment of the plant's overall health.",
            },
            "potential_issues": {
                "type": "string",
                "description": "Potential issues such as diseases or nutrient deficiencies.",
            },
            "recommendations": {
                "type": "string",
                "description": "Customized recommendations for soil, fertilization, watering, and disease treatment.",
            },
        },
        "required": ["overall_health", "potential_issues", "recommendations"],
        "additionalProperties": False,
    },
    "strict": True,
}
