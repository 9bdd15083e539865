"""LLM response schemas for structured output."""

DAILY_FOCUS_RECOMMENDATION_SCHEMA = {
    "type": "object",
    "properties": {
        "recommendations": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "exercise_id": {"type": "string"},
                    "priority_score": {"type": "number"},
                    "reasoning": {"type": "string"},
                    "personalization": {"type": "string"},
                    "expected_benefit": {"type": "string"}
                },
                "required": ["exercise_id", "priority_score", "reasoning"]
            }
        },
        "overall_focus_theme": {"type": "string"},
        "coach_note": {"type": "string"}
    },
    "required": ["recommendations"]
}
