# rx_reminder/services/llm/extraction_schema.py

PLAN_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "planTitle": {"type": "string"},
        "summary": {"type": "string"},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "type": {"type": "string", "enum": ["medication", "care"]},
                    "name": {"type": "string"},
                    "dose": {"type": "number"},
                    "unit": {"type": "string"},
                    "route": {"type": "string"},
                    "frequency": {
                        "type": "object",
                        "additionalProperties": False,
                        "properties": {
                            "everyHours": {"type": "integer"},
                            "timesPerDay": {"type": "integer"},
                        },
                    },
                    "durationDays": {"type": "integer"},
                    "preferredTimes": {"type": "array", "items": {"type": "string", "description": "HH:MM 24-hour"}},
                    "notes": {"type": "string"},
                    "confidence": {"type": "number"},
                },
                "required": ["type", "name", "frequency", "durationDays"],
            },
        },
    },
    "required": ["planTitle", "summary", "items"],
}
