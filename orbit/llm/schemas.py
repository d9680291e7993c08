"""JSON schemas for wire payloads and agent options."""

TOOL_CALL_SCHEMA: dict = {
    "type": "object",
    "required": ["id", "function"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"enum": ["function"]},
        "function": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "arguments": {"type": ["string", "object", "null"]},
            },
        },
    },
}

CHAT_RESPONSE_SCHEMA: dict = {
    "type": "object",
    "required": ["choices"],
    "properties": {
        "choices": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["message"],
                "properties": {
                    "message": {
                        "type": "object",
                        "properties": {
                            "role": {"type": "string"},
                            "content": {
                                "type": ["string", "array", "object", "null"]
                            },
                            "tool_calls": {
                                "type": ["array", "null"],
                                "items": TOOL_CALL_SCHEMA,
                            },
                        },
                    },
                    "finish_reason": {"type": ["string", "null"]},
                },
            },
        },
        "model": {"type": "string"},
        "usage": {"type": ["object", "null"]},
    },
}

AGENT_CONFIG_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "max_history_length": {"type": "integer", "exclusiveMinimum": 0},
        "max_tool_iterations": {"type": "integer", "exclusiveMinimum": 0},
        "temperature": {"type": "number", "minimum": 0, "maximum": 2},
        "max_tokens": {"type": "integer", "exclusiveMinimum": 0},
        "timeout_ms": {"type": "integer", "exclusiveMinimum": 0},
        "system_message": {"type": "string"},
    },
}

LLM_CONFIG_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "base_url": {"type": "string", "pattern": "^https?://"},
        "chat_path": {"type": "string", "pattern": "^/"},
        "model": {"type": "string", "minLength": 1},
        "api_key_env": {"type": "string"},
    },
}
