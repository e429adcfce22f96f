"""JSON schema for configuration structure validation."""

from __future__ import annotations

CONFIG_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Uniprocessor Scheduling Simulation Config",
    "type": "object",
    "required": ["version", "tasks", "scheduler"],
    "properties": {
        "version": {"type": "string"},
        "tasks": {
            "type": "array",
            "minItems": 1,
            "items": {"$ref": "#/$defs/Task"},
        },
        "scheduler": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "params": {
                    "type": "object",
                    "default": {},
                    "properties": {
                        "miss_report": {"type": "string", "enum": ["once", "every_tick"]},
                        "event_id_mode": {
                            "type": "string",
                            "enum": ["deterministic", "seeded_random"],
                        },
                    },
                },
            },
            "additionalProperties": False,
        },
        "sim": {
            "type": "object",
            "properties": {
                "duration": {"type": ["integer", "null"], "exclusiveMinimum": 0},
                "seed": {"type": "integer"},
            },
            "additionalProperties": False,
        },
    },
    "$defs": {
        "Task": {
            "type": "object",
            "required": ["id", "period", "wcet"],
            "properties": {
                "id": {"type": "integer"},
                "period": {"type": "integer", "exclusiveMinimum": 0},
                "wcet": {"type": "integer", "exclusiveMinimum": 0},
                "offset": {"type": "integer", "minimum": 0},
                "abort_on_miss": {"type": "boolean", "default": False},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}
