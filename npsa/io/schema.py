"""JSON schema for analysis configuration structure validation."""

from __future__ import annotations

CONFIG_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Schedulability Analysis Config",
    "type": "object",
    "required": ["version"],
    "properties": {
        "version": {"type": "string"},
        "jobs": {
            "oneOf": [
                {"type": "string", "minLength": 1},
                {"type": "array", "minItems": 1, "items": {"$ref": "#/$defs/Job"}},
            ]
        },
        "periodic": {"$ref": "#/$defs/PeriodicSet"},
        "iip": {"type": "string", "minLength": 1},
        "options": {
            "type": "object",
            "properties": {
                "be_naive": {"type": "boolean"},
                "early_exit": {"type": "boolean"},
                "timeout": {"type": "number", "minimum": 0},
                "max_depth": {"type": "integer", "minimum": 0},
                "num_workers": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": False,
        },
    },
    "oneOf": [
        {"required": ["jobs"]},
        {"required": ["periodic"]},
    ],
    "additionalProperties": False,
    "$defs": {
        "Job": {
            "type": "object",
            "required": [
                "task_id",
                "job_id",
                "arrival_min",
                "arrival_max",
                "cost_min",
                "cost_max",
                "deadline",
                "priority",
            ],
            "properties": {
                "task_id": {"type": "integer"},
                "job_id": {"type": "integer"},
                "arrival_min": {"type": "integer", "minimum": 0},
                "arrival_max": {"type": "integer", "minimum": 0},
                "cost_min": {"type": "integer", "minimum": 0},
                "cost_max": {"type": "integer", "minimum": 0},
                "deadline": {"type": "integer"},
                "priority": {"type": "integer"},
            },
            "additionalProperties": False,
        },
        "PeriodicTask": {
            "type": "object",
            "required": ["id", "period", "cost_min", "cost_max"],
            "properties": {
                "id": {"type": "integer"},
                "period": {"type": "integer", "exclusiveMinimum": 0},
                "cost_min": {"type": "integer", "minimum": 0},
                "cost_max": {"type": "integer", "minimum": 0},
                "deadline": {"type": "integer", "exclusiveMinimum": 0},
                "offset": {"type": "integer", "minimum": 0},
                "jitter": {"type": "integer", "minimum": 0},
            },
            "additionalProperties": False,
        },
        "PeriodicSet": {
            "type": "object",
            "required": ["horizon", "tasks"],
            "properties": {
                "horizon": {"type": "integer", "exclusiveMinimum": 0},
                "policy": {"type": "string", "enum": ["rm", "edf"]},
                "tasks": {
                    "type": "array",
                    "minItems": 1,
                    "items": {"$ref": "#/$defs/PeriodicTask"},
                },
            },
            "additionalProperties": False,
        },
    },
}
