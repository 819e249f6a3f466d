#!/usr/bin/env python3
"""
Configuration schema definition for validation
"""
from typing import Dict, Any, List


class ConfigSchema:
    """Configuration schema for validation"""

    SCHEMA = {
        'boundaries': {
            'source': {'type': str, 'required': False},
            'release': {'type': str, 'required': False},
            'timeout': {'type': (int, float), 'required': False},
        },
        'extraction': {
            'emit_empty_domains': {'type': bool, 'required': False},
        },
        'paths': {
            'output_dir': {'type': str, 'required': True},
        },
        'logging': {
            'level': {'type': str, 'required': False},
            'format': {'type': str, 'required': False},
            'log_dir': {'type': str, 'required': False},
        },
        'pipeline': {
            'use_threads': {'type': bool, 'required': False},
            'max_workers': {'type': int, 'required': False},
        }
    }

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> List[str]:
        """Validate configuration against schema

        Args:
            config: Configuration to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        for section, fields in cls.SCHEMA.items():
            if any(props.get('required', False) for _, props in fields.items()):
                if section not in config:
                    errors.append(f"Missing required configuration section: {section}")
                    continue

            if section not in config:
                continue

            section_config = config[section]
            if not isinstance(section_config, dict):
                errors.append(f"Configuration section {section} must be a mapping")
                continue

            for field, props in fields.items():
                if props.get('required', False) and field not in section_config:
                    errors.append(f"Missing required configuration field: {section}.{field}")
                    continue

                value = section_config.get(field)
                if value is None:
                    continue

                expected = props['type']
                # bool is an int subclass; keep them apart
                if isinstance(value, bool) and expected is not bool and bool not in _as_tuple(expected):
                    errors.append(f"Invalid type for {section}.{field}: expected {_type_name(expected)}, got bool")
                elif not isinstance(value, expected):
                    errors.append(
                        f"Invalid type for {section}.{field}: expected {_type_name(expected)}, "
                        f"got {type(value).__name__}"
                    )

        return errors


def _as_tuple(expected) -> tuple:
    return expected if isinstance(expected, tuple) else (expected,)


def _type_name(expected) -> str:
    return " or ".join(t.__name__ for t in _as_tuple(expected))
