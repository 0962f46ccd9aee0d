"""Endpoint throttle policy models and YAML loader.

Provides typed Pydantic models for per-endpoint throttle overrides and a
loader function that parses the YAML config into those models.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ThrottlePolicy(BaseModel):
    """Request budget for a single endpoint: ``limit`` calls per ``ttl_seconds``."""

    limit: int = Field(default=10, ge=1)
    ttl_seconds: int = Field(default=60, ge=1)


def load_throttle_policies(yaml_path: str) -> dict[str, ThrottlePolicy]:
    """Parse a throttle policies YAML file into typed ThrottlePolicy objects.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        A dict mapping endpoint keys (``"<METHOD> <path>"``) to ThrottlePolicy
        instances. Returns an empty dict when the file is missing or invalid,
        in which case the throttle's defaults apply everywhere.
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Throttle policies file not found at %s, using defaults", yaml_path)
        return {}

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse throttle policies YAML at %s: %s", yaml_path, exc)
        return {}

    if not isinstance(raw, dict) or not isinstance(raw.get("endpoints"), dict):
        logger.warning("Throttle policies YAML missing 'endpoints' key, using defaults")
        return {}

    policies: dict[str, ThrottlePolicy] = {}
    for endpoint, config in raw["endpoints"].items():
        try:
            policies[endpoint] = ThrottlePolicy.model_validate(config)
        except Exception as exc:
            logger.error("Invalid throttle policy for '%s': %s, skipping", endpoint, exc)

    return policies
