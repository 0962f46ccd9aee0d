"""Configuration module: settings and throttle policies."""

from studenthub_api.config.settings import ApiSettings, get_settings, settings_for
from studenthub_api.config.throttle_policies import ThrottlePolicy, load_throttle_policies

__all__ = [
    "ApiSettings",
    "ThrottlePolicy",
    "get_settings",
    "load_throttle_policies",
    "settings_for",
]
