"""
Errors raised by the adaptive engine.

Per-event operations never raise: missing calibration data falls back to
defaults and unknown skills are ignored. The only fatal problems are a
malformed skill catalog (caught once, at load time) and bad configuration.
"""


class AdaptiveEngineError(Exception):
    """Base class for all engine errors."""


class CatalogError(AdaptiveEngineError):
    """The skill catalog references unknown skills, repeats ids, or has a cycle."""


class ConfigError(AdaptiveEngineError):
    """An ADAPTIVE_* environment override could not be parsed."""
