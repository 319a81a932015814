"""
Engine configuration - tunable constants with environment overrides.

Every constant defaults to the value the engine is calibrated with.
Overrides come from ADAPTIVE_* environment variables (a local .env file
is loaded first), e.g.:

    ADAPTIVE_LEARNING_RATE=0.2
    ADAPTIVE_FORGETTING_RATE=0.03
    ADAPTIVE_SKILL_CATALOG=data/my_skills.json
    ADAPTIVE_LOG_LEVEL=DEBUG
"""

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigError

ENV_PREFIX = "ADAPTIVE_"

# (upper bound of mastery bin, interval in days); last bin is closed at 1.0
DEFAULT_REVIEW_INTERVALS: Tuple[Tuple[float, int], ...] = (
    (0.3, 1),
    (0.5, 3),
    (0.7, 7),
    (0.85, 14),
    (1.0, 30),
)


@dataclass(frozen=True)
class EngineConfig:
    """All knobs of the ability model, selector, tracker and scheduler."""

    # IRT defaults for uncalibrated questions
    default_discrimination: float = 1.0
    default_guessing: float = 0.25
    difficulty_labels: Dict[str, float] = field(
        default_factory=lambda: {"easy": 0.3, "medium": 0.5, "hard": 0.7}
    )
    default_difficulty: float = 0.5

    # Knowledge tracing
    default_mastery: float = 0.5
    learning_rate: float = 0.15
    fast_answer_ratio: float = 0.8
    fast_answer_bonus: float = 1.2
    incorrect_penalty: float = 0.5
    forgetting_rate: float = 0.05
    velocity_decay: float = 0.7
    default_expected_time: float = 60.0

    # Question selection
    target_success: float = 0.7
    zpd_offset: float = 0.1
    frequency_decay: float = 0.1
    probability_weight: float = 0.4
    difficulty_weight: float = 0.2
    skill_priority_weight: float = 0.3
    frequency_weight: float = 0.1

    # Skill tree
    mastery_step_correct: float = 0.02
    mastery_step_incorrect: float = 0.01
    legendary_accuracy: float = 95.0
    legendary_questions: int = 50
    needs_practice_threshold: float = 0.7

    # Spaced repetition
    review_intervals: Tuple[Tuple[float, int], ...] = DEFAULT_REVIEW_INTERVALS

    skill_catalog: Optional[str] = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "EngineConfig":
        """Build a config from defaults plus ADAPTIVE_* overrides."""
        load_dotenv(dotenv_path)

        overrides = {}
        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None or not raw.strip():
                continue
            raw = raw.strip()

            if f.type in (float, "float"):
                overrides[f.name] = _parse(f.name, raw, float)
            elif f.type in (int, "int"):
                overrides[f.name] = _parse(f.name, raw, int)
            elif f.name in ("skill_catalog", "log_level"):
                overrides[f.name] = raw
            # dict / tuple tables are not overridable from the environment

        return cls(**overrides)


def _parse(name: str, raw: str, kind):
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(
            f"{ENV_PREFIX}{name.upper()}={raw!r} is not a valid {kind.__name__}"
        ) from None


def configure_logging(level: Optional[str] = None):
    """
    Set up root logging for scripts and test runs.

    The library itself only emits records; call this from the application
    entry point if you want them printed.
    """
    level = (level or os.getenv(ENV_PREFIX + "LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="[%(levelname)s] %(name)s: %(message)s",
    )
