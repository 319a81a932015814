"""
Ability Model - Item Response Theory probabilities.

Uses the 3-Parameter Logistic (3PL) model:
    P(correct) = c + (1 - c) / (1 + exp(-a * (ability - difficulty)))

where a = discrimination, c = guessing. Abilities and difficulties live
on the same [0, 1] scale as mastery.
"""

import math
from typing import Optional, Tuple

from .config import EngineConfig
from .schemas import Question


def sigmoid(x: float) -> float:
    """Logistic function, split on sign so exp() never overflows."""
    if x >= 0:
        z = math.exp(-x)
        return 1.0 / (1.0 + z)
    z = math.exp(x)
    return z / (1.0 + z)


class AbilityModel:
    """
    Stateless IRT calculator.

    Questions without calibration data are scored with the configured
    defaults (discrimination 1.0, guessing 0.25, label-based difficulty).
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def probability(self, ability: float, difficulty: float,
                    discrimination: Optional[float] = None,
                    guessing: Optional[float] = None) -> float:
        """
        Probability of a correct answer.

        Args:
            ability: Student ability (theta), 0.0 to 1.0
            difficulty: Item difficulty (b), same scale
            discrimination: Item slope (a), defaults to 1.0
            guessing: Lower asymptote (c), defaults to 0.25

        Returns:
            Probability clamped to [0, 1]
        """
        a = self.config.default_discrimination if discrimination is None else discrimination
        c = self.config.default_guessing if guessing is None else guessing

        p = c + (1.0 - c) * sigmoid(a * (ability - difficulty))
        return max(0.0, min(1.0, p))

    def question_difficulty(self, question: Question) -> float:
        """Calibrated difficulty if known, else the label map (easy/medium/hard)."""
        data = question.adaptive_data
        if data is not None and data.irt_difficulty is not None:
            return data.irt_difficulty

        return self.config.difficulty_labels.get(
            question.difficulty, self.config.default_difficulty
        )

    def item_parameters(self, question: Question) -> Tuple[float, float, float]:
        """Return (difficulty, discrimination, guessing) with defaults filled in."""
        data = question.adaptive_data
        discrimination = self.config.default_discrimination
        guessing = self.config.default_guessing

        if data is not None:
            if data.irt_discrimination is not None:
                discrimination = data.irt_discrimination
            if data.irt_guessing is not None:
                guessing = data.irt_guessing

        return self.question_difficulty(question), discrimination, guessing

    def question_probability(self, ability: float, question: Question) -> float:
        """P(correct) for a concrete question."""
        difficulty, discrimination, guessing = self.item_parameters(question)
        return self.probability(ability, difficulty, discrimination, guessing)
