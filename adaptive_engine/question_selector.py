"""
Question Selector - Picks the next question for a student.

Features:
    - IRT success probability aimed at ~70% (desirable difficulty)
    - Difficulty matched to the zone of proximal development
    - Priority for under-mastered skills
    - Preference for rarely served questions
    - Deterministic: ties go to the earliest candidate
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from .config import EngineConfig
from .irt import AbilityModel
from .schemas import Question
from .student_model import StudentAbility

log = logging.getLogger(__name__)


@dataclass
class ScoredQuestion:
    """A candidate with its selection metrics."""
    question: Question
    difficulty: float
    success_probability: float
    skill_mastery: float  # mean mastery of the tagged skills
    probability_score: float
    difficulty_score: float
    skill_priority_score: float
    frequency_score: float
    score: float


@dataclass
class QuestionSelection:
    """The chosen question and why."""
    question: Question
    reason: str
    expected_difficulty: float
    expected_success_probability: float

    def to_dict(self) -> dict:
        return {
            "question": self.question.model_dump(by_alias=True),
            "reason": self.reason,
            "expectedDifficulty": self.expected_difficulty,
            "expectedSuccessProbability": self.expected_success_probability,
        }


class QuestionSelector:
    """
    Multi-criterion question ranking.

    score = 0.4 * (1 - |P(correct) - 0.7|)
          + 0.2 * (1 - |difficulty - optimal|)
          + 0.3 * (1 - skill mastery)
          + 0.1 * 1 / (1 + times_asked * 0.1)

    with optimal = min(1, overall ability + 0.1).
    """

    # Reason thresholds
    PRIORITY_THRESHOLD = 0.7
    CONFIDENCE_THRESHOLD = 0.8
    CHALLENGE_THRESHOLD = 0.6

    def __init__(self, config: Optional[EngineConfig] = None,
                 model: Optional[AbilityModel] = None):
        self.config = config or EngineConfig()
        self.model = model or AbilityModel(self.config)

    # ==================== Selection ====================

    def select(self, candidates: List[Question], ability: StudentAbility,
               target_skill: Optional[str] = None) -> Optional[QuestionSelection]:
        """
        Select the best next question.

        Args:
            candidates: Available questions, in caller order
            ability: Current ability snapshot
            target_skill: Prefer questions tagged with this skill

        Returns:
            QuestionSelection, or None if there are no candidates
        """
        ranked = self.rank(candidates, ability, target_skill)
        if not ranked:
            return None

        best = ranked[0]
        reason = self.explain(best)
        log.debug(
            "selected %s for %s: score=%.3f p=%.2f (%s)",
            best.question.id, ability.user_id, best.score,
            best.success_probability, reason,
        )
        return QuestionSelection(
            question=best.question,
            reason=reason,
            expected_difficulty=best.difficulty,
            expected_success_probability=best.success_probability,
        )

    def rank(self, candidates: List[Question], ability: StudentAbility,
             target_skill: Optional[str] = None) -> List[ScoredQuestion]:
        """Score every candidate, best first. Equal scores keep input order."""
        pool = self._filter_by_skill(candidates, target_skill)
        optimal = self.optimal_difficulty(ability)

        scored = [self._score(q, ability, optimal) for q in pool]
        # sort() is stable, so ties stay in caller order
        scored.sort(key=lambda c: c.score, reverse=True)
        return scored

    def optimal_difficulty(self, ability: StudentAbility) -> float:
        """Slightly above current ability (zone of proximal development)."""
        return min(1.0, ability.overall_ability + self.config.zpd_offset)

    def _filter_by_skill(self, candidates: List[Question],
                         target_skill: Optional[str]) -> List[Question]:
        if not target_skill:
            return list(candidates)

        matching = [q for q in candidates if target_skill in q.skill_tags]
        if not matching:
            log.debug("no questions tagged %s, using full pool", target_skill)
            return list(candidates)
        return matching

    # ==================== Scoring ====================

    def _score(self, question: Question, ability: StudentAbility,
               optimal: float) -> ScoredQuestion:
        cfg = self.config

        difficulty = self.model.question_difficulty(question)
        probability = self.model.question_probability(ability.overall_ability, question)
        mastery = self.skill_mastery(question, ability)

        times_asked = question.adaptive_data.times_asked if question.adaptive_data else 0

        probability_score = 1 - abs(probability - cfg.target_success)
        difficulty_score = 1 - abs(difficulty - optimal)
        skill_priority_score = 1 - mastery
        frequency_score = 1 / (1 + times_asked * cfg.frequency_decay)

        score = (
            probability_score * cfg.probability_weight
            + difficulty_score * cfg.difficulty_weight
            + skill_priority_score * cfg.skill_priority_weight
            + frequency_score * cfg.frequency_weight
        )

        return ScoredQuestion(
            question=question,
            difficulty=difficulty,
            success_probability=probability,
            skill_mastery=mastery,
            probability_score=probability_score,
            difficulty_score=difficulty_score,
            skill_priority_score=skill_priority_score,
            frequency_score=frequency_score,
            score=score,
        )

    def skill_mastery(self, question: Question, ability: StudentAbility) -> float:
        """Mean mastery of the question's skills; overall ability if untagged."""
        if not question.skill_tags:
            return ability.overall_ability

        masteries = [
            ability.skill_mastery.get(sid, self.config.default_mastery)
            for sid in question.skill_tags
        ]
        # Zero mastery is treated as "no signal"
        masteries = [m for m in masteries if m > 0]
        if not masteries:
            return ability.overall_ability

        return sum(masteries) / len(masteries)

    def explain(self, candidate: ScoredQuestion) -> str:
        """Human-readable reason for picking this candidate."""
        if candidate.skill_priority_score > self.PRIORITY_THRESHOLD:
            return (
                "Focusing on skill that needs practice "
                f"({_percent(candidate.skill_mastery)}% mastery)"
            )
        if candidate.success_probability > self.CONFIDENCE_THRESHOLD:
            return "Building confidence with slightly easier question"
        if candidate.success_probability < self.CHALLENGE_THRESHOLD:
            return "Challenging you with a harder question"
        return "Perfect difficulty match for optimal learning"


def _percent(value: float) -> int:
    """Round half up, so 12.5% reads as 13%."""
    return int(math.floor(value * 100 + 0.5))
