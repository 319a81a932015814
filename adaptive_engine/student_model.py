"""
Student Model - Per-skill mastery estimation with forgetting curves.

Features:
    - Knowledge-tracing style mastery update per answer
    - Speed bonus for fast correct answers
    - Exponential forgetting between practice sessions
    - Learning velocity (moving average of mastery change) per skill

Every update returns a new StudentAbility snapshot; the input is never
modified, so callers can retry or roll back freely.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .clock import days_between, from_iso, resolve_now, to_iso
from .config import EngineConfig
from .schemas import Question

log = logging.getLogger(__name__)


@dataclass
class StudentAbility:
    """Ability profile of one student across all skills."""
    user_id: str
    overall_ability: float = 0.5  # mean of skill_mastery
    skill_mastery: Dict[str, float] = field(default_factory=dict)
    learning_velocity: Dict[str, float] = field(default_factory=dict)
    last_practice_date: Dict[str, datetime] = field(default_factory=dict)
    total_questions_answered: int = 0
    total_correct_answers: int = 0
    updated_at: Optional[datetime] = None

    @classmethod
    def new(cls, user_id: str, now: Optional[datetime] = None) -> "StudentAbility":
        """Onboarding snapshot: no skills seen yet."""
        return cls(user_id=user_id, updated_at=resolve_now(now))

    def copy(self) -> "StudentAbility":
        """Snapshot that shares no mutable state with this one."""
        return StudentAbility(
            user_id=self.user_id,
            overall_ability=self.overall_ability,
            skill_mastery=dict(self.skill_mastery),
            learning_velocity=dict(self.learning_velocity),
            last_practice_date=dict(self.last_practice_date),
            total_questions_answered=self.total_questions_answered,
            total_correct_answers=self.total_correct_answers,
            updated_at=self.updated_at,
        )

    @property
    def accuracy(self) -> float:
        if self.total_questions_answered == 0:
            return 0.0
        return self.total_correct_answers / self.total_questions_answered

    # ==================== Serialization ====================

    def to_dict(self) -> dict:
        """Serialize to the document shape used by the persistence layer."""
        return {
            "userId": self.user_id,
            "overallAbility": self.overall_ability,
            "skillMastery": dict(self.skill_mastery),
            "learningVelocity": dict(self.learning_velocity),
            "lastPracticeDate": {
                sid: to_iso(ts) for sid, ts in self.last_practice_date.items()
            },
            "totalQuestionsAnswered": self.total_questions_answered,
            "totalCorrectAnswers": self.total_correct_answers,
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StudentAbility":
        return cls(
            user_id=data.get("userId", ""),
            overall_ability=data.get("overallAbility", 0.5),
            skill_mastery=dict(data.get("skillMastery", {})),
            learning_velocity=dict(data.get("learningVelocity", {})),
            last_practice_date={
                sid: from_iso(ts)
                for sid, ts in data.get("lastPracticeDate", {}).items()
                if ts is not None
            },
            total_questions_answered=data.get("totalQuestionsAnswered", 0),
            total_correct_answers=data.get("totalCorrectAnswers", 0),
            updated_at=from_iso(data.get("updatedAt")),
        )


class AbilityUpdater:
    """
    Applies one answer event to a StudentAbility.

    Mastery update (learning rate r = 0.15):
        correct:   m' = m + r * (1 - m) * bonus    (bonus 1.2 if fast)
        incorrect: m' = m - r * m * 0.5

    Forgetting curve, applied when the skill was last practiced d >= 1 days ago:
        m' = m' * exp(-0.05 * d)
    """

    # Fallback skills for questions without skill tags
    SUBJECT_SKILLS = {
        "reading": "reading-main-ideas",
        "writing": "writing-grammar",
    }
    MATH_SKILL = "math-algebra-basics"
    DEFAULT_SKILL = "strategy-time-management"

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    # ==================== Skill Resolution ====================

    def relevant_skills(self, question: Question) -> List[str]:
        """Skills an answer to this question counts towards."""
        if question.skill_tags:
            return list(question.skill_tags)
        return [self.infer_skill(question)]

    def infer_skill(self, question: Question) -> str:
        """Guess the skill of an untagged question from its subject."""
        subject = question.subject or ""
        if subject in self.SUBJECT_SKILLS:
            return self.SUBJECT_SKILLS[subject]
        if "math" in subject:
            return self.MATH_SKILL
        return self.DEFAULT_SKILL

    def expected_time(self, question: Question) -> float:
        """Seconds a question should take: its own estimate, else the configured default."""
        if question.estimated_time is not None:
            return question.estimated_time
        return self.config.default_expected_time

    # ==================== Forgetting Curve ====================

    def forgetting_factor(self, days_since: int) -> float:
        """Retention multiplier after `days_since` days without practice, in (0, 1]."""
        if days_since <= 0:
            return 1.0
        return math.exp(-self.config.forgetting_rate * days_since)

    # ==================== Mastery Update ====================

    def update(self, ability: StudentAbility, question: Question, is_correct: bool,
               time_spent: float, expected_time: Optional[float] = None,
               now: Optional[datetime] = None) -> StudentAbility:
        """
        Record an answer and return the updated ability snapshot.

        Args:
            ability: Current snapshot (left untouched)
            question: The question that was answered
            is_correct: Whether the answer was correct
            time_spent: Seconds the student took
            expected_time: Seconds the question should take
                (defaults to the question estimate, then the configured default)
            now: Event time, defaults to the current UTC time

        Returns:
            New StudentAbility
        """
        now = resolve_now(now)
        if expected_time is None:
            expected_time = self.expected_time(question)

        updated = ability.copy()
        for skill_id in self.relevant_skills(question):
            self._update_skill(updated, skill_id, is_correct, time_spent, expected_time, now)

        # Overall ability spans every skill ever practiced, not just this event's
        if updated.skill_mastery:
            masteries = list(updated.skill_mastery.values())
            updated.overall_ability = sum(masteries) / len(masteries)

        updated.total_questions_answered += 1
        if is_correct:
            updated.total_correct_answers += 1
        updated.updated_at = now

        log.debug(
            "ability %s: question=%s correct=%s overall %.3f -> %.3f",
            ability.user_id, question.id, is_correct,
            ability.overall_ability, updated.overall_ability,
        )
        return updated

    def _update_skill(self, ability: StudentAbility, skill_id: str, is_correct: bool,
                      time_spent: float, expected_time: float, now: datetime):
        cfg = self.config
        current = ability.skill_mastery.get(skill_id, cfg.default_mastery)

        if is_correct:
            fast = time_spent < expected_time * cfg.fast_answer_ratio
            bonus = cfg.fast_answer_bonus if fast else 1.0
            new_mastery = min(1.0, current + cfg.learning_rate * (1 - current) * bonus)
        else:
            new_mastery = max(0.0, current - cfg.learning_rate * current * cfg.incorrect_penalty)

        last_practice = ability.last_practice_date.get(skill_id)
        if last_practice is not None:
            new_mastery *= self.forgetting_factor(days_between(last_practice, now))

        ability.skill_mastery[skill_id] = new_mastery
        ability.last_practice_date[skill_id] = now

        velocity = new_mastery - current
        ability.learning_velocity[skill_id] = (
            ability.learning_velocity.get(skill_id, 0.0) * cfg.velocity_decay
            + velocity * (1 - cfg.velocity_decay)
        )
