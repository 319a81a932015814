"""
Skill Tracker - Progress through the skill tree.

Each skill moves through:
    locked -> learning -> mastered -> legendary

Levels only ever move forward. Mastering all prerequisites of a locked
skill unlocks it on the next recorded answer.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .clock import as_utc, from_iso, resolve_now, to_iso
from .config import EngineConfig
from .schemas import Skill
from .skill_graph import CATEGORIES, SkillGraph

log = logging.getLogger(__name__)


class SkillLevel(str, Enum):
    LOCKED = "locked"
    LEARNING = "learning"
    MASTERED = "mastered"
    LEGENDARY = "legendary"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    @property
    def is_unlocked(self) -> bool:
        return self is not SkillLevel.LOCKED

    @property
    def is_mastered(self) -> bool:
        return self in (SkillLevel.MASTERED, SkillLevel.LEGENDARY)


_LEVEL_ORDER = [SkillLevel.LOCKED, SkillLevel.LEARNING, SkillLevel.MASTERED, SkillLevel.LEGENDARY]


@dataclass
class SkillProgress:
    """One student's progress on one skill."""
    skill_id: str
    level: SkillLevel = SkillLevel.LOCKED
    mastery: float = 0.0  # 0.0 to 1.0
    questions_completed: int = 0
    questions_required: int = 0
    accuracy: float = 0.0  # 0 to 100
    last_practice_date: Optional[datetime] = None
    next_review_date: Optional[datetime] = None
    unlocked_at: Optional[datetime] = None
    mastered_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "skillId": self.skill_id,
            "level": self.level.value,
            "mastery": self.mastery,
            "questionsCompleted": self.questions_completed,
            "questionsRequired": self.questions_required,
            "accuracy": self.accuracy,
            "lastPracticeDate": to_iso(self.last_practice_date),
            "nextReviewDate": to_iso(self.next_review_date),
            "unlockedAt": to_iso(self.unlocked_at),
            "masteredAt": to_iso(self.mastered_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SkillProgress":
        return cls(
            skill_id=data["skillId"],
            level=SkillLevel(data.get("level", "locked")),
            mastery=data.get("mastery", 0.0),
            questions_completed=data.get("questionsCompleted", 0),
            questions_required=data.get("questionsRequired", 0),
            accuracy=data.get("accuracy", 0.0),
            last_practice_date=from_iso(data.get("lastPracticeDate")),
            next_review_date=from_iso(data.get("nextReviewDate")),
            unlocked_at=from_iso(data.get("unlockedAt")),
            mastered_at=from_iso(data.get("masteredAt")),
        )


@dataclass
class SkillTreeState:
    """All skill progress records of one student."""
    user_id: str
    skills: Dict[str, SkillProgress] = field(default_factory=dict)
    updated_at: Optional[datetime] = None

    def copy(self) -> "SkillTreeState":
        return SkillTreeState(
            user_id=self.user_id,
            skills={sid: replace(p) for sid, p in self.skills.items()},
            updated_at=self.updated_at,
        )

    def level_of(self, skill_id: str) -> Optional[SkillLevel]:
        progress = self.skills.get(skill_id)
        return progress.level if progress else None

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "skills": {sid: p.to_dict() for sid, p in self.skills.items()},
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SkillTreeState":
        return cls(
            user_id=data.get("userId", ""),
            skills={
                sid: SkillProgress.from_dict(p)
                for sid, p in data.get("skills", {}).items()
            },
            updated_at=from_iso(data.get("updatedAt")),
        )


@dataclass
class SkillAnalysis:
    """Strongest and weakest unlocked skills."""
    strongest: List[SkillProgress]
    weakest: List[SkillProgress]
    needs_practice: List[SkillProgress]


class SkillProgressTracker:
    """
    State machine over the skill tree.

    Level rules (first match wins):
        legendary: accuracy >= 95 and 50+ questions
        mastered:  accuracy >= skill min accuracy and min questions met
        learning:  otherwise, once unlocked
    """

    def __init__(self, graph: SkillGraph, config: Optional[EngineConfig] = None):
        self.graph = graph
        self.config = config or EngineConfig()

    # ==================== Initialization ====================

    def initialize(self, user_id: str, now: Optional[datetime] = None) -> SkillTreeState:
        """Seed a tree: prerequisite-free skills start learning, the rest locked."""
        now = resolve_now(now)
        skills = {}

        for skill in self.graph.all_skills():
            unlocked = not skill.required_predecessors
            skills[skill.id] = SkillProgress(
                skill_id=skill.id,
                level=SkillLevel.LEARNING if unlocked else SkillLevel.LOCKED,
                questions_required=skill.unlock_criteria.min_questions,
                unlocked_at=now if unlocked else None,
            )

        return SkillTreeState(user_id=user_id, skills=skills, updated_at=now)

    # ==================== Answer Recording ====================

    def record_answer(self, tree: SkillTreeState, skill_id: str, is_correct: bool,
                      time_spent: float = 0.0, expected_time: float = 0.0,
                      now: Optional[datetime] = None) -> SkillTreeState:
        """
        Apply one answer to a skill and return the updated tree.

        Locked skills, skills without a progress record and skills missing
        from the catalog are left alone (the returned tree is an unchanged
        copy). Timing is accepted for parity with the ability update but
        does not affect skill progress.
        """
        progress = tree.skills.get(skill_id)
        skill = self.graph.get_skill(skill_id)
        if progress is None or skill is None or not progress.level.is_unlocked:
            log.debug("skip answer for %s skill %s", tree.user_id, skill_id)
            return tree.copy()

        now = resolve_now(now)
        updated = tree.copy()
        current = updated.skills[skill_id]

        current.questions_completed += 1
        score = 100.0 if is_correct else 0.0
        current.accuracy = (
            current.accuracy * (current.questions_completed - 1) + score
        ) / current.questions_completed

        step = (
            self.config.mastery_step_correct if is_correct
            else -self.config.mastery_step_incorrect
        )
        current.mastery = max(0.0, min(1.0, current.mastery + step))
        current.last_practice_date = now

        previous = current.level
        current.level = self._ratchet(previous, self.calculate_level(current, skill))
        if current.level.is_mastered and current.mastered_at is None:
            current.mastered_at = now
        if current.level is not previous:
            log.info("%s: %s %s -> %s", tree.user_id, skill_id, previous.value, current.level.value)

        self._unlock_ready_skills(updated, now)
        updated.updated_at = now
        return updated

    def calculate_level(self, progress: SkillProgress, skill: Skill) -> SkillLevel:
        """Level implied by the current accuracy and volume."""
        cfg = self.config
        if (progress.accuracy >= cfg.legendary_accuracy
                and progress.questions_completed >= cfg.legendary_questions):
            return SkillLevel.LEGENDARY

        criteria = skill.unlock_criteria
        if (progress.accuracy >= criteria.min_accuracy
                and progress.questions_completed >= criteria.min_questions):
            return SkillLevel.MASTERED

        if progress.level.is_unlocked:
            return SkillLevel.LEARNING
        return SkillLevel.LOCKED

    @staticmethod
    def _ratchet(previous: SkillLevel, computed: SkillLevel) -> SkillLevel:
        # Levels never move backward, even if accuracy later drops
        return computed if computed.rank > previous.rank else previous

    def _unlock_ready_skills(self, tree: SkillTreeState, now: datetime) -> List[str]:
        """Single pass over locked skills; unlocks those whose prerequisites are all mastered."""
        unlocked = []
        for skill in self.graph.all_skills():
            progress = tree.skills.get(skill.id)
            if progress is None or progress.level.is_unlocked:
                continue

            ready = all(
                tree.skills.get(pid) is not None and tree.skills[pid].level.is_mastered
                for pid in skill.required_predecessors
            )
            if ready:
                progress.level = SkillLevel.LEARNING
                progress.unlocked_at = now
                unlocked.append(skill.id)

        if unlocked:
            log.info("%s: unlocked %s", tree.user_id, ", ".join(unlocked))
        return unlocked

    def with_review_date(self, tree: SkillTreeState, skill_id: str,
                         when: datetime) -> SkillTreeState:
        """Copy of the tree with the skill's next review date set."""
        updated = tree.copy()
        if skill_id in updated.skills:
            updated.skills[skill_id].next_review_date = when
        return updated

    # ==================== Views ====================

    def visualization(self, tree: SkillTreeState) -> List[dict]:
        """Skills with their progress, grouped by category."""
        result = []
        for category in CATEGORIES:
            skills = []
            for skill in self.graph.get_skills_by_category(category):
                progress = tree.skills.get(skill.id) or SkillProgress(
                    skill_id=skill.id,
                    questions_required=skill.unlock_criteria.min_questions,
                )
                skills.append({"skill": skill, "progress": progress})
            result.append({"category": category, "skills": skills})
        return result

    def skills_needing_review(self, tree: SkillTreeState,
                              now: Optional[datetime] = None) -> List[SkillProgress]:
        """Unlocked skills never scheduled for review, or whose review is due."""
        now = resolve_now(now)
        return [
            p for p in tree.skills.values()
            if p.level.is_unlocked
            and (p.next_review_date is None or as_utc(p.next_review_date) <= now)
        ]

    def analysis(self, tree: SkillTreeState) -> SkillAnalysis:
        """Top three, bottom three and below-threshold unlocked skills by mastery."""
        unlocked = [p for p in tree.skills.values() if p.level.is_unlocked]
        by_mastery = sorted(unlocked, key=lambda p: p.mastery, reverse=True)

        return SkillAnalysis(
            strongest=by_mastery[:3],
            weakest=list(reversed(by_mastery[-3:])),
            needs_practice=sorted(
                (p for p in unlocked if p.mastery < self.config.needs_practice_threshold),
                key=lambda p: p.mastery,
            ),
        )
