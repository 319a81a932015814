"""
Adaptive Engine - One entry point per student event.

    answer submitted    -> process_answer()  (ability + skill tree + review dates)
    next question asked -> next_question()

The engine holds only read-only collaborators (catalog, config); every call
takes the student's current snapshots and returns new ones. Callers must
apply one student's events one at a time, in submission order.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from .clock import resolve_now
from .config import EngineConfig
from .irt import AbilityModel
from .question_selector import QuestionSelection, QuestionSelector
from .review_scheduler import ReviewScheduler
from .schemas import Question
from .skill_graph import SkillGraph
from .skill_tracker import SkillProgress, SkillProgressTracker, SkillTreeState
from .student_model import AbilityUpdater, StudentAbility

log = logging.getLogger(__name__)


@dataclass
class AnswerOutcome:
    """Result of applying one answer event."""
    ability: StudentAbility
    skill_tree: SkillTreeState
    newly_unlocked: List[str] = field(default_factory=list)
    newly_mastered: List[str] = field(default_factory=list)


class AdaptiveEngine:
    """Stateless facade over the model, updater, selector, tracker and scheduler."""

    def __init__(self, graph: Optional[SkillGraph] = None,
                 config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.graph = graph or SkillGraph.load(self.config)

        self.model = AbilityModel(self.config)
        self.updater = AbilityUpdater(self.config)
        self.selector = QuestionSelector(self.config, self.model)
        self.tracker = SkillProgressTracker(self.graph, self.config)
        self.scheduler = ReviewScheduler(self.config)

    @classmethod
    def from_env(cls) -> "AdaptiveEngine":
        return cls(config=EngineConfig.from_env())

    def onboard(self, user_id: str,
                now: Optional[datetime] = None) -> Tuple[StudentAbility, SkillTreeState]:
        """Fresh ability profile and seeded skill tree for a new student."""
        now = resolve_now(now)
        return StudentAbility.new(user_id, now), self.tracker.initialize(user_id, now)

    def process_answer(self, ability: StudentAbility, tree: SkillTreeState,
                       question: Question, is_correct: bool, time_spent: float,
                       expected_time: Optional[float] = None,
                       now: Optional[datetime] = None) -> AnswerOutcome:
        """
        Apply one answered question to both the ability profile and the skill tree.

        Both updates see the same skills, correctness and timing. Each skill
        that recorded progress gets a fresh review date.
        """
        now = resolve_now(now)
        if expected_time is None:
            expected_time = self.updater.expected_time(question)

        new_ability = self.updater.update(
            ability, question, is_correct, time_spent, expected_time, now
        )

        new_tree = tree
        for skill_id in self.updater.relevant_skills(question):
            before = new_tree.skills.get(skill_id)
            new_tree = self.tracker.record_answer(
                new_tree, skill_id, is_correct, time_spent, expected_time, now
            )
            if before is None or not before.level.is_unlocked or skill_id not in self.graph:
                continue

            review_at = self.scheduler.schedule_review(
                new_ability.skill_mastery[skill_id], before.last_practice_date, now
            )
            new_tree = self.tracker.with_review_date(new_tree, skill_id, review_at)

        outcome = AnswerOutcome(
            ability=new_ability,
            skill_tree=new_tree,
            newly_unlocked=_changed(tree, new_tree, lambda lvl: lvl.is_unlocked),
            newly_mastered=_changed(tree, new_tree, lambda lvl: lvl.is_mastered),
        )
        if outcome.newly_unlocked or outcome.newly_mastered:
            log.info(
                "%s: unlocked=%s mastered=%s", ability.user_id,
                outcome.newly_unlocked, outcome.newly_mastered,
            )
        return outcome

    def next_question(self, candidates: List[Question], ability: StudentAbility,
                      target_skill: Optional[str] = None) -> Optional[QuestionSelection]:
        """Best next question from the pool, None if the pool is empty."""
        return self.selector.select(candidates, ability, target_skill)

    def due_for_review(self, tree: SkillTreeState,
                       now: Optional[datetime] = None) -> List[SkillProgress]:
        """Unlocked skills whose review is due (or was never scheduled)."""
        return self.tracker.skills_needing_review(tree, now)


def _changed(before: SkillTreeState, after: SkillTreeState, predicate) -> List[str]:
    """Skill ids for which predicate(level) became true between two snapshots."""
    changed = []
    for skill_id, progress in after.skills.items():
        old = before.skills.get(skill_id)
        was = predicate(old.level) if old is not None else False
        if predicate(progress.level) and not was:
            changed.append(skill_id)
    return changed
