"""
Adaptive engine - Ability estimation, question selection and skill-tree progress.

Components:
    - irt: 3PL Item Response Theory probabilities
    - student_model: Per-skill mastery update with forgetting curves
    - question_selector: Multi-criterion next-question ranking
    - skill_graph: Skill catalog as a prerequisite DAG
    - skill_tracker: locked -> learning -> mastered -> legendary state machine
    - review_scheduler: Spaced repetition intervals
    - engine: Stateless facade wiring the above per student event
"""

from .config import EngineConfig, configure_logging
from .errors import AdaptiveEngineError, CatalogError, ConfigError
from .schemas import AdaptiveData, Question, Skill, UnlockCriteria
from .irt import AbilityModel
from .student_model import StudentAbility, AbilityUpdater
from .question_selector import QuestionSelector, QuestionSelection, ScoredQuestion
from .skill_graph import SkillGraph
from .skill_tracker import SkillLevel, SkillProgress, SkillTreeState, SkillProgressTracker, SkillAnalysis
from .review_scheduler import ReviewScheduler
from .engine import AdaptiveEngine, AnswerOutcome

__all__ = [
    "EngineConfig",
    "configure_logging",
    "AdaptiveEngineError",
    "CatalogError",
    "ConfigError",
    "AdaptiveData",
    "Question",
    "Skill",
    "UnlockCriteria",
    "AbilityModel",
    "StudentAbility",
    "AbilityUpdater",
    "QuestionSelector",
    "QuestionSelection",
    "ScoredQuestion",
    "SkillGraph",
    "SkillLevel",
    "SkillProgress",
    "SkillTreeState",
    "SkillProgressTracker",
    "SkillAnalysis",
    "ReviewScheduler",
    "AdaptiveEngine",
    "AnswerOutcome",
]
