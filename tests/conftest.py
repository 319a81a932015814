from datetime import datetime, timezone
from typing import Optional

import pytest

from adaptive_engine.config import EngineConfig
from adaptive_engine.engine import AdaptiveEngine
from adaptive_engine.schemas import AdaptiveData, Question, Skill, UnlockCriteria
from adaptive_engine.skill_graph import SkillGraph
from adaptive_engine.student_model import StudentAbility

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_question(qid: str, difficulty: str = "medium", skills=(), subject: str = "math-calculator",
                  times_asked: int = 0, estimated_time: Optional[float] = 60.0, **irt) -> Question:
    """Build a question; irt kwargs go into adaptive_data (irt_difficulty=..., etc.)."""
    adaptive = AdaptiveData(times_asked=times_asked, **irt) if (irt or times_asked) else None
    return Question(
        id=qid,
        subject=subject,
        difficulty=difficulty,
        skill_tags=list(skills),
        estimated_time=estimated_time,
        adaptive_data=adaptive,
    )


def make_skill(sid: str, prereqs=(), category: str = "math",
               min_questions: int = 3, min_accuracy: float = 80.0) -> Skill:
    return Skill(
        id=sid,
        category=category,
        required_predecessors=list(prereqs),
        unlock_criteria=UnlockCriteria(min_accuracy=min_accuracy, min_questions=min_questions),
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def sat_graph():
    return SkillGraph.load()


@pytest.fixture
def small_graph():
    """
    arithmetic ──> algebra ──> word-problems
              └──> geometry
    reading (independent)
    """
    return SkillGraph([
        make_skill("arithmetic"),
        make_skill("algebra", ["arithmetic"]),
        make_skill("geometry", ["arithmetic"]),
        make_skill("word-problems", ["algebra"]),
        make_skill("reading", category="reading"),
    ])


@pytest.fixture
def engine(small_graph):
    return AdaptiveEngine(graph=small_graph)


@pytest.fixture
def fresh_ability(now):
    return StudentAbility.new("student-1", now)
