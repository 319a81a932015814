"""
Input schemas for catalog data handed to the engine.

Questions and skills are owned by the catalog/import subsystem and are
read-only here. Every optional field has a documented default so the
engine never has to inspect payloads at runtime. Both camelCase (as stored
by the catalog) and snake_case keys are accepted.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class AdaptiveData(CatalogModel):
    """IRT calibration for a question. Absent fields fall back to engine defaults."""

    irt_difficulty: Optional[float] = None
    irt_discrimination: Optional[float] = None
    irt_guessing: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    times_asked: int = Field(default=0, ge=0)


class Question(CatalogModel):
    """A question as served to the student."""

    id: str
    subject: str = ""  # reading, writing, math-calculator, math-no-calculator
    difficulty: str = "medium"  # easy, medium, hard
    skill_tags: List[str] = Field(default_factory=list)
    estimated_time: Optional[float] = Field(default=None, gt=0)  # seconds, None = engine default
    adaptive_data: Optional[AdaptiveData] = None


class UnlockCriteria(CatalogModel):
    """What it takes to master a skill."""

    min_accuracy: float = Field(default=80.0, ge=0.0, le=100.0)
    min_questions: int = Field(default=10, ge=0)
    time_limit_per_question: Optional[float] = None  # seconds, speed challenge


class Skill(CatalogModel):
    """A node of the skill tree."""

    id: str
    name: str = ""
    category: str
    description: str = ""
    required_predecessors: List[str] = Field(default_factory=list)
    difficulty_level: float = Field(default=0.5, ge=0.0, le=1.0)
    unlock_criteria: UnlockCriteria = Field(default_factory=UnlockCriteria)
    estimated_time_to_master: int = 0  # minutes
    related_skills: List[str] = Field(default_factory=list)
