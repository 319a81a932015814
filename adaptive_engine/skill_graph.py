"""
Skill Graph - The static catalog of skills as a prerequisite DAG.

Features:
    - Skills grouped by category (reading, math, writing, test-strategy)
    - Prerequisite relationships as directed edges (predecessor -> skill)
    - Validation of the catalog once, at load time
    - Learning order and difficulty-sorted skill trees
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

import networkx as nx

from .config import EngineConfig
from .errors import CatalogError
from .schemas import Skill

log = logging.getLogger(__name__)

DEFAULT_CATALOG = Path(__file__).parent / "data" / "skills.json"

CATEGORIES = ("reading", "math", "writing", "test-strategy")


class SkillGraph:
    """
    Read-only skill catalog backed by a networkx DiGraph.

    Structure:
        Category (e.g., "math")
        └── Skill (e.g., "math-algebra-basics")
            └── requires predecessors (e.g., "math-arithmetic")
    """

    def __init__(self, skills: Iterable[Skill]):
        """Build and validate the graph. Raises CatalogError on a malformed catalog."""
        self.graph = nx.DiGraph()
        self.skills: Dict[str, Skill] = {}  # insertion order = catalog order

        for skill in skills:
            if skill.id in self.skills:
                raise CatalogError(f"Duplicate skill id: {skill.id}")
            self.skills[skill.id] = skill
            self.graph.add_node(skill.id, category=skill.category)

        for skill in self.skills.values():
            for prereq in skill.required_predecessors:
                if prereq not in self.skills:
                    raise CatalogError(
                        f"Skill {skill.id} requires unknown skill {prereq}"
                    )
                self.graph.add_edge(prereq, skill.id)

        if not nx.is_directed_acyclic_graph(self.graph):
            cycle = nx.find_cycle(self.graph)
            raise CatalogError(f"Prerequisite cycle: {cycle}")

    # ==================== Loading ====================

    @classmethod
    def from_file(cls, path) -> "SkillGraph":
        """
        Load a catalog JSON file.

        Accepts either {"skills": [...]} or a bare list of skills.
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        raw_skills = data["skills"] if isinstance(data, dict) else data
        graph = cls(Skill.model_validate(s) for s in raw_skills)
        log.info("Loaded %d skills from %s", len(graph.skills), path)
        return graph

    @classmethod
    def load(cls, config: Optional[EngineConfig] = None) -> "SkillGraph":
        """Load the configured catalog, or the bundled SAT taxonomy."""
        config = config or EngineConfig()
        return cls.from_file(config.skill_catalog or DEFAULT_CATALOG)

    # ==================== Query Methods ====================

    def get_skill(self, skill_id: str) -> Optional[Skill]:
        """Get a skill by id, None if unknown."""
        return self.skills.get(skill_id)

    def __contains__(self, skill_id: str) -> bool:
        return skill_id in self.skills

    def __len__(self) -> int:
        return len(self.skills)

    def all_skills(self) -> List[Skill]:
        """All skills in catalog order."""
        return list(self.skills.values())

    def get_prerequisites(self, skill_id: str) -> List[str]:
        """Immediate prerequisites, in the order the catalog lists them."""
        skill = self.get_skill(skill_id)
        return list(skill.required_predecessors) if skill else []

    def get_all_prerequisites(self, skill_id: str) -> Set[str]:
        """All prerequisites recursively."""
        if skill_id not in self.graph:
            return set()
        return nx.ancestors(self.graph, skill_id)

    def get_dependents(self, skill_id: str) -> List[str]:
        """Skills that list this one as a direct prerequisite."""
        if skill_id not in self.graph:
            return []
        return list(self.graph.successors(skill_id))

    def get_root_skills(self) -> List[str]:
        """Skills with no prerequisites (unlocked from the start)."""
        return [sid for sid, s in self.skills.items() if not s.required_predecessors]

    def get_skills_by_category(self, category: str) -> List[Skill]:
        return [s for s in self.skills.values() if s.category == category]

    def get_skill_tree(self, category: Optional[str] = None) -> List[Skill]:
        """Skills (optionally of one category) sorted easiest first."""
        skills = self.get_skills_by_category(category) if category else self.all_skills()
        return sorted(skills, key=lambda s: s.difficulty_level)

    def get_learning_order(self) -> List[str]:
        """Skill ids in topological order (prerequisites first), ties by catalog order."""
        position = {sid: i for i, sid in enumerate(self.skills)}
        return list(nx.lexicographical_topological_sort(self.graph, key=position.get))

    # ==================== Statistics ====================

    def get_stats(self) -> dict:
        """Get graph statistics."""
        categories: Dict[str, int] = {}
        for skill in self.skills.values():
            categories[skill.category] = categories.get(skill.category, 0) + 1

        return {
            "total_skills": len(self.skills),
            "total_edges": self.graph.number_of_edges(),
            "root_skills": len(self.get_root_skills()),
            "skills_per_category": categories,
            "max_depth": nx.dag_longest_path_length(self.graph) if self.skills else 0,
        }
