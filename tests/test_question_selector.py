"""Tests for question_selector.py"""

import pytest

from adaptive_engine.question_selector import QuestionSelector
from adaptive_engine.student_model import StudentAbility

from conftest import make_question


def ability_with(overall=0.5, **mastery):
    return StudentAbility(user_id="s", overall_ability=overall,
                          skill_mastery={k.replace("_", "-"): v for k, v in mastery.items()})


def test_empty_pool_returns_none():
    assert QuestionSelector().select([], ability_with()) is None


def test_picks_medium_question_for_average_student():
    selector = QuestionSelector()
    pool = [make_question("easy", "easy"), make_question("medium", "medium"), make_question("hard", "hard")]

    selection = selector.select(pool, ability_with(0.5))

    assert selection.question.id == "medium"
    assert selection.expected_difficulty == 0.5
    assert selection.expected_success_probability == pytest.approx(0.625)
    assert selection.reason == "Perfect difficulty match for optimal learning"


def test_component_scores():
    selector = QuestionSelector()
    ranked = selector.rank([make_question("m", "medium", times_asked=10)], ability_with(0.5))

    (m,) = ranked
    assert m.probability_score == pytest.approx(1 - abs(0.625 - 0.7))
    assert m.difficulty_score == pytest.approx(0.9)
    assert m.skill_priority_score == pytest.approx(0.5)
    assert m.frequency_score == pytest.approx(0.5)
    assert m.score == pytest.approx(0.925 * 0.4 + 0.9 * 0.2 + 0.5 * 0.3 + 0.5 * 0.1)


def test_ties_go_to_first_candidate():
    selector = QuestionSelector()
    pool = [make_question("first"), make_question("second"), make_question("third")]

    assert selector.select(pool, ability_with()).question.id == "first"
    assert selector.select(list(reversed(pool)), ability_with()).question.id == "third"


def test_selection_is_deterministic():
    selector = QuestionSelector()
    pool = [make_question(f"q{i}", d, skills=[s], times_asked=i)
            for i, (d, s) in enumerate([("easy", "a"), ("hard", "b"), ("medium", "c"), ("medium", "a")])]
    ability = ability_with(0.55, a=0.7, b=0.3, c=0.55)

    picks = {selector.select(pool, ability).question.id for _ in range(20)}
    assert len(picks) == 1


def test_rarely_asked_question_preferred():
    selector = QuestionSelector()
    pool = [make_question("worn", times_asked=10), make_question("fresh")]
    assert selector.select(pool, ability_with()).question.id == "fresh"


def test_target_skill_filters_pool():
    selector = QuestionSelector()
    pool = [make_question("alg", skills=["algebra"]), make_question("geo", "hard", skills=["geometry"])]

    assert selector.select(pool, ability_with(), target_skill="geometry").question.id == "geo"


def test_unknown_target_skill_falls_back_to_full_pool():
    selector = QuestionSelector()
    pool = [make_question("alg", skills=["algebra"]), make_question("geo", "hard", skills=["geometry"])]

    ranked = selector.rank(pool, ability_with(), target_skill="calculus")
    assert {c.question.id for c in ranked} == {"alg", "geo"}
    assert selector.select(pool, ability_with(), target_skill="calculus") is not None


def test_weak_skill_is_prioritised_and_explained():
    selector = QuestionSelector()
    pool = [make_question("strong", skills=["algebra"]), make_question("weak", skills=["geometry"])]
    ability = ability_with(0.5, algebra=0.9, geometry=0.2)

    selection = selector.select(pool, ability)

    assert selection.question.id == "weak"
    assert selection.reason == "Focusing on skill that needs practice (20% mastery)"


def test_skill_mastery_averages_tags_and_ignores_zero():
    selector = QuestionSelector()
    ability = ability_with(0.4, algebra=0.8, geometry=0.0)

    assert selector.skill_mastery(make_question("q", skills=["algebra", "unseen"]), ability) == pytest.approx(0.65)
    assert selector.skill_mastery(make_question("q", skills=["algebra", "geometry"]), ability) == pytest.approx(0.8)
    assert selector.skill_mastery(make_question("q", skills=["geometry"]), ability) == pytest.approx(0.4)
    assert selector.skill_mastery(make_question("q"), ability) == pytest.approx(0.4)


def test_easy_question_builds_confidence():
    selector = QuestionSelector()
    selection = selector.select([make_question("q", irt_difficulty=-0.5)], ability_with(0.9))

    assert selection.expected_success_probability > 0.8
    assert selection.reason == "Building confidence with slightly easier question"


def test_hard_question_is_a_challenge():
    selector = QuestionSelector()
    selection = selector.select([make_question("q", irt_difficulty=1.0)], ability_with(0.5))

    assert selection.expected_success_probability < 0.6
    assert selection.reason == "Challenging you with a harder question"


def test_optimal_difficulty_is_capped():
    selector = QuestionSelector()
    assert selector.optimal_difficulty(ability_with(0.5)) == pytest.approx(0.6)
    assert selector.optimal_difficulty(ability_with(0.95)) == 1.0


def test_selection_serialises_with_camel_case_keys():
    selection = QuestionSelector().select([make_question("q", skills=["algebra"])], ability_with())
    doc = selection.to_dict()

    assert doc["question"]["skillTags"] == ["algebra"]
    assert set(doc) == {"question", "reason", "expectedDifficulty", "expectedSuccessProbability"}
