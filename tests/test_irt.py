"""Tests for irt.py"""

import math

import pytest

from adaptive_engine.irt import AbilityModel, sigmoid

from conftest import make_question


def test_probability_at_matching_ability_is_midway_above_guessing():
    model = AbilityModel()
    # c + (1 - c) / 2
    assert model.probability(0.5, 0.5) == pytest.approx(0.25 + 0.75 * 0.5)


def test_probability_matches_3pl_formula():
    model = AbilityModel()
    expected = 0.2 + 0.8 / (1 + math.exp(-2.0 * (0.6 - 0.3)))
    assert model.probability(0.6, 0.3, discrimination=2.0, guessing=0.2) == pytest.approx(expected)


def test_probability_is_monotonic_and_bounded():
    model = AbilityModel()
    abilities = [i / 20 for i in range(-40, 41)]
    for guessing in (0.0, 0.25, 0.5):
        values = [model.probability(a, 0.5, 1.5, guessing) for a in abilities]
        assert all(b >= a for a, b in zip(values, values[1:]))
        assert all(guessing <= v <= 1.0 for v in values)


def test_sigmoid_handles_extreme_inputs():
    assert sigmoid(1000) == pytest.approx(1.0)
    assert sigmoid(-1000) == pytest.approx(0.0)
    assert sigmoid(0) == 0.5


def test_question_difficulty_prefers_calibration_over_label():
    model = AbilityModel()
    assert model.question_difficulty(make_question("q1", "hard", irt_difficulty=0.42)) == 0.42
    assert model.question_difficulty(make_question("q2", "easy")) == 0.3
    assert model.question_difficulty(make_question("q3", "medium")) == 0.5
    assert model.question_difficulty(make_question("q4", "hard")) == 0.7
    assert model.question_difficulty(make_question("q5", "unheard-of")) == 0.5


def test_item_parameters_fill_in_defaults():
    model = AbilityModel()
    assert model.item_parameters(make_question("q1", "easy")) == (0.3, 1.0, 0.25)

    calibrated = make_question("q2", irt_difficulty=0.6, irt_discrimination=1.7, irt_guessing=0.1)
    assert model.item_parameters(calibrated) == (0.6, 1.7, 0.1)

    partial = make_question("q3", "hard", irt_guessing=0.0)
    assert model.item_parameters(partial) == (0.7, 1.0, 0.0)
