"""Tests for branch condition evaluation."""

import logging

import pytest

from sessionrun.domain.session.entities.blueprint import (
    CheckStep,
    ConceptStep,
    FlashcardStep,
    SpeedOxStep,
)
from sessionrun.domain.session.services.branch_conditions import condition_matches
from sessionrun.domain.session.value_objects.run_inputs import FlashcardResult, RunInputs

CHECK = CheckStep(id="check", question="Q", options=("a", "b", "c"), answer_index=2)
OX = SpeedOxStep(id="ox", statement="S", is_true=False)
CARD = FlashcardStep(id="card", front="F", back="B")


class TestConditionMatches:
    @pytest.mark.parametrize("condition", ["always", "*", "DEFAULT", " always "])
    def test_always_conditions(self, condition: str) -> None:
        assert condition_matches(condition, CHECK, RunInputs())

    def test_correct_and_incorrect(self) -> None:
        right = RunInputs().with_answer("check", 2)
        wrong = RunInputs().with_answer("check", 0)

        assert condition_matches("correct", CHECK, right)
        assert not condition_matches("incorrect", CHECK, right)
        assert condition_matches("incorrect", CHECK, wrong)

    def test_graded_conditions_need_an_answer(self) -> None:
        assert not condition_matches("correct", CHECK, RunInputs())
        assert not condition_matches("incorrect", CHECK, RunInputs())

    def test_answer_comparison(self) -> None:
        inputs = RunInputs().with_answer("check", 1)

        assert condition_matches("answer == 1", CHECK, inputs)
        assert condition_matches("answer!=2", CHECK, inputs)
        assert not condition_matches("answer == 2", CHECK, inputs)
        assert not condition_matches("answer == 1", CHECK, RunInputs())

    def test_speed_ox_conditions(self) -> None:
        inputs = RunInputs().with_speed_ox_answer("ox", False)

        assert condition_matches("false", OX, inputs)
        assert not condition_matches("true", OX, inputs)
        assert condition_matches("correct", OX, inputs)

    def test_flashcard_conditions(self) -> None:
        inputs = RunInputs().with_flashcard_result("card", FlashcardResult.DONT_KNOW)

        assert condition_matches("dontknow", CARD, inputs)
        assert not condition_matches("know", CARD, inputs)
        assert condition_matches("incorrect", CARD, inputs)

    def test_answered(self) -> None:
        assert not condition_matches("answered", CHECK, RunInputs())
        assert condition_matches("answered", CHECK, RunInputs().with_answer("check", 0))

    def test_unknown_condition_never_matches(self, caplog: pytest.LogCaptureFixture) -> None:
        step = ConceptStep(id="concept", title="T", content_md="C")

        with caplog.at_level(logging.DEBUG):
            assert not condition_matches("score > 80", step, RunInputs())

        assert caplog.records == []
