"""Tests for the RunInputs value object."""

import pytest

from sessionrun.domain.session.exceptions import InvalidStepInputError
from sessionrun.domain.session.value_objects.run_inputs import FlashcardResult, RunInputs


class TestRunInputs:
    """Test suite for RunInputs."""

    def test_updates_return_new_instance(self) -> None:
        original = RunInputs.empty()

        updated = original.with_answer("check", 2)

        assert original.is_empty
        assert updated.answers == {"check": 2}

    def test_matching_connections_accumulate_and_clear(self) -> None:
        inputs = (
            RunInputs()
            .with_matching_connection("match", "p1", "p1")
            .with_matching_connection("match", "p2", "p3")
        )
        assert inputs.connection_count("match") == 2

        cleared = inputs.without_matching("match")
        assert cleared.connection_count("match") == 0
        assert inputs.connection_count("match") == 2

    def test_equality_by_value(self) -> None:
        assert RunInputs().with_answer("a", 1) == RunInputs().with_answer("a", 1)
        assert RunInputs().with_answer("a", 1) != RunInputs().with_answer("a", 2)

    def test_payload_is_camel_case_without_empty_groups(self) -> None:
        inputs = (
            RunInputs()
            .with_flashcard_revealed("card")
            .with_flashcard_result("card", FlashcardResult.DONT_KNOW)
            .with_speed_ox_answer("ox", False)
        )

        assert inputs.to_payload() == {
            "flashcardRevealed": {"card": True},
            "flashcardResult": {"card": "dontknow"},
            "speedOxAnswers": {"ox": False},
        }

    def test_parse_accepts_full_payload(self) -> None:
        inputs = RunInputs.parse(
            {
                "answers": {"check": 0},
                "flashcardRevealed": {"card": True},
                "flashcardResult": {"card": "know"},
                "speedOxAnswers": {"ox": True},
                "matchingConnections": {"match": {"p1": "p2"}},
            }
        )

        assert inputs.answers == {"check": 0}
        assert inputs.flashcard_result == {"card": FlashcardResult.KNOW}
        assert inputs.matching_connections == {"match": {"p1": "p2"}}

    def test_parse_none_is_empty(self) -> None:
        assert RunInputs.parse(None).is_empty

    @pytest.mark.parametrize(
        "payload",
        [
            ["answers"],
            {"answers": {"check": "1"}},
            {"answers": {"check": True}},
            {"answers": {"check": -1}},
            {"flashcardResult": {"card": "maybe"}},
            {"speedOxAnswers": {"ox": 1}},
            {"matchingConnections": {"match": ["p1"]}},
            {"unknownGroup": {}},
        ],
    )
    def test_parse_rejects_malformed_payload(self, payload: object) -> None:
        with pytest.raises(InvalidStepInputError):
            RunInputs.parse(payload)

    def test_rehydrate_keeps_only_well_typed_entries(self) -> None:
        inputs = RunInputs.rehydrate(
            {
                "answers": {"good": 1, "bad": "x"},
                "flashcardResult": {"card": "know", "other": ["know"]},
                "speedOxAnswers": "not-a-group",
            }
        )

        assert inputs.answers == {"good": 1}
        assert inputs.flashcard_result == {"card": FlashcardResult.KNOW}
        assert inputs.speed_ox_answers == {}

    def test_rehydrate_non_mapping_is_empty(self) -> None:
        assert RunInputs.rehydrate(None).is_empty
