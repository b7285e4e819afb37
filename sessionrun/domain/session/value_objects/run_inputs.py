"""
RunInputs value object: everything the learner has entered during a run.

Inputs are keyed by step id. The stored/wire shape is a camelCase JSON
object; empty groups are omitted.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Self

from sessionrun.domain.common.value_object import ValueObject
from sessionrun.domain.session.exceptions import InvalidStepInputError


class FlashcardResult(StrEnum):
    KNOW = "know"
    DONT_KNOW = "dontknow"


_GROUP_KEYS = {
    "answers": "answers",
    "flashcard_revealed": "flashcardRevealed",
    "flashcard_result": "flashcardResult",
    "speed_ox_answers": "speedOxAnswers",
    "matching_connections": "matchingConnections",
}


_FLASHCARD_RESULTS = frozenset(result.value for result in FlashcardResult)


def _is_int(value: object) -> bool:
    # bool is an int subclass and must not count as an answer index
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True, eq=False)
class RunInputs(ValueObject):
    """
    Immutable bag of per-step inputs.

    Every `with_*` method returns a new instance; the original is never
    modified, so reducer states can share it safely.
    """

    answers: Mapping[str, int] = field(default_factory=dict)
    flashcard_revealed: Mapping[str, bool] = field(default_factory=dict)
    flashcard_result: Mapping[str, FlashcardResult] = field(default_factory=dict)
    speed_ox_answers: Mapping[str, bool] = field(default_factory=dict)
    matching_connections: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> Self:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not any(
            (
                self.answers,
                self.flashcard_revealed,
                self.flashcard_result,
                self.speed_ox_answers,
                self.matching_connections,
            )
        )

    def with_answer(self, step_id: str, answer_index: int) -> Self:
        return self._replace(answers={**self.answers, step_id: answer_index})

    def with_flashcard_revealed(self, step_id: str, revealed: bool = True) -> Self:
        return self._replace(flashcard_revealed={**self.flashcard_revealed, step_id: revealed})

    def with_flashcard_result(self, step_id: str, result: FlashcardResult) -> Self:
        return self._replace(
            flashcard_result={**self.flashcard_result, step_id: FlashcardResult(result)}
        )

    def with_speed_ox_answer(self, step_id: str, answer: bool) -> Self:
        return self._replace(speed_ox_answers={**self.speed_ox_answers, step_id: answer})

    def with_matching_connection(self, step_id: str, left_id: str, right_id: str) -> Self:
        connections = {**self.matching_connections.get(step_id, {}), left_id: right_id}
        return self._replace(
            matching_connections={**self.matching_connections, step_id: connections}
        )

    def without_matching(self, step_id: str) -> Self:
        remaining = {k: v for k, v in self.matching_connections.items() if k != step_id}
        return self._replace(matching_connections=remaining)

    def connection_count(self, step_id: str) -> int:
        return len(self.matching_connections.get(step_id, {}))

    def _replace(self, **changes: Any) -> Self:
        values = {
            "answers": self.answers,
            "flashcard_revealed": self.flashcard_revealed,
            "flashcard_result": self.flashcard_result,
            "speed_ox_answers": self.speed_ox_answers,
            "matching_connections": self.matching_connections,
        }
        values.update(changes)
        return type(self)(**values)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape, omitting empty groups."""
        payload: dict[str, Any] = {}
        if self.answers:
            payload["answers"] = dict(self.answers)
        if self.flashcard_revealed:
            payload["flashcardRevealed"] = dict(self.flashcard_revealed)
        if self.flashcard_result:
            payload["flashcardResult"] = {k: str(v) for k, v in self.flashcard_result.items()}
        if self.speed_ox_answers:
            payload["speedOxAnswers"] = dict(self.speed_ox_answers)
        if self.matching_connections:
            payload["matchingConnections"] = {
                step_id: dict(connections)
                for step_id, connections in self.matching_connections.items()
            }
        return payload

    def to_primitive(self) -> dict[str, Any]:
        return self.to_payload()

    @classmethod
    def parse(cls, payload: object) -> Self:
        """
        Strictly parse a client payload.

        Raises:
            InvalidStepInputError: If the payload or any group/entry is malformed
        """
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise InvalidStepInputError("Inputs must be an object", field="inputs")

        unknown = set(payload) - set(_GROUP_KEYS.values())
        if unknown:
            raise InvalidStepInputError(
                "Unknown input groups", field="inputs", value=sorted(unknown)
            )

        def group(key: str) -> Mapping[str, Any]:
            value = payload.get(key)
            if value is None:
                return {}
            if not isinstance(value, Mapping):
                raise InvalidStepInputError(f"{key} must be an object", field=key)
            return value

        answers = group("answers")
        for step_id, value in answers.items():
            if not _is_int(value) or value < 0:
                raise InvalidStepInputError(
                    "Answer must be a non-negative integer", field=f"answers.{step_id}", value=value
                )

        revealed = group("flashcardRevealed")
        for step_id, value in revealed.items():
            if not isinstance(value, bool):
                raise InvalidStepInputError(
                    "Reveal flag must be a boolean", field=f"flashcardRevealed.{step_id}"
                )

        results: dict[str, FlashcardResult] = {}
        for step_id, value in group("flashcardResult").items():
            try:
                results[step_id] = FlashcardResult(value)
            except ValueError as e:
                raise InvalidStepInputError(
                    "Flashcard result must be 'know' or 'dontknow'",
                    field=f"flashcardResult.{step_id}",
                    value=value,
                ) from e

        speed_ox = group("speedOxAnswers")
        for step_id, value in speed_ox.items():
            if not isinstance(value, bool):
                raise InvalidStepInputError(
                    "Speed O/X answer must be a boolean", field=f"speedOxAnswers.{step_id}"
                )

        matching: dict[str, dict[str, str]] = {}
        for step_id, connections in group("matchingConnections").items():
            if not isinstance(connections, Mapping) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in connections.items()
            ):
                raise InvalidStepInputError(
                    "Matching connections must map pair ids to pair ids",
                    field=f"matchingConnections.{step_id}",
                )
            matching[step_id] = dict(connections)

        return cls(
            answers=dict(answers),
            flashcard_revealed=dict(revealed),
            flashcard_result=results,
            speed_ox_answers=dict(speed_ox),
            matching_connections=matching,
        )

    @classmethod
    def rehydrate(cls, payload: object) -> Self:
        """Leniently rebuild stored inputs, keeping only well-typed entries."""
        if not isinstance(payload, Mapping):
            return cls()

        def group(key: str) -> Mapping[str, Any]:
            value = payload.get(key)
            return value if isinstance(value, Mapping) else {}

        return cls(
            answers={k: v for k, v in group("answers").items() if _is_int(v) and v >= 0},
            flashcard_revealed={
                k: v for k, v in group("flashcardRevealed").items() if isinstance(v, bool)
            },
            flashcard_result={
                k: FlashcardResult(v)
                for k, v in group("flashcardResult").items()
                if isinstance(v, str) and v in _FLASHCARD_RESULTS
            },
            speed_ox_answers={
                k: v for k, v in group("speedOxAnswers").items() if isinstance(v, bool)
            },
            matching_connections={
                step_id: {k: v for k, v in connections.items() if isinstance(v, str)}
                for step_id, connections in group("matchingConnections").items()
                if isinstance(connections, Mapping)
            },
        )
