"""Mapper for SessionBlueprint ORM ↔ Domain conversion."""

from dataclasses import asdict, fields, is_dataclass
from enum import Enum
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from sessionrun.domain.session.entities.blueprint import (
    Blueprint,
    BranchNext,
    ConceptStep,
    DefaultNext,
    Step,
)
from sessionrun.domain.session.exceptions import InvalidBlueprintError
from sessionrun.infrastructure.session.schemas.blueprint_schemas import BlueprintDocument
from sessionrun.models import SessionBlueprint as SessionBlueprintORM

# Domain field names that do not follow the plain camelCase rule
_FIELD_ALIASES = {(ConceptStep, "content_md"): "content"}


def _to_document_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple | list):
        return [_to_document_value(item) for item in value]
    if is_dataclass(value) and not isinstance(value, type):
        return {to_camel(k): v for k, v in asdict(value).items() if v is not None}
    return value


class BlueprintMapper:
    """Mapper between blueprint documents, ORM rows and domain blueprints."""

    def parse_document(self, document: dict[str, Any]) -> Blueprint:
        """
        Parse a stored document into a domain blueprint.

        Raises:
            InvalidBlueprintError: If the document does not describe a usable blueprint
        """
        try:
            return BlueprintDocument.model_validate(document).to_domain()
        except PydanticValidationError as e:
            raise InvalidBlueprintError(
                f"{e.error_count()} problem(s) in document", value=e.errors()[0].get("loc")
            ) from e

    def to_domain(self, orm_model: SessionBlueprintORM) -> Blueprint:
        """Convert ORM model to domain blueprint."""
        document = {**orm_model.document, "blueprintId": orm_model.blueprint_id}
        document.setdefault("schemaVersion", orm_model.schema_version)
        return self.parse_document(document)

    def to_document(self, blueprint: Blueprint) -> dict[str, Any]:
        """Serialize a domain blueprint to its camelCase document."""
        return {
            "schemaVersion": blueprint.schema_version,
            "blueprintId": blueprint.blueprint_id,
            "startStepId": blueprint.start_step_id,
            "steps": [self._step_to_document(step) for step in blueprint.steps],
        }

    def to_orm(self, blueprint: Blueprint) -> SessionBlueprintORM:
        """Convert domain blueprint to a new ORM model. Blueprints are never updated."""
        return SessionBlueprintORM(
            blueprint_id=blueprint.blueprint_id,
            schema_version=blueprint.schema_version,
            document=self.to_document(blueprint),
        )

    def _step_to_document(self, step: Step) -> dict[str, Any]:
        document: dict[str, Any] = {"id": step.id, "type": step.type.value}

        if isinstance(step.next, DefaultNext):
            document["next"] = {"default": step.next.to}
        elif isinstance(step.next, BranchNext):
            document["next"] = {
                "branches": [{"when": b.condition, "to": b.to} for b in step.next.branches]
            }

        for step_field in fields(step):
            if step_field.name in ("id", "next"):
                continue
            value = getattr(step, step_field.name)
            if value is None:
                continue
            key = _FIELD_ALIASES.get((type(step), step_field.name), to_camel(step_field.name))
            document[key] = _to_document_value(value)
        return document
