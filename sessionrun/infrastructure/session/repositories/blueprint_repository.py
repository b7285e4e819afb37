"""Repository-backed blueprint provider."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sessionrun.domain.session.entities.blueprint import Blueprint
from sessionrun.infrastructure.session.mappers.blueprint_mapper import BlueprintMapper
from sessionrun.models import SessionBlueprint as SessionBlueprintORM

logger = logging.getLogger(__name__)


class BlueprintRepository:
    """Loads and stores blueprint documents in the session_blueprints table."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.mapper = BlueprintMapper()

    def get_blueprint(self, blueprint_id: str) -> Blueprint | None:
        """
        Load a blueprint by id.

        Raises:
            InvalidBlueprintError: If the stored document is unusable
        """
        stmt = select(SessionBlueprintORM).where(SessionBlueprintORM.blueprint_id == blueprint_id)
        orm_model = self.db.execute(stmt).scalar_one_or_none()
        return self.mapper.to_domain(orm_model) if orm_model else None

    def save(self, blueprint: Blueprint) -> Blueprint:
        """
        Insert a new blueprint. An existing row with the same id is left untouched.

        When another request inserts the same id first, its row is returned.
        """
        existing = self.get_blueprint(blueprint.blueprint_id)
        if existing is not None:
            return existing
        orm_model = self.mapper.to_orm(blueprint)
        self.db.add(orm_model)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            stored = self.get_blueprint(blueprint.blueprint_id)
            if stored is None:
                raise
            logger.info("Blueprint %s was stored by a concurrent request", blueprint.blueprint_id)
            return stored
        self.db.refresh(orm_model)
        return self.mapper.to_domain(orm_model)
