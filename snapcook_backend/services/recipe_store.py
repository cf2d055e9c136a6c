"""Persistence helpers for recipes the user decided to keep."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from snapcook_backend.models import Recipe
from snapcook_backend.services.schemas import RecipeSuggestion


class RecipeStoreError(RuntimeError):
    """Raised when recipes cannot be read from or written to the database."""


def save_recipe(session: Session, suggestion: RecipeSuggestion) -> Recipe:
    """Persist a suggestion and return the committed row."""

    recipe = Recipe(
        recipe_name=suggestion.name,
        description=suggestion.description,
        ingredients=list(suggestion.ingredients),
        instructions=list(suggestion.instructions),
        estimated_time=suggestion.estimated_time_minutes,
        difficulty=suggestion.difficulty or None,
        tips=suggestion.tips or None,
    )
    try:
        session.add(recipe)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise RecipeStoreError("failed to save recipe") from exc

    session.refresh(recipe)
    return recipe


def list_recipes(session_factory: sessionmaker) -> list[Recipe]:
    """Return every saved recipe, newest first."""

    session: Session = session_factory()
    try:
        return list(
            session.execute(
                select(Recipe).order_by(Recipe.created_at.desc(), Recipe.id.desc())
            )
            .scalars()
            .all()
        )
    except SQLAlchemyError as exc:
        raise RecipeStoreError("failed to load recipes") from exc
    finally:
        session.close()
