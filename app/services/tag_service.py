"""
Tag service - Business logic for the tag taxonomy.
"""

import logging
from collections.abc import Iterable
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ValidationException
from app.models.tag import DEFAULT_TAGS, Tag, TagCategory
from app.services.base import BaseService

logger = logging.getLogger(__name__)


def parse_category(category: TagCategory | str) -> TagCategory:
    """
    Coerce a raw category value into a TagCategory.

    Raises:
        ValidationException: If the value is not one of the four categories
    """
    if isinstance(category, TagCategory):
        return category
    try:
        return TagCategory(category)
    except ValueError:
        raise ValidationException(
            f"Invalid tag category '{category}'",
            details={"allowed": [c.value for c in TagCategory]},
        )


def unique_ids(ids: Iterable[str]) -> list[str]:
    """De-duplicate ids while keeping their first-seen order."""
    return list(dict.fromkeys(ids))


class TagService(BaseService):
    """Service class for tag operations."""

    async def list_all(self) -> Sequence[Tag]:
        """
        List all tags ordered by category, then name.

        The taxonomy is small and bounded, so there is no pagination.
        """
        query = select(Tag).order_by(Tag.category.asc(), Tag.name.asc())
        result = await self.db.execute(query)
        return result.scalars().all()

    async def list_by_category(self, category: TagCategory | str) -> Sequence[Tag]:
        """
        List tags in a specific category.

        Args:
            category: Tag category to filter by

        Returns:
            List of tags in the category, ordered by name

        Raises:
            ValidationException: If the category is not valid
        """
        category = parse_category(category)
        query = (
            select(Tag)
            .where(Tag.category == category)
            .order_by(Tag.name.asc())
        )
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_by_ids(self, tag_ids: Iterable[str]) -> Sequence[Tag]:
        """Fetch the tags matching the given ids. Unknown ids are skipped."""
        ids = unique_ids(tag_ids)
        if not ids:
            return []
        result = await self.db.execute(select(Tag).where(Tag.id.in_(ids)))
        return result.scalars().all()

    async def get_or_create(self, name: str, category: TagCategory | str) -> Tag:
        """
        Return the tag matching (name, category) exactly, creating it if needed.

        Safe under concurrent callers: the insert runs in a SAVEPOINT and a
        unique-constraint violation falls back to re-reading the row that
        the other writer created.

        Args:
            name: Tag name (case-sensitive)
            category: Tag category

        Returns:
            The existing or newly created Tag
        """
        tag, _ = await self.get_or_create_with_flag(name, category)
        return tag

    async def get_or_create_with_flag(
        self, name: str, category: TagCategory | str
    ) -> tuple[Tag, bool]:
        """Same as get_or_create, also reporting whether this call created the tag."""
        category = parse_category(category)

        tag = await self._find(name, category)
        if tag:
            return tag, False

        try:
            async with self.db.begin_nested():
                tag = Tag(name=name, category=category)
                self.db.add(tag)
        except IntegrityError:
            logger.info(f"Tag '{name}' ({category.value}) created concurrently, re-reading")
            tag = await self._find(name, category)
            if tag is None:
                raise
            return tag, False

        logger.info(f"Created tag '{name}' ({category.value})")
        return tag, True

    async def validate_for_post(self, tag_ids: Iterable[str]) -> bool:
        """
        Check that a tag set is acceptable for a post.

        Every post must carry at least one classification tag, and every
        id must resolve to an existing tag.

        Returns:
            False if empty, if any id is unknown, or if no classification
            tag is present; True otherwise
        """
        ids = unique_ids(tag_ids)
        if not ids:
            return False

        tags = await self.get_by_ids(ids)
        if len(tags) != len(ids):
            return False

        return any(tag.is_classification for tag in tags)

    async def seed_defaults(self) -> int:
        """
        Get-or-create every tag in the default taxonomy.

        Returns:
            Number of tags that did not exist before
        """
        created = 0
        for category, names in DEFAULT_TAGS.items():
            for name in names:
                _, was_created = await self.get_or_create_with_flag(name, category)
                created += was_created
        return created

    async def _find(self, name: str, category: TagCategory) -> Tag | None:
        query = select(Tag).where(Tag.name == name, Tag.category == category)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
