"""
Tag SQLAlchemy model and the fixed tag taxonomy.
"""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Enum, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class TagCategory(str, enum.Enum):
    """
    The four tag categories. Values are stored verbatim in the database.
    """
    CLASSIFICATION = "分類"  # species / type, mandatory on every post
    ANGLE = "角度"           # camera angle
    PART = "パーツ"          # body part in focus
    FREE = "自由"            # free-form user tags


# Seeded once at startup via get-or-create
DEFAULT_TAGS: dict[TagCategory, list[str]] = {
    TagCategory.CLASSIFICATION: [
        "犬", "猫", "鳥類", "爬虫類", "両生類", "魚類", "小動物", "昆虫", "その他",
    ],
    TagCategory.ANGLE: ["正面", "横", "斜め", "上", "下", "後ろ"],
    TagCategory.PART: ["耳", "ヒゲ", "ツノ", "牙", "目", "鼻", "しっぽ"],
}


class Tag(Base):
    """
    Tag entity. A tag is identified by its (name, category) pair.
    """
    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("name", "category", name="uq_tags_name_category"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
        comment="Tag unique identifier",
    )
    name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Tag name (case-sensitive)",
    )
    category: Mapped[TagCategory] = mapped_column(
        Enum(
            TagCategory,
            name="tag_category",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        index=True,
        comment="One of the four fixed categories",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    @property
    def is_classification(self) -> bool:
        return self.category == TagCategory.CLASSIFICATION

    def __repr__(self) -> str:
        return f"<Tag(name={self.name}, category={self.category})>"
