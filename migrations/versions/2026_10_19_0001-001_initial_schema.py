"""Initial schema: users, tags, posts, post_tags, favorites, user_exclude_tags

Revision ID: 001
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TAG_CATEGORY = sa.Enum("分類", "角度", "パーツ", "自由", name="tag_category")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(255), nullable=False, comment="Stable subject identifier from the identity provider"),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("profile_image_url", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "tags",
        sa.Column("id", sa.String(36), nullable=False, comment="Tag unique identifier"),
        sa.Column("name", sa.Text(), nullable=False, comment="Tag name (case-sensitive)"),
        sa.Column("category", TAG_CATEGORY, nullable=False, comment="One of the four fixed categories"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_tags"),
        sa.UniqueConstraint("name", "category", name="uq_tags_name_category"),
    )
    op.create_index("ix_tags_category", "tags", ["category"])

    op.create_table(
        "posts",
        sa.Column("id", sa.String(36), nullable=False, comment="Post unique identifier"),
        sa.Column("user_id", sa.String(255), nullable=False, comment="Owning user"),
        sa.Column("image_url", sa.Text(), nullable=False, comment="Image reference (URL)"),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_posts_user_id_users", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_posts"),
    )
    op.create_index("ix_posts_user_id", "posts", ["user_id"])
    op.create_index("ix_posts_created_at", "posts", ["created_at"])

    op.create_table(
        "post_tags",
        sa.Column("post_id", sa.String(36), nullable=False),
        sa.Column("tag_id", sa.String(36), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], name="fk_post_tags_post_id_posts", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], name="fk_post_tags_tag_id_tags", ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("post_id", "tag_id", name="pk_post_tags"),
    )
    op.create_index("ix_post_tags_tag_id", "post_tags", ["tag_id"])

    op.create_table(
        "favorites",
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("post_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_favorites_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], name="fk_favorites_post_id_posts", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "post_id", name="pk_favorites"),
    )
    op.create_index("ix_favorites_post_id", "favorites", ["post_id"])

    op.create_table(
        "user_exclude_tags",
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("tag_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_user_exclude_tags_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], name="fk_user_exclude_tags_tag_id_tags", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "tag_id", name="pk_user_exclude_tags"),
    )


def downgrade() -> None:
    op.drop_table("user_exclude_tags")
    op.drop_index("ix_favorites_post_id", table_name="favorites")
    op.drop_table("favorites")
    op.drop_index("ix_post_tags_tag_id", table_name="post_tags")
    op.drop_table("post_tags")
    op.drop_index("ix_posts_created_at", table_name="posts")
    op.drop_index("ix_posts_user_id", table_name="posts")
    op.drop_table("posts")
    op.drop_index("ix_tags_category", table_name="tags")
    op.drop_table("tags")
    op.drop_table("users")
    TAG_CATEGORY.drop(op.get_bind(), checkfirst=True)
