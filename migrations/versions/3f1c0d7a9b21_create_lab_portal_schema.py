"""Create users, verification requests, stored files and blog posts."""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f1c0d7a9b21"
down_revision = None
branch_labels = None
depends_on = None


VERIFICATION_REQUEST_STATUS_ENUM = "verification_request_status"
ACTIVE_REQUEST_CLAUSE = sa.text("status IN ('pending', 'approved')")


def upgrade() -> None:
    """Create the lab portal tables."""

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column(
            "role",
            sa.String(length=32),
            nullable=False,
            server_default=sa.text("'user'"),
        ),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_date", sa.DateTime(), nullable=True),
        sa.Column("roadmap_progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("roadmap_level", sa.String(length=32), nullable=True),
        sa.Column("institution", sa.String(length=255), nullable=True),
        sa.Column("position", sa.String(length=255), nullable=True),
        sa.Column("field", sa.String(length=255), nullable=True),
        sa.Column("blog_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    verification_request_status = sa.Enum(
        "pending",
        "approved",
        "rejected",
        name=VERIFICATION_REQUEST_STATUS_ENUM,
    )

    op.create_table(
        "verification_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("user_name", sa.String(length=255), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=False),
        sa.Column("date_submitted", sa.DateTime(), nullable=False),
        sa.Column("research_field", sa.String(length=255), nullable=False),
        sa.Column("institution", sa.String(length=255), nullable=False),
        sa.Column("position", sa.String(length=255), nullable=False),
        sa.Column("publications_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("motivation", sa.Text(), nullable=False),
        sa.Column("publication_links", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            verification_request_status,
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column(
            "roadmap_completed", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("reviewed_by", sa.Integer(), nullable=True),
        sa.Column("review_date", sa.DateTime(), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["reviewed_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_verification_requests_user_id"),
        "verification_requests",
        ["user_id"],
        unique=False,
    )
    op.create_index(
        "uq_verification_requests_active_user",
        "verification_requests",
        ["user_id"],
        unique=True,
        sqlite_where=ACTIVE_REQUEST_CLAUSE,
        postgresql_where=ACTIVE_REQUEST_CLAUSE,
    )

    op.create_table(
        "stored_files",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("path", sa.String(length=512), nullable=False),
        sa.Column("url", sa.String(length=1024), nullable=False),
        sa.Column("mime_type", sa.String(length=128), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downloads", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_stored_files_user_id"), "stored_files", ["user_id"])
    op.create_index(op.f("ix_stored_files_category"), "stored_files", ["category"])

    op.create_table(
        "user_contributions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("file_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["file_id"], ["stored_files.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_user_contributions_user_id"), "user_contributions", ["user_id"]
    )
    op.create_index(
        op.f("ix_user_contributions_file_id"), "user_contributions", ["file_id"]
    )

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comments", sa.JSON(), nullable=False),
        sa.Column("image", sa.String(length=1024), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop the lab portal tables."""

    op.drop_table("blog_posts")
    op.drop_index(op.f("ix_user_contributions_file_id"), table_name="user_contributions")
    op.drop_index(op.f("ix_user_contributions_user_id"), table_name="user_contributions")
    op.drop_table("user_contributions")
    op.drop_index(op.f("ix_stored_files_category"), table_name="stored_files")
    op.drop_index(op.f("ix_stored_files_user_id"), table_name="stored_files")
    op.drop_table("stored_files")
    op.drop_index("uq_verification_requests_active_user", table_name="verification_requests")
    op.drop_index(
        op.f("ix_verification_requests_user_id"), table_name="verification_requests"
    )
    op.drop_table("verification_requests")
    if op.get_bind().dialect.name == "postgresql":
        op.execute(f"DROP TYPE IF EXISTS {VERIFICATION_REQUEST_STATUS_ENUM}")
    op.drop_table("users")
