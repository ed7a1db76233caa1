from sqlalchemy import Column, Integer, String, DateTime, DDL
from sqlalchemy.sql import func
from shortlink_app.database.connection import Base


class URL(Base):
    """
    A stored alias -> target URL mapping.

    Uniqueness of ``alias`` is enforced by the database (UNIQUE constraint),
    never by a read-then-write check in application code.
    """
    __tablename__ = "urls"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # unique=True together with index=True creates a UNIQUE index on alias
    alias = Column(String, unique=True, index=True, nullable=False)
    target_url = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
        nullable=False,
    )


# Keeps updated_at current for updates issued outside the ORM as well.
# SQLite does not fire triggers recursively by default, so the inner UPDATE is safe.
UPDATED_AT_TRIGGER = DDL(
    """
    CREATE TRIGGER IF NOT EXISTS urls_updated_at_trigger
    AFTER UPDATE ON urls
    FOR EACH ROW
    BEGIN
        UPDATE urls SET updated_at = CURRENT_TIMESTAMP WHERE id = OLD.id;
    END
    """
)
