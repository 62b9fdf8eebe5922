# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Alembic environment – migrations run on the application's own engine.

``alembic.ini`` prepends ``backend/`` to sys.path, so the app modules import
directly and the database URL comes from Settings (etc/app.conf or the
environment).  There is no second copy of the connection string.
"""

from alembic import context

from core.config import settings
from database import Base, engine

# Importing the model registers the users table on Base.metadata, which
# ``alembic revision --autogenerate`` compares against the live schema.
import models.user  # noqa: F401, E402


def run_migrations_online():
    """Default mode – apply revisions over a live connection."""
    with engine.connect() as conn:
        context.configure(connection=conn, target_metadata=Base.metadata)
        with context.begin_transaction():
            context.run_migrations()


def run_migrations_offline():
    """``alembic upgrade head --sql`` – emit the DDL without connecting."""
    context.configure(
        url=settings.database_url,
        target_metadata=Base.metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
