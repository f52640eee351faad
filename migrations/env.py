import logging
import os
from logging.config import fileConfig

from flask import current_app
from sqlalchemy import text  # needed for raw SQL (e.g., SQLite temp table cleanup)

from alembic import context

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
# This line sets up loggers basically.
fileConfig(config.config_file_name)
logger = logging.getLogger('alembic.env')


def _normalize_db_url(url: str | None) -> str | None:
    if not url:
        return None
    # SQLAlchemy 2.x prefers postgresql:// over postgres://
    if url.startswith('postgres://'):
        return 'postgresql://' + url[len('postgres://'):]
    return url


def get_engine():
    preferred_env_url = (
        _normalize_db_url(os.environ.get('ALEMBIC_DATABASE_URL'))
        or _normalize_db_url(os.environ.get('DATABASE_URL'))
    )
    if preferred_env_url:
        from sqlalchemy import create_engine
        return create_engine(preferred_env_url)

    return current_app.extensions['migrate'].db.engine


def get_engine_url():
    try:
        return get_engine().url.render_as_string(hide_password=False).replace(
            '%', '%%')
    except AttributeError:
        return str(get_engine().url).replace('%', '%%')


# Import the models package so every table is on the metadata for autogenerate
from pharmastock import models  # noqa: E402,F401

config.set_main_option('sqlalchemy.url', get_engine_url())
target_db = current_app.extensions['migrate'].db


def get_metadata():
    if hasattr(target_db, 'metadatas'):
        return target_db.metadatas[None]
    return target_db.metadata


def run_migrations_offline():
    """Run migrations in 'offline' mode.

    This configures the context with just a URL
    and not an Engine, though an Engine is acceptable
    here as well.  By skipping the Engine creation
    we don't even need a DBAPI to be available.

    Calls to context.execute() here emit the given string to the
    script output.

    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url, target_metadata=get_metadata(), literal_binds=True
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations in 'online' mode.

    In this scenario we need to create an Engine
    and associate a connection with the context.

    """

    # this callback is used to prevent an auto-migration from being generated
    # when there are no changes to the schema
    # reference: http://alembic.zzzcomputing.com/en/latest/cookbook.html
    def process_revision_directives(context, revision, directives):
        """Suppress file creation when no changes are detected."""
        if getattr(config.cmd_opts, 'autogenerate', False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info('No changes in schema detected.')

    conf_args = current_app.extensions['migrate'].configure_args
    # Ensure each revision runs in its own transaction
    conf_args["transaction_per_migration"] = True
    if conf_args.get("process_revision_directives") is None:
        conf_args["process_revision_directives"] = process_revision_directives

    connectable = get_engine()

    with connectable.connect() as connection:
        # Clean up any leftover temporary tables from failed SQLite batch migrations
        if 'sqlite' in str(connection.engine.url):
            result = connection.execute(text("""
                SELECT name FROM sqlite_master
                WHERE type='table' AND name LIKE '_alembic_tmp_%'
            """))
            temp_tables = [row[0] for row in result.fetchall()]
            if temp_tables:
                logger.info(f"Cleaning up {len(temp_tables)} temporary tables from failed migrations")
                for table_name in temp_tables:
                    connection.execute(text(f"DROP TABLE IF EXISTS {table_name}"))
                connection.commit()

        context.configure(
            connection=connection,
            target_metadata=get_metadata(),
            **conf_args
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
