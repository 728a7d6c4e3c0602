import logging

from alembic import context
from flask import current_app

logger = logging.getLogger("alembic.env")

config = context.config
config.set_main_option('sqlalchemy.url', current_app.extensions['migrate'].db.engine.url.render_as_string(hide_password=False).replace('%', '%%'))
target_metadata = current_app.extensions['migrate'].db.metadata

def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online():
    connectable = current_app.extensions['migrate'].db.engine
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()
    logger.info("Migrations applied to %s", connectable.url.render_as_string(hide_password=True))

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
