"""Ambiente do Alembic: metadata dos modelos de `gestao.domain`, URL vinda do .env."""
import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

# Executado a partir da raiz do projeto, onde fica o pacote 'gestao'
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from gestao.config import config as app_config  # noqa: E402
from gestao.database.base import Base  # noqa: E402
import gestao.domain  # noqa: E402,F401  (registra as tabelas no metadata)

alembic_cfg = context.config
if alembic_cfg.config_file_name is not None:
    fileConfig(alembic_cfg.config_file_name)

if not app_config.SQLALCHEMY_DATABASE_URI:
    raise SystemExit("SQLALCHEMY_DATABASE_URI não configurado; verifique DB_TYPE/DATABASE_URL no .env.")
alembic_cfg.set_main_option('sqlalchemy.url', app_config.SQLALCHEMY_DATABASE_URI.replace('%', '%%'))


def _configure_kwargs(dialect_name: str) -> dict:
    # SQLite não altera colunas no lugar: batch recria a tabela
    return {
        'target_metadata': Base.metadata,
        'compare_type': True,
        'render_as_batch': dialect_name == 'sqlite',
    }


def run_migrations_offline() -> None:
    url = alembic_cfg.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(url.split(':', 1)[0].split('+', 1)[0]),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = engine_from_config(
        alembic_cfg.get_section(alembic_cfg.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs(connection.dialect.name))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
