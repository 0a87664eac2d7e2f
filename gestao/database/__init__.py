# gestao/database/__init__.py
# Engine e fábrica de sessões do SQLAlchemy. Cada `with get_db_session()` é uma
# transação: as operações de estoque, venda e financeiro dependem disso para
# gravar tudo ou nada.
# Logger/errors são importados nas funções: o Alembic importa este pacote sem a app.

import threading
from typing import Optional, Generator
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

from .base import Base

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None
_engine_lock = threading.Lock()


def _build_engine(database_uri: str, pool_size: int, max_overflow: int) -> Engine:
    if database_uri.startswith("sqlite"):
        # Streams SSE e o agendador de NF-e usam o banco fora da thread que criou a conexão
        return create_engine(database_uri, connect_args={"check_same_thread": False})
    return create_engine(database_uri, pool_size=pool_size, max_overflow=max_overflow,
                         pool_recycle=3600, pool_pre_ping=True)


def init_sqlalchemy(database_uri: str, pool_size: int = 10, max_overflow: int = 20,
                    admin_email: Optional[str] = None, admin_password: Optional[str] = None) -> Engine:
    """
    Cria o engine, testa a conexão, cria as tabelas e o usuário administrador inicial.
    Chamado uma vez pelo app factory; chamadas seguintes devolvem o engine existente.
    """
    from gestao.utils.logger import logger
    from gestao.api.errors import DatabaseError, ConfigurationError
    from .schema_manager import SchemaManager

    global _engine, _session_factory
    with _engine_lock:
        if _engine is not None:
            logger.warning("Engine do SQLAlchemy já inicializado; reutilizando.")
            return _engine
        if not database_uri:
            raise ConfigurationError("URI do banco de dados ausente na configuração.")

        logger.info("Inicializando engine do SQLAlchemy...")
        try:
            engine = _build_engine(database_uri, pool_size, max_overflow)
        except SQLAlchemyError as e:
            logger.critical(f"URI de banco inválida ou driver ausente: {e}", exc_info=True)
            raise DatabaseError(f"Falha ao criar o engine do banco: {e}") from e

        try:
            with engine.connect():
                logger.info("Conexão com o banco de dados estabelecida.")
            SchemaManager(engine, admin_email=admin_email, admin_password=admin_password).initialize_schema()
        except (SQLAlchemyError, DatabaseError) as e:
            engine.dispose()
            logger.critical(f"Banco de dados indisponível ou esquema inválido: {e}", exc_info=True)
            if isinstance(e, DatabaseError):
                raise
            raise DatabaseError(f"Falha ao conectar ao banco de dados: {e}") from e

        _session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        _engine = engine
        logger.info("SQLAlchemy inicializado.")
        return _engine


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Sessão transacional: commit ao sair do bloco, rollback em qualquer exceção."""
    from gestao.utils.logger import logger
    from gestao.api.errors import DatabaseError

    if _session_factory is None:
        raise RuntimeError("Banco de dados não inicializado (chame init_sqlalchemy primeiro).")

    db = _session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Erro de banco de dados; transação desfeita: {e}", exc_info=True)
        raise DatabaseError(f"Falha na operação de banco de dados: {e}") from e
    except Exception as e:
        # erros de negócio (estoque insuficiente, validação) desfazem a transação inteira
        db.rollback()
        logger.debug(f"Transação desfeita por {type(e).__name__}: {e}")
        raise
    finally:
        db.close()


def dispose_sqlalchemy_engine():
    """Fecha o pool de conexões. Seguro de chamar mais de uma vez."""
    from gestao.utils.logger import logger

    global _engine, _session_factory
    with _engine_lock:
        if _engine is None:
            return
        try:
            _engine.dispose()
            logger.info("Pool de conexões do SQLAlchemy encerrado.")
        except SQLAlchemyError as e:
            logger.error(f"Erro ao encerrar o pool de conexões: {e}", exc_info=True)
        finally:
            _engine = None
            _session_factory = None


__all__ = [
    "init_sqlalchemy",
    "get_db_session",
    "dispose_sqlalchemy_engine",
    "Base",
]
