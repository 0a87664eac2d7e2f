# gestao/database/base_repository.py
# Classe base para os repositórios ORM (uma Session é recebida em cada método).

from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from gestao.utils.logger import logger
from gestao.api.errors import DatabaseError

ModelT = TypeVar('ModelT')


class BaseRepository(Generic[ModelT]):
    """
    Base para repositórios SQLAlchemy ORM.
    Subclasses definem `model`, `natural_key` (ordenação) e, quando a entidade
    tem ativação/inativação, `inactive_status`.
    A sessão é gerenciada pelo chamador (get_db_session), então nada aqui faz commit.
    """
    model: Type[ModelT]
    natural_key: str = 'nome'
    active_status: str = 'ativo'
    inactive_status: Optional[str] = 'inativo'

    def __init__(self, engine: Engine):
        if not isinstance(engine, Engine):
            raise TypeError("engine must be an instance of sqlalchemy.engine.Engine")
        self.engine = engine
        logger.debug(f"{self.__class__.__name__} initialized with SQLAlchemy engine: {engine.url.database}")

    def _run(self, description: str, operation: Callable[[], Any]) -> Any:
        try:
            return operation()
        except SQLAlchemyError as e:
            logger.error(f"ORM: Erro de banco de dados ao {description}: {e}", exc_info=True)
            raise DatabaseError(f"Erro de banco de dados ao {description}: {e}") from e

    def find_by_id(self, db: Session, record_id: int, for_update: bool = False) -> Optional[ModelT]:
        logger.debug(f"ORM: Buscando {self.model.__name__} ID {record_id} (for_update={for_update})")
        return self._run(
            f"buscar {self.model.__name__} {record_id}",
            lambda: db.get(self.model, record_id, with_for_update=for_update or None),
        )

    def find_all(self, db: Session, include_inactive: bool = False) -> List[ModelT]:
        """
        Lista os registros ordenados pela chave natural (sem distinção de maiúsculas).
        Com inativos incluídos, os ativos vêm primeiro.
        """
        def _query():
            stmt = select(self.model)
            status_col = getattr(self.model, 'status', None)
            if status_col is not None and not include_inactive:
                stmt = stmt.where(status_col == self.active_status)
            order = []
            if status_col is not None and include_inactive:
                order.append((status_col != self.active_status).asc())
            order.append(func.lower(getattr(self.model, self.natural_key)).asc())
            return list(db.scalars(stmt.order_by(*order)).unique().all())
        return self._run(f"listar {self.model.__name__}", _query)

    def add(self, db: Session, record: ModelT) -> ModelT:
        def _add():
            db.add(record)
            db.flush()
            logger.info(f"ORM: {self.model.__name__} adicionado à sessão (ID: {getattr(record, 'id', None)}). Commit pendente.")
            return record
        return self._run(f"adicionar {self.model.__name__}", _add)

    def update(self, db: Session, record: ModelT, changes: dict) -> ModelT:
        def _update():
            for key, value in changes.items():
                setattr(record, key, value)
            db.flush()
            logger.info(f"ORM: {self.model.__name__} ID {getattr(record, 'id', None)} atualizado ({', '.join(changes)}). Commit pendente.")
            return record
        return self._run(f"atualizar {self.model.__name__}", _update)

    def delete(self, db: Session, record: ModelT) -> None:
        def _delete():
            db.delete(record)
            db.flush()
            logger.info(f"ORM: {self.model.__name__} ID {getattr(record, 'id', None)} marcado para exclusão. Commit pendente.")
        self._run(f"excluir {self.model.__name__}", _delete)
