# gestao/services/crud_service.py
# Contrato uniforme dos cadastros: listar, inscrever, adicionar, atualizar e ativar/inativar.

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from gestao.database import get_db_session
from gestao.database.base_repository import BaseRepository
from gestao.domain.validation import validate_payload, validate_partial
from gestao.services.subscriptions import ChangeFeed, Subscription, Callback
from gestao.utils.logger import logger
from gestao.api.errors import ApiError, DatabaseError, NotFoundError, ServiceError, ValidationError


@contextmanager
def service_errors(action: str):
    """Erros de domínio passam intactos; falhas de banco e inesperadas viram ServiceError."""
    try:
        yield
    except DatabaseError as e:
        logger.error(f"Falha de banco de dados ao {action}: {e}", exc_info=True)
        raise ServiceError(f"Não foi possível {action}.") from e
    except ApiError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Erro SQLAlchemy ao {action}: {e}", exc_info=True)
        raise ServiceError(f"Não foi possível {action}.") from e
    except Exception as e:
        logger.error(f"Erro inesperado ao {action}: {e}", exc_info=True)
        raise ServiceError(f"Ocorreu um erro inesperado ao {action}.") from e


class CrudService:
    """
    Serviço genérico de cadastro sobre um BaseRepository.

    add() valida o payload inteiro, grava status ativo e created_at;
    update() valida a mescla do registro atual com o patch e aplica só as chaves enviadas;
    set_status() altera apenas o status. Toda escrita confirmada republica o feed.
    """

    def __init__(self, repository: BaseRepository, schema: Type[BaseModel], label: str,
                 stamp_actor: bool = False):
        self.repository = repository
        self.schema = schema
        self.label = label
        self.stamp_actor = stamp_actor
        self.model = repository.model
        self.feed = ChangeFeed(label, self.list)
        logger.info(f"{self.__class__.__name__} inicializado para '{label}'.")

    @property
    def allowed_statuses(self) -> tuple:
        return (self.repository.active_status, self.repository.inactive_status)

    # --- Leitura ---

    def list(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        logger.debug(f"Listando {self.label} (include_inactive={include_inactive}).")
        with service_errors(f"listar {self.label}"):
            with get_db_session() as db:
                return [record.to_dict() for record in self.repository.find_all(db, include_inactive)]

    def get(self, record_id: int) -> Dict[str, Any]:
        with service_errors(f"buscar {self.label}"):
            with get_db_session() as db:
                return self._get_or_404(db, record_id).to_dict()

    def subscribe(self, callback: Callback, include_inactive: bool = False) -> Subscription:
        return self.feed.subscribe(callback, include_inactive)

    # --- Escrita ---

    def add(self, data: Any, user: Optional[Any] = None) -> Dict[str, Any]:
        validated = validate_payload(self.schema, data).unwrap()
        with service_errors(f"adicionar {self.label}"):
            with get_db_session() as db:
                self._check_references(db, validated)
                record = self._build_record(validated, user)
                self.repository.add(db, record)
                result = record.to_dict()
        logger.info(f"{self.label}: registro {result.get('id')} criado.")
        self.feed.publish()
        return result

    def update(self, record_id: int, data: Any) -> Dict[str, Any]:
        with service_errors(f"atualizar {self.label}"):
            with get_db_session() as db:
                record = self._get_or_404(db, record_id, for_update=True)
                changes = validate_partial(self.schema, record.to_dict(), data).unwrap()
                self._check_references(db, changes)
                self.repository.update(db, record, self._prepare_changes(changes))
                result = record.to_dict()
        logger.info(f"{self.label}: registro {record_id} atualizado.")
        self.feed.publish()
        return result

    def set_status(self, record_id: int, status: Any) -> Dict[str, Any]:
        if status not in self.allowed_statuses:
            raise ValidationError(f"Status inválido. Valores aceitos: {', '.join(self.allowed_statuses)}.")
        with service_errors(f"alterar status de {self.label}"):
            with get_db_session() as db:
                record = self._get_or_404(db, record_id, for_update=True)
                self.repository.update(db, record, {'status': status})
                result = record.to_dict()
        logger.info(f"{self.label}: registro {record_id} agora está '{status}'.")
        self.feed.publish()
        return result

    # --- Ganchos para subclasses ---

    def _build_record(self, validated: Dict[str, Any], user: Optional[Any]):
        values = dict(validated)
        values['status'] = self.repository.active_status
        values['created_at'] = datetime.now(timezone.utc)
        if self.stamp_actor and user is not None:
            values['registrado_por'] = user.actor_stamp()
        return self.model(**values)

    def _prepare_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        return changes

    def _check_references(self, db, values: Dict[str, Any]) -> None:
        """Subclasses verificam se as chaves estrangeiras apontam para registros existentes."""

    def _get_or_404(self, db, record_id: int, for_update: bool = False):
        record = self.repository.find_by_id(db, record_id, for_update=for_update)
        if record is None:
            raise NotFoundError(f"{self.label.capitalize()} com ID {record_id} não encontrado(a).")
        return record
