# gestao/services/abate_service.py
# Lançamento de abates. Cada abate gera, na mesma transação, a conta a pagar do lote.

from datetime import datetime, timezone
from typing import Any, Dict, List

from gestao.database import get_db_session
from gestao.database.producao_repository import AbateRepository
from gestao.domain.cadastros import Fornecedor
from gestao.domain.financeiro import ContaAPagar, STATUS_PENDENTE
from gestao.domain.producao import Abate, STATUS_AGUARDANDO, STATUS_ABATE
from gestao.domain import schemas
from gestao.domain.validation import validate_payload, validate_partial
from gestao.services.crud_service import service_errors
from gestao.services.subscriptions import ChangeFeed, Subscription, Callback
from gestao.utils.data_conversion import round_money
from gestao.utils.logger import logger
from gestao.api.errors import NotFoundError, ValidationError


def gerar_lote_id(data: datetime) -> str:
    """LOTE-<epoch em milissegundos da data do abate>."""
    if data.tzinfo is None:
        data = data.replace(tzinfo=timezone.utc)
    return f"LOTE-{int(data.timestamp() * 1000)}"


class AbateService:
    def __init__(self, abate_repository: AbateRepository, conta_pagar_service=None):
        self.abate_repository = abate_repository
        self.conta_pagar_service = conta_pagar_service
        self.feed = ChangeFeed('abates', self.list)
        logger.info("AbateService inicializado (ORM).")

    def list(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        with service_errors("listar abates"):
            with get_db_session() as db:
                return [a.to_dict() for a in self.abate_repository.find_all(db, include_inactive)]

    def get(self, abate_id: int) -> Dict[str, Any]:
        with service_errors("buscar o abate"):
            with get_db_session() as db:
                return self._get_or_404(db, abate_id).to_dict()

    def subscribe(self, callback: Callback, include_inactive: bool = False) -> Subscription:
        return self.feed.subscribe(callback, include_inactive)

    def lancar_abate(self, data: Any, user=None) -> Dict[str, Any]:
        """Cria o abate (Aguardando Processamento) e a conta a pagar do lote atomicamente."""
        validated = validate_payload(schemas.AbateSchema, data).unwrap()
        custo_total = round_money(validated['numero_animais'] * validated['custo_por_animal'])
        lote_id = gerar_lote_id(validated['data'])

        with service_errors("lançar o abate"):
            with get_db_session() as db:
                if db.get(Fornecedor, validated['fornecedor_id']) is None:
                    raise NotFoundError(f"Fornecedor com ID {validated['fornecedor_id']} não encontrado.")

                abate = Abate(
                    **validated,
                    lote_id=lote_id,
                    custo_total=custo_total,
                    status=STATUS_AGUARDANDO,
                    registrado_por=user.actor_stamp() if user is not None else None,
                    created_at=datetime.now(timezone.utc),
                )
                self.abate_repository.add(db, abate)

                data_abate = validated['data'].date()
                db.add(ContaAPagar(
                    abate_id=abate.id,
                    fornecedor_id=abate.fornecedor_id,
                    descricao=f"Referente ao abate do {lote_id}",
                    valor=custo_total,
                    data_emissao=data_abate,
                    data_vencimento=data_abate,
                    status=STATUS_PENDENTE,
                ))
                db.flush()
                result = abate.to_dict()

        logger.info(f"Abate {result['id']} lançado ({lote_id}, {result['numero_animais']} animais, total {custo_total}).")
        self.feed.publish()
        if self.conta_pagar_service is not None:
            self.conta_pagar_service.feed.publish()
        return result

    def update(self, abate_id: int, data: Any) -> Dict[str, Any]:
        with service_errors("atualizar o abate"):
            with get_db_session() as db:
                abate = self._get_or_404(db, abate_id, for_update=True)
                changes = validate_partial(schemas.AbateSchema, abate.to_dict(), data).unwrap()
                if 'numero_animais' in changes or 'custo_por_animal' in changes:
                    numero = changes.get('numero_animais', abate.numero_animais)
                    custo = changes.get('custo_por_animal', abate.custo_por_animal)
                    changes['custo_total'] = round_money(numero * custo)
                self.abate_repository.update(db, abate, changes)
                result = abate.to_dict()
        self.feed.publish()
        return result

    def set_status(self, abate_id: int, status: str) -> Dict[str, Any]:
        if status not in STATUS_ABATE:
            raise ValidationError(f"Status inválido. Valores aceitos: {', '.join(STATUS_ABATE)}.")
        with service_errors("alterar o status do abate"):
            with get_db_session() as db:
                abate = self._get_or_404(db, abate_id, for_update=True)
                self.abate_repository.update(db, abate, {'status': status})
                result = abate.to_dict()
        self.feed.publish()
        return result

    def _get_or_404(self, db, abate_id: int, for_update: bool = False) -> Abate:
        abate = self.abate_repository.find_by_id(db, abate_id, for_update=for_update)
        if abate is None:
            raise NotFoundError(f"Abate com ID {abate_id} não encontrado.")
        return abate
