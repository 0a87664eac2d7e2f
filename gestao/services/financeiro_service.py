# gestao/services/financeiro_service.py
# Contas a pagar e a receber: listagem por vencimento e baixas que movimentam o saldo
# da conta bancária na mesma transação.

from datetime import date
from typing import Any, Dict, List, Optional

from gestao.database import get_db_session
from gestao.database.financeiro_repository import ContaAPagarRepository, ContaAReceberRepository
from gestao.domain.cadastros import ContaBancaria
from gestao.domain.financeiro import STATUS_PENDENTE, STATUS_PAGA, STATUS_RECEBIDA
from gestao.domain.venda import Venda, STATUS_PAGA as VENDA_PAGA
from gestao.domain import schemas
from gestao.domain.validation import validate_payload
from gestao.services.crud_service import service_errors
from gestao.services.subscriptions import ChangeFeed, Subscription, Callback
from gestao.utils.data_conversion import round_money
from gestao.utils.logger import logger
from gestao.api.errors import BusinessRuleError, NotFoundError, ValidationError


def _lock_conta_bancaria(db, conta_bancaria_id: int) -> ContaBancaria:
    conta = db.get(ContaBancaria, conta_bancaria_id, with_for_update=True)
    if conta is None:
        raise NotFoundError(f"Conta bancária com ID {conta_bancaria_id} não encontrada.")
    if conta.status != 'ativa':
        raise BusinessRuleError(f"A conta bancária '{conta.nome_conta}' está inativa.")
    return conta


class _TituloService:
    """Comportamento comum de contas a pagar e a receber."""
    label = 'títulos'
    baixado_status = STATUS_PAGA

    def __init__(self, repository, conta_bancaria_service=None):
        self.repository = repository
        self.conta_bancaria_service = conta_bancaria_service
        self.feed = ChangeFeed(self.label, lambda _include_inactive: self.list())
        logger.info(f"{self.__class__.__name__} inicializado (ORM).")

    def list(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        with service_errors(f"listar {self.label}"):
            with get_db_session() as db:
                return [t.to_dict() for t in self.repository.find_all(db, status=status)]

    def subscribe(self, callback: Callback) -> Subscription:
        return self.feed.subscribe(callback)

    def set_status(self, titulo_id: int, status: str) -> Dict[str, Any]:
        """Troca manual do status, sem movimentar saldo."""
        if status not in (STATUS_PENDENTE, self.baixado_status):
            raise ValidationError(f"Status inválido. Valores aceitos: {STATUS_PENDENTE}, {self.baixado_status}.")
        with service_errors(f"alterar o status em {self.label}"):
            with get_db_session() as db:
                titulo = self._get_or_404(db, titulo_id, for_update=True)
                self.repository.update(db, titulo, {'status': status})
                result = titulo.to_dict()
        self.feed.publish()
        return result

    def _get_or_404(self, db, titulo_id: int, for_update: bool = False):
        titulo = self.repository.find_by_id(db, titulo_id, for_update=for_update)
        if titulo is None:
            raise NotFoundError(f"Título com ID {titulo_id} não encontrado em {self.label}.")
        return titulo

    def _baixa(self, data: Any):
        validated = validate_payload(schemas.PagamentoSchema, data or {}).unwrap()
        return validated['conta_bancaria_id'], validated.get('data') or date.today()

    def _notify(self):
        self.feed.publish()
        if self.conta_bancaria_service is not None:
            self.conta_bancaria_service.feed.publish()


class ContaAPagarService(_TituloService):
    label = 'contas a pagar'
    baixado_status = STATUS_PAGA

    def __init__(self, repository: ContaAPagarRepository, conta_bancaria_service=None):
        super().__init__(repository, conta_bancaria_service)

    def pagar_conta(self, conta_id: int, data: Any) -> Dict[str, Any]:
        """Debita a conta bancária e marca o título como Paga."""
        conta_bancaria_id, data_pagamento = self._baixa(data)
        with service_errors("pagar a conta"):
            with get_db_session() as db:
                titulo = self._get_or_404(db, conta_id, for_update=True)
                if titulo.status == STATUS_PAGA:
                    raise BusinessRuleError("Esta conta já foi paga.")
                conta = _lock_conta_bancaria(db, conta_bancaria_id)
                conta.saldo_atual = round_money((conta.saldo_atual or 0) - titulo.valor)
                self.repository.update(db, titulo, {
                    'status': STATUS_PAGA,
                    'data_pagamento': data_pagamento,
                    'conta_bancaria_id': conta.id,
                })
                result = titulo.to_dict()
        logger.info(f"Conta a pagar {conta_id} paga pela conta bancária {conta_bancaria_id} ({result['valor']}).")
        self._notify()
        return result


class ContaAReceberService(_TituloService):
    label = 'contas a receber'
    baixado_status = STATUS_RECEBIDA

    def __init__(self, repository: ContaAReceberRepository, conta_bancaria_service=None, venda_service=None):
        super().__init__(repository, conta_bancaria_service)
        self.venda_service = venda_service

    def receber_conta(self, conta_id: int, data: Any) -> Dict[str, Any]:
        """Credita a conta bancária, marca o título como Recebida e a venda de origem como Paga."""
        conta_bancaria_id, data_recebimento = self._baixa(data)
        with service_errors("receber a conta"):
            with get_db_session() as db:
                titulo = self._get_or_404(db, conta_id, for_update=True)
                if titulo.status == STATUS_RECEBIDA:
                    raise BusinessRuleError("Esta conta já foi recebida.")
                conta = _lock_conta_bancaria(db, conta_bancaria_id)
                conta.saldo_atual = round_money((conta.saldo_atual or 0) + titulo.valor)
                self.repository.update(db, titulo, {
                    'status': STATUS_RECEBIDA,
                    'data_recebimento': data_recebimento,
                    'conta_bancaria_id': conta.id,
                })
                venda = db.get(Venda, titulo.venda_id, with_for_update=True)
                if venda is not None:
                    venda.status = VENDA_PAGA
                db.flush()
                result = titulo.to_dict()
        logger.info(f"Conta a receber {conta_id} recebida na conta bancária {conta_bancaria_id} ({result['valor']}).")
        self._notify()
        if self.venda_service is not None:
            self.venda_service.feed.publish()
        return result
