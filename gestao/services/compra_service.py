# gestao/services/compra_service.py
# Compras de fornecedores; compras a prazo geram as parcelas em contas a pagar.

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta

from gestao.database import get_db_session
from gestao.database.producao_repository import CompraRepository
from gestao.domain.cadastros import Fornecedor, ContaBancaria
from gestao.domain.compra import Compra
from gestao.domain.financeiro import ContaAPagar, STATUS_PENDENTE
from gestao.domain.venda import CONDICAO_A_PRAZO
from gestao.domain import schemas
from gestao.domain.validation import validate_payload, validate_partial
from gestao.services.crud_service import service_errors
from gestao.services.subscriptions import ChangeFeed, Subscription, Callback
from gestao.utils.data_conversion import round_money
from gestao.utils.logger import logger
from gestao.api.errors import NotFoundError, ValidationError


def dividir_parcelas(valor_total: float, numero_parcelas: int) -> List[float]:
    """Parcelas de mesmo valor; a diferença de arredondamento fica na última."""
    base = round_money(valor_total / numero_parcelas)
    parcelas = [base] * numero_parcelas
    parcelas[-1] = round_money(valor_total - base * (numero_parcelas - 1))
    return parcelas


def datas_vencimento(primeiro_vencimento: date, numero_parcelas: int) -> List[date]:
    """Uma data por parcela, mês a mês; dia 31 vira o último dia dos meses mais curtos."""
    return [primeiro_vencimento + relativedelta(months=indice) for indice in range(numero_parcelas)]


class CompraService:
    def __init__(self, compra_repository: CompraRepository, conta_pagar_service=None):
        self.compra_repository = compra_repository
        self.conta_pagar_service = conta_pagar_service
        self.feed = ChangeFeed('compras', self.list)
        logger.info("CompraService inicializado (ORM).")

    def list(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        with service_errors("listar compras"):
            with get_db_session() as db:
                return [c.to_dict() for c in self.compra_repository.find_all(db, include_inactive)]

    def get(self, compra_id: int) -> Dict[str, Any]:
        with service_errors("buscar a compra"):
            with get_db_session() as db:
                return self._get_or_404(db, compra_id).to_dict()

    def subscribe(self, callback: Callback, include_inactive: bool = False) -> Subscription:
        return self.feed.subscribe(callback, include_inactive)

    def add(self, data: Any, user=None) -> Dict[str, Any]:
        validated = validate_payload(schemas.CompraSchema, data).unwrap()
        with service_errors("registrar a compra"):
            with get_db_session() as db:
                fornecedor = db.get(Fornecedor, validated['fornecedor_id'])
                if fornecedor is None:
                    raise NotFoundError(f"Fornecedor com ID {validated['fornecedor_id']} não encontrado.")
                if db.get(ContaBancaria, validated['conta_bancaria_id']) is None:
                    raise NotFoundError(f"Conta bancária com ID {validated['conta_bancaria_id']} não encontrada.")

                compra = Compra(
                    **validated,
                    registrado_por=user.actor_stamp() if user is not None else None,
                    status='ativo',
                    created_at=datetime.now(timezone.utc),
                )
                self.compra_repository.add(db, compra)

                if compra.condicao_pagamento == CONDICAO_A_PRAZO:
                    self._gerar_parcelas(db, compra)
                result = compra.to_dict()

        logger.info(f"Compra {result['id']} registrada (NF {result['nota_fiscal']}, {result['condicao_pagamento']}).")
        self.feed.publish()
        if result['condicao_pagamento'] == CONDICAO_A_PRAZO and self.conta_pagar_service is not None:
            self.conta_pagar_service.feed.publish()
        return result

    def update(self, compra_id: int, data: Any) -> Dict[str, Any]:
        with service_errors("atualizar a compra"):
            with get_db_session() as db:
                compra = self._get_or_404(db, compra_id, for_update=True)
                changes = validate_partial(schemas.CompraSchema, compra.to_dict(), data).unwrap()
                self.compra_repository.update(db, compra, changes)
                result = compra.to_dict()
        self.feed.publish()
        return result

    def set_status(self, compra_id: int, status: str) -> Dict[str, Any]:
        if status not in ('ativo', 'inativo'):
            raise ValidationError("Status inválido. Valores aceitos: ativo, inativo.")
        with service_errors("alterar o status da compra"):
            with get_db_session() as db:
                compra = self._get_or_404(db, compra_id, for_update=True)
                self.compra_repository.update(db, compra, {'status': status})
                result = compra.to_dict()
        self.feed.publish()
        return result

    def _gerar_parcelas(self, db, compra: Compra) -> None:
        total = compra.numero_parcelas
        vencimentos = datas_vencimento(compra.data_primeiro_vencimento, total)
        for indice, valor in enumerate(dividir_parcelas(compra.valor_total, total)):
            db.add(ContaAPagar(
                compra_id=compra.id,
                fornecedor_id=compra.fornecedor_id,
                descricao=f"Compra NF {compra.nota_fiscal} - parcela {indice + 1}/{total}",
                valor=valor,
                parcela=f"{indice + 1}/{total}",
                data_emissao=compra.data,
                data_vencimento=vencimentos[indice],
                status=STATUS_PENDENTE,
            ))
        db.flush()
        logger.debug(f"{total} parcelas a pagar geradas para a compra {compra.id}.")

    def _get_or_404(self, db, compra_id: int, for_update: bool = False) -> Compra:
        compra = self.compra_repository.find_by_id(db, compra_id, for_update=for_update)
        if compra is None:
            raise NotFoundError(f"Compra com ID {compra_id} não encontrada.")
        return compra
