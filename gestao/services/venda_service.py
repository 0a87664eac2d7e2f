# gestao/services/venda_service.py
# Registro de vendas: validação de estoque, venda, baixa de estoque com auditoria e
# conta a receber (a prazo) em uma única transação.

from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from gestao.database import get_db_session
from gestao.database.venda_repository import VendaRepository
from gestao.domain.cadastros import Cliente
from gestao.domain.estoque import TIPO_SAIDA
from gestao.domain.produto import Produto
from gestao.domain.financeiro import ContaAReceber, STATUS_PENDENTE as CONTA_PENDENTE
from gestao.domain.venda import Venda, ItemVenda, CONDICAO_A_PRAZO, STATUS_PAGA, STATUS_PENDENTE
from gestao.domain import nfe as nfe_states
from gestao.domain import schemas
from gestao.domain.validation import validate_payload
from gestao.services.crud_service import service_errors
from gestao.services.estoque_service import aplicar_movimentacao
from gestao.services.subscriptions import ChangeFeed, Subscription, Callback
from gestao.utils.logger import logger
from gestao.api.errors import (
    BusinessRuleError, InsufficientStockError, NotFoundError, ValidationError,
)


class VendaService:
    """
    Serviço de vendas. Os serviços de produtos e contas a receber (opcionais) têm seus
    feeds republicados depois de cada venda confirmada.
    """

    def __init__(self, venda_repository: VendaRepository, produto_service=None, conta_receber_service=None):
        self.venda_repository = venda_repository
        self.produto_service = produto_service
        self.conta_receber_service = conta_receber_service
        self.feed = ChangeFeed('vendas', lambda _include_inactive: self.list())
        logger.info("VendaService inicializado (ORM).")

    # --- Leitura ---

    def list(self) -> List[Dict[str, Any]]:
        with service_errors("listar vendas"):
            with get_db_session() as db:
                return [venda.to_dict() for venda in self.venda_repository.find_all(db)]

    def get(self, venda_id: int) -> Dict[str, Any]:
        with service_errors("buscar a venda"):
            with get_db_session() as db:
                return self._get_or_404(db, venda_id).to_dict()

    def subscribe(self, callback: Callback) -> Subscription:
        return self.feed.subscribe(callback)

    # --- Transação de venda ---

    def registrar_venda(self, data: Any, user=None) -> Dict[str, Any]:
        """
        Registra a venda atomicamente. Qualquer falha (produto inexistente, estoque
        insuficiente, erro de banco) desfaz tudo: nenhuma venda, baixa ou conta fica gravada.
        """
        validated = validate_payload(schemas.VendaSchema, data).unwrap()
        actor = user.actor_stamp() if user is not None else None

        with service_errors("registrar a venda"):
            with get_db_session() as db:
                cliente = db.get(Cliente, validated['cliente_id'])
                if cliente is None:
                    raise NotFoundError(f"Cliente com ID {validated['cliente_id']} não encontrado.")
                cliente_nome = validated.get('cliente_nome') or cliente.nome_razao_social

                # 1. Bloqueia os produtos e valida o estoque do total pedido por produto
                solicitado: "OrderedDict[int, float]" = OrderedDict()
                nomes: Dict[int, str] = {}
                for item in validated['produtos']:
                    solicitado[item['produto_id']] = solicitado.get(item['produto_id'], 0) + item['quantidade']
                    nomes.setdefault(item['produto_id'], item['produto_nome'])

                produtos = {}
                for produto_id in sorted(solicitado):
                    produto = db.get(Produto, produto_id, with_for_update=True)
                    if produto is None:
                        raise NotFoundError(f"Produto \"{nomes[produto_id]}\" não encontrado no estoque.")
                    produtos[produto_id] = produto

                for produto_id, quantidade in solicitado.items():
                    disponivel = produtos[produto_id].quantidade or 0
                    if disponivel < quantidade:
                        raise InsufficientStockError(
                            nomes[produto_id], disponivel, quantidade,
                            message=f"Estoque insuficiente para \"{nomes[produto_id]}\". Disponível: {disponivel}",
                        )

                # 2. Venda
                condicao = validated['condicao_pagamento']
                venda = Venda(
                    cliente_id=cliente.id,
                    cliente_nome=cliente_nome,
                    data=validated.get('data') or datetime.now(timezone.utc),
                    valor_total=validated['valor_total'],
                    condicao_pagamento=condicao,
                    metodo_pagamento=validated['metodo_pagamento'],
                    conta_bancaria_id=validated.get('conta_bancaria_id'),
                    numero_parcelas=validated.get('numero_parcelas'),
                    taxa_cartao=validated.get('taxa_cartao'),
                    valor_final=validated.get('valor_final'),
                    data_vencimento=validated.get('data_vencimento'),
                    status=STATUS_PENDENTE if condicao == CONDICAO_A_PRAZO else STATUS_PAGA,
                    registrado_por=actor,
                    itens=[ItemVenda(**item) for item in validated['produtos']],
                )
                db.add(venda)
                db.flush()

                # 3. Baixa de estoque com movimentação por item
                for item in validated['produtos']:
                    aplicar_movimentacao(
                        db, produtos[item['produto_id']], item['quantidade'], TIPO_SAIDA,
                        f"Venda para {cliente_nome} (Ref: {venda.id})", actor, venda_id=venda.id,
                    )

                # 4. Conta a receber
                if condicao == CONDICAO_A_PRAZO:
                    db.add(ContaAReceber(
                        venda_id=venda.id,
                        cliente_id=cliente.id,
                        cliente_nome=cliente_nome,
                        valor=venda.valor_a_receber,
                        data_emissao=venda.data.date(),
                        data_vencimento=validated['data_vencimento'],
                        status=CONTA_PENDENTE,
                    ))

                db.flush()
                result = venda.to_dict()

        logger.info(f"Venda {result['id']} registrada para '{result['cliente_nome']}' "
                    f"({len(result['produtos'])} itens, condição {result['condicao_pagamento']}).")
        self._notify(condicao == CONDICAO_A_PRAZO)
        return result

    # --- Atualizações ---

    def set_status(self, venda_id: int, status: str) -> Dict[str, Any]:
        if status not in (STATUS_PAGA, STATUS_PENDENTE):
            raise ValidationError(f"Status inválido. Valores aceitos: {STATUS_PAGA}, {STATUS_PENDENTE}.")
        with service_errors("alterar o status da venda"):
            with get_db_session() as db:
                venda = self._get_or_404(db, venda_id, for_update=True)
                self.venda_repository.update(db, venda, {'status': status})
                result = venda.to_dict()
        self.feed.publish()
        return result

    def registrar_nfe(self, venda_id: int, nfe_data: Any, do_provedor: bool = False) -> Dict[str, Any]:
        """
        Grava o sub-registro fiscal da venda. O status pode vir no formato interno ou no
        do provedor; a transição precisa ser permitida pela máquina de estados da NF-e.

        Com `do_provedor=True` (dados lidos do Focus NFe) uma venda ainda sem registro é
        tratada como já enviada, pois a nota existe no provedor.
        """
        if not isinstance(nfe_data, dict) or not nfe_data.get('status'):
            raise ValidationError("O sub-registro da NF-e deve conter um 'status'.")
        novo_status = nfe_data['status']
        if novo_status not in nfe_states.ESTADOS:
            novo_status = nfe_states.status_from_provider(novo_status)

        with service_errors("registrar os dados da NF-e"):
            with get_db_session() as db:
                venda = self._get_or_404(db, venda_id, for_update=True)
                atual = (venda.nfe or {}).get('status') or nfe_states.NAO_EMITIDA
                origem = nfe_states.PROCESSANDO if do_provedor and atual == nfe_states.NAO_EMITIDA else atual
                if not nfe_states.can_transition(origem, novo_status):
                    raise BusinessRuleError(f"Transição de NF-e inválida: {atual} -> {novo_status}.")
                registro = {**(venda.nfe or {}), **nfe_data, 'status': novo_status}
                registro.setdefault('id', str(venda.id))
                self.venda_repository.update(db, venda, {'nfe': registro})
                result = venda.to_dict()
        logger.info(f"NF-e da venda {venda_id}: {atual} -> {novo_status}.")
        self.feed.publish()
        return result

    def _get_or_404(self, db, venda_id: int, for_update: bool = False) -> Venda:
        venda = self.venda_repository.find_by_id(db, venda_id, for_update=for_update)
        if venda is None:
            raise NotFoundError(f"Venda com ID {venda_id} não encontrada.")
        return venda

    def _notify(self, a_prazo: bool):
        self.feed.publish()
        if self.produto_service is not None:
            self.produto_service.feed.publish()
        if a_prazo and self.conta_receber_service is not None:
            self.conta_receber_service.feed.publish()
