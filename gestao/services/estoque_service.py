# gestao/services/estoque_service.py
# Movimentação de estoque: leitura com lock, validação de saldo e registro de auditoria
# na mesma transação.

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from gestao.database import get_db_session
from gestao.database.cadastro_repositories import ProdutoRepository
from gestao.database.movimentacao_repository import MovimentacaoRepository
from gestao.domain.estoque import MovimentacaoEstoque, TIPO_ENTRADA, TIPO_SAIDA
from gestao.domain.produto import Produto
from gestao.domain import schemas
from gestao.domain.validation import validate_payload
from gestao.services.crud_service import service_errors
from gestao.utils.data_conversion import round_money
from gestao.utils.logger import logger
from gestao.api.errors import InsufficientStockError, NotFoundError, ValidationError


def lock_produto(db: Session, produto_id: int) -> Produto:
    produto = db.get(Produto, produto_id, with_for_update=True)
    if produto is None:
        raise NotFoundError(f"Produto com ID {produto_id} não encontrado.")
    return produto


def aplicar_movimentacao(db: Session, produto: Produto, quantidade: float, tipo: str, motivo: str,
                         registrado_por: Optional[Dict[str, Any]], venda_id: Optional[int] = None,
                         producao_id: Optional[int] = None) -> MovimentacaoEstoque:
    """
    Altera a quantidade de um produto já bloqueado e acrescenta a movimentação.
    Saída que deixaria o saldo negativo levanta InsufficientStockError antes de qualquer escrita.
    O commit (ou rollback) é do chamador.
    """
    if tipo not in (TIPO_ENTRADA, TIPO_SAIDA):
        raise ValidationError(f"Tipo de movimentação inválido: {tipo}.")
    atual = produto.quantidade or 0
    nova = atual + quantidade if tipo == TIPO_ENTRADA else atual - quantidade
    if tipo == TIPO_SAIDA and nova < 0:
        raise InsufficientStockError(produto.nome, atual, quantidade)

    produto.quantidade = round(nova, 4)
    movimentacao = MovimentacaoEstoque(
        produto_id=produto.id,
        produto_nome=produto.nome,
        quantidade=quantidade,
        tipo=tipo,
        motivo=motivo,
        registrado_por=registrado_por,
        venda_id=venda_id,
        producao_id=producao_id,
        data=datetime.now(timezone.utc),
    )
    db.add(movimentacao)
    logger.debug(f"Movimentação '{tipo}' de {quantidade} em '{produto.nome}': {atual} -> {produto.quantidade}.")
    return movimentacao


class EstoqueService:
    """
    Serviço de estoque. `produto_service` (opcional) é notificado para republicar o
    feed de produtos depois de cada movimentação confirmada.
    """

    def __init__(self, produto_repository: ProdutoRepository, movimentacao_repository: MovimentacaoRepository,
                 produto_service=None):
        self.produto_repository = produto_repository
        self.movimentacao_repository = movimentacao_repository
        self.produto_service = produto_service
        logger.info("EstoqueService inicializado (ORM).")

    def registrar_movimentacao(self, data: Any, user=None) -> Dict[str, Any]:
        validated = validate_payload(schemas.MovimentacaoSchema, data).unwrap()
        actor = user.actor_stamp() if user is not None else None
        with service_errors("registrar a movimentação de estoque"):
            with get_db_session() as db:
                produto = lock_produto(db, validated['produto_id'])
                movimentacao = aplicar_movimentacao(
                    db, produto, validated['quantidade'], validated['tipo'], validated['motivo'], actor,
                )
                db.flush()
                result = {'movimentacao': movimentacao.to_dict(), 'produto': produto.to_dict()}
        logger.info(f"Movimentação {result['movimentacao']['id']} registrada: {validated['tipo']} de "
                    f"{validated['quantidade']} em '{result['produto']['nome']}' (saldo {result['produto']['quantidade']}).")
        self._notify()
        return result

    def historico(self, produto_id: Optional[int] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        with service_errors("buscar o histórico de movimentações"):
            with get_db_session() as db:
                return [m.to_dict() for m in self.movimentacao_repository.find_history(db, produto_id, limit)]

    def resumo(self) -> Dict[str, Any]:
        """Totais do estoque ativo: itens, quantidade e valor a custo."""
        with service_errors("calcular o resumo do estoque"):
            with get_db_session() as db:
                produtos = self.produto_repository.find_all(db)
                return {
                    'total_produtos': len(produtos),
                    'quantidade_total': round(sum(p.quantidade or 0 for p in produtos), 4),
                    'valor_custo_total': round_money(sum((p.quantidade or 0) * (p.custo_unitario or 0) for p in produtos)),
                    'sem_estoque': [p.id for p in produtos if (p.quantidade or 0) <= 0],
                }

    def _notify(self):
        if self.produto_service is not None:
            self.produto_service.feed.publish()
