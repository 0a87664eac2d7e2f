# gestao/services/producao_service.py
# Registro de produção a partir de um abate: entrada em estoque, lotes gerados e
# finalização do abate na mesma transação.

from datetime import datetime, timezone
from typing import Any, Dict, List

from gestao.database import get_db_session
from gestao.database.producao_repository import ProducaoRepository, LoteRepository
from gestao.domain.cadastros import Funcionario
from gestao.domain.estoque import TIPO_ENTRADA
from gestao.domain.producao import Abate, Producao, Lote, STATUS_AGUARDANDO, STATUS_FINALIZADO
from gestao.domain import schemas
from gestao.domain.validation import validate_payload, validate_partial
from gestao.services.crud_service import service_errors
from gestao.services.estoque_service import lock_produto, aplicar_movimentacao
from gestao.services.subscriptions import ChangeFeed, Subscription, Callback
from gestao.utils.logger import logger
from gestao.api.errors import BusinessRuleError, NotFoundError, ValidationError


class ProducaoService:
    def __init__(self, producao_repository: ProducaoRepository, lote_repository: LoteRepository,
                 abate_service=None, produto_service=None):
        self.producao_repository = producao_repository
        self.lote_repository = lote_repository
        self.abate_service = abate_service
        self.produto_service = produto_service
        self.feed = ChangeFeed('producao', self.list)
        logger.info("ProducaoService inicializado (ORM).")

    def list(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        with service_errors("listar produções"):
            with get_db_session() as db:
                return [p.to_dict() for p in self.producao_repository.find_all(db, include_inactive)]

    def get(self, producao_id: int) -> Dict[str, Any]:
        with service_errors("buscar a produção"):
            with get_db_session() as db:
                producao = self._get_or_404(db, producao_id)
                result = producao.to_dict()
                result['lotes_gerados'] = [lote.to_dict() for lote in self.lote_repository.find_by_producao(db, producao_id)]
                return result

    def subscribe(self, callback: Callback, include_inactive: bool = False) -> Subscription:
        return self.feed.subscribe(callback, include_inactive)

    def registrar_producao(self, data: Any, user=None) -> Dict[str, Any]:
        """
        Só abates em 'Aguardando Processamento' podem gerar produção. Itens com quantidade
        positiva entram no estoque com movimentação 'Produção <lote>'; o abate vira 'Finalizado'.
        """
        validated = validate_payload(schemas.ProducaoSchema, data).unwrap()
        actor = user.actor_stamp() if user is not None else None
        lotes_gerados = validated.pop('lotes_gerados')

        with service_errors("registrar a produção"):
            with get_db_session() as db:
                abate = db.get(Abate, validated['abate_id'], with_for_update=True)
                if abate is None:
                    raise NotFoundError("O lote de abate não foi encontrado.")
                if abate.status != STATUS_AGUARDANDO:
                    raise BusinessRuleError("Este abate já foi finalizado ou cancelado.")
                if db.get(Funcionario, validated['responsavel_id']) is None:
                    raise NotFoundError(f"Funcionário com ID {validated['responsavel_id']} não encontrado.")

                lote = validated.get('lote') or abate.lote_id
                producao = Producao(
                    **dict(validated, lote=lote),
                    registrado_por=actor,
                    status='ativo',
                    created_at=datetime.now(timezone.utc),
                )
                self.producao_repository.add(db, producao)

                for item in validated['produtos']:
                    if item['quantidade'] > 0:
                        produto = lock_produto(db, item['produto_id'])
                        aplicar_movimentacao(
                            db, produto, item['quantidade'], TIPO_ENTRADA, f"Produção {lote}", actor,
                            producao_id=producao.id,
                        )

                for lote_gerado in lotes_gerados:
                    db.add(Lote(**lote_gerado, producao_id=producao.id, status='ativo'))

                abate.status = STATUS_FINALIZADO
                db.flush()
                result = producao.to_dict()
                result['lotes_gerados'] = [l.to_dict() for l in self.lote_repository.find_by_producao(db, producao.id)]

        logger.info(f"Produção {result['id']} registrada para o abate {result['abate_id']} (lote {lote}).")
        self._notify()
        return result

    def update(self, producao_id: int, data: Any) -> Dict[str, Any]:
        """Atualiza dados descritivos. Itens e quantidades não são editáveis após o registro."""
        if isinstance(data, dict) and ({'produtos', 'abate_id', 'lotes_gerados'} & set(data)):
            raise ValidationError("Itens, abate e lotes de uma produção registrada não podem ser alterados.")
        with service_errors("atualizar a produção"):
            with get_db_session() as db:
                producao = self._get_or_404(db, producao_id, for_update=True)
                changes = validate_partial(schemas.ProducaoSchema, producao.to_dict(), data).unwrap()
                self.producao_repository.update(db, producao, changes)
                result = producao.to_dict()
        self.feed.publish()
        return result

    def set_status(self, producao_id: int, status: str) -> Dict[str, Any]:
        if status not in ('ativo', 'inativo'):
            raise ValidationError("Status inválido. Valores aceitos: ativo, inativo.")
        with service_errors("alterar o status da produção"):
            with get_db_session() as db:
                producao = self._get_or_404(db, producao_id, for_update=True)
                self.producao_repository.update(db, producao, {'status': status})
                result = producao.to_dict()
        self.feed.publish()
        return result

    def _get_or_404(self, db, producao_id: int, for_update: bool = False) -> Producao:
        producao = self.producao_repository.find_by_id(db, producao_id, for_update=for_update)
        if producao is None:
            raise NotFoundError(f"Produção com ID {producao_id} não encontrada.")
        return producao

    def _notify(self):
        self.feed.publish()
        if self.abate_service is not None:
            self.abate_service.feed.publish()
        if self.produto_service is not None:
            self.produto_service.feed.publish()
