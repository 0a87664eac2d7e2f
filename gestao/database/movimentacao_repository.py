# gestao/database/movimentacao_repository.py
# Histórico de movimentações de estoque.

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .base_repository import BaseRepository
from gestao.domain.estoque import MovimentacaoEstoque
from gestao.utils.logger import logger


class MovimentacaoRepository(BaseRepository[MovimentacaoEstoque]):
    model = MovimentacaoEstoque
    natural_key = 'data'

    def find_history(self, db: Session, produto_id: Optional[int] = None, limit: Optional[int] = None) -> List[MovimentacaoEstoque]:
        """Movimentações da mais recente para a mais antiga, opcionalmente de um único produto."""
        logger.debug(f"ORM: Buscando histórico de movimentações (produto_id={produto_id}, limit={limit})")

        def _query():
            stmt = select(MovimentacaoEstoque).order_by(MovimentacaoEstoque.data.desc(), MovimentacaoEstoque.id.desc())
            if produto_id is not None:
                stmt = stmt.where(MovimentacaoEstoque.produto_id == produto_id)
            if limit:
                stmt = stmt.limit(limit)
            return list(db.scalars(stmt).all())
        return self._run("buscar histórico de movimentações", _query)

