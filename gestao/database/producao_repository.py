# gestao/database/producao_repository.py
# Compras, abates, produções e lotes.

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from .base_repository import BaseRepository
from gestao.domain.compra import Compra
from gestao.domain.producao import Abate, Producao, Lote, STATUS_CANCELADO


class _NewestFirstRepository(BaseRepository):
    """Listagem por `data` decrescente, filtrando inativos quando pedido."""
    natural_key = 'data'

    def find_all(self, db: Session, include_inactive: bool = False) -> List:
        def _query():
            stmt = select(self.model).order_by(self.model.data.desc(), self.model.id.desc())
            if not include_inactive and self.inactive_status:
                stmt = stmt.where(self.model.status != self.inactive_status)
            return list(db.scalars(stmt).all())
        return self._run(f"listar {self.model.__name__}", _query)


class CompraRepository(_NewestFirstRepository):
    model = Compra


class AbateRepository(_NewestFirstRepository):
    model = Abate
    inactive_status = STATUS_CANCELADO


class ProducaoRepository(_NewestFirstRepository):
    model = Producao


class LoteRepository(BaseRepository[Lote]):
    model = Lote
    natural_key = 'codigo'

    def find_by_producao(self, db: Session, producao_id: int) -> List[Lote]:
        return self._run(
            "buscar lotes da produção",
            lambda: list(db.scalars(select(Lote).where(Lote.producao_id == producao_id).order_by(Lote.id)).all()),
        )
