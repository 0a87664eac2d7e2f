# gestao/database/financeiro_repository.py
# Contas a pagar e a receber, ordenadas por vencimento.

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .base_repository import BaseRepository
from gestao.domain.financeiro import ContaAPagar, ContaAReceber


class ContaAPagarRepository(BaseRepository[ContaAPagar]):
    model = ContaAPagar
    natural_key = 'data_vencimento'

    def find_all(self, db: Session, include_inactive: bool = True, status: Optional[str] = None) -> List[ContaAPagar]:
        def _query():
            stmt = select(ContaAPagar).order_by(ContaAPagar.data_vencimento.asc(), ContaAPagar.id.asc())
            if status:
                stmt = stmt.where(ContaAPagar.status == status)
            return list(db.scalars(stmt).all())
        return self._run("listar contas a pagar", _query)


class ContaAReceberRepository(BaseRepository[ContaAReceber]):
    model = ContaAReceber
    natural_key = 'data_vencimento'

    def find_all(self, db: Session, include_inactive: bool = True, status: Optional[str] = None) -> List[ContaAReceber]:
        def _query():
            stmt = select(ContaAReceber).order_by(ContaAReceber.data_vencimento.asc(), ContaAReceber.id.asc())
            if status:
                stmt = stmt.where(ContaAReceber.status == status)
            return list(db.scalars(stmt).all())
        return self._run("listar contas a receber", _query)

