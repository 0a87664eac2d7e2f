# gestao/database/venda_repository.py
# Consultas de vendas e itens.

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from .base_repository import BaseRepository
from gestao.domain.venda import Venda
from gestao.domain import nfe as nfe_states
from gestao.utils.logger import logger


class VendaRepository(BaseRepository[Venda]):
    model = Venda
    natural_key = 'data'

    def find_all(self, db: Session, include_inactive: bool = True) -> List[Venda]:
        """Vendas da mais recente para a mais antiga."""
        return self._run(
            "listar vendas",
            lambda: list(db.scalars(select(Venda).order_by(Venda.data.desc(), Venda.id.desc())).all()),
        )

    def find_pending_nfe(self, db: Session) -> List[Venda]:
        """
        Vendas sem sub-registro fiscal ou com status ainda não final.
        O filtro do status fica em Python porque o campo vive dentro de uma coluna JSON.
        """
        logger.debug("ORM: Buscando vendas com NF-e pendente de sincronização.")
        vendas = self._run("buscar vendas com NF-e pendente", lambda: list(db.scalars(select(Venda).order_by(Venda.id)).all()))
        pendentes = []
        for venda in vendas:
            status = (venda.nfe or {}).get('status') or nfe_states.NAO_EMITIDA
            if status in nfe_states.ESTADOS_NAO_FINAIS:
                pendentes.append(venda)
        return pendentes
