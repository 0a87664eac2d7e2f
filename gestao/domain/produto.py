# gestao/domain/produto.py
# Modelo ORM de Produto (venda, uso interno ou matéria-prima).

from datetime import datetime, timezone
from typing import Optional, Dict, Any, TYPE_CHECKING
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gestao.database.base import Base, SerializableMixin

if TYPE_CHECKING:
    from .cadastros import Unidade, Categoria

TIPO_VENDA = 'VENDA'
TIPO_USO_INTERNO = 'USO_INTERNO'
TIPO_MATERIA_PRIMA = 'MATERIA_PRIMA'
TIPOS_PRODUTO = (TIPO_VENDA, TIPO_USO_INTERNO, TIPO_MATERIA_PRIMA)


class Produto(SerializableMixin, Base):
    """
    Produto do estoque.
    `quantidade` só é alterada pelas transações de movimentação, venda e produção.
    """
    __tablename__ = 'produtos'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tipo_produto: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    nome: Mapped[str] = mapped_column(Text, nullable=False)
    codigo: Mapped[Optional[str]] = mapped_column(String(60))
    sku: Mapped[Optional[str]] = mapped_column(String(60))
    unidade_id: Mapped[Optional[int]] = mapped_column(ForeignKey('unidades.id'))
    categoria_id: Mapped[Optional[int]] = mapped_column(ForeignKey('categorias.id'))
    preco_venda: Mapped[Optional[float]] = mapped_column(Numeric(15, 2, asdecimal=False))
    custo_unitario: Mapped[float] = mapped_column(Numeric(15, 4, asdecimal=False), default=0, nullable=False)
    quantidade: Mapped[float] = mapped_column(Numeric(15, 4, asdecimal=False), default=0, nullable=False)
    ncm: Mapped[Optional[str]] = mapped_column(String(8))
    cfop: Mapped[Optional[str]] = mapped_column(String(4))
    cest: Mapped[Optional[str]] = mapped_column(String(10))
    status: Mapped[str] = mapped_column(String(20), default='ativo', nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    unidade: Mapped[Optional["Unidade"]] = relationship(lazy='joined')
    categoria: Mapped[Optional["Categoria"]] = relationship(lazy='joined')

    def to_dict(self) -> Dict[str, Any]:
        data = self.column_values()
        data['unidade_nome'] = self.unidade.nome if self.unidade else None
        data['unidade_sigla'] = self.unidade.sigla if self.unidade else None
        data['categoria_nome'] = self.categoria.nome if self.categoria else None
        return data
