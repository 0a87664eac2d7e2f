# gestao/domain/venda.py
# Modelos ORM de Venda e seus itens.

from datetime import date, datetime, timezone
from typing import Optional, Dict, Any, List
from sqlalchemy import Integer, String, Text, Date, DateTime, ForeignKey, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gestao.database.base import Base, SerializableMixin

CONDICAO_A_VISTA = 'A_VISTA'
CONDICAO_A_PRAZO = 'A_PRAZO'

STATUS_PAGA = 'Paga'
STATUS_PENDENTE = 'Pendente'


class ItemVenda(SerializableMixin, Base):
    __tablename__ = 'itens_venda'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    venda_id: Mapped[int] = mapped_column(ForeignKey('vendas.id', ondelete='CASCADE'), nullable=False, index=True)
    produto_id: Mapped[int] = mapped_column(ForeignKey('produtos.id'), nullable=False)
    produto_nome: Mapped[str] = mapped_column(Text, nullable=False)
    quantidade: Mapped[float] = mapped_column(Numeric(15, 4, asdecimal=False), nullable=False)
    preco_unitario: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), nullable=False)
    custo_unitario: Mapped[float] = mapped_column(Numeric(15, 4, asdecimal=False), default=0, nullable=False)

    venda: Mapped["Venda"] = relationship(back_populates="itens")

    def to_dict(self) -> Dict[str, Any]:
        data = self.column_values()
        data.pop('venda_id', None)
        return data


class Venda(SerializableMixin, Base):
    """
    Venda registrada atomicamente junto com a baixa de estoque.
    `nfe` guarda o sub-registro fiscal (status, ref, links, protocolo).
    """
    __tablename__ = 'vendas'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cliente_id: Mapped[int] = mapped_column(ForeignKey('clientes.id'), nullable=False, index=True)
    cliente_nome: Mapped[Optional[str]] = mapped_column(Text)
    data: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False, index=True)
    valor_total: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), nullable=False)
    condicao_pagamento: Mapped[str] = mapped_column(String(10), nullable=False)
    metodo_pagamento: Mapped[str] = mapped_column(String(40), nullable=False)
    conta_bancaria_id: Mapped[Optional[int]] = mapped_column(ForeignKey('contas_bancarias.id'))
    numero_parcelas: Mapped[Optional[int]] = mapped_column(Integer)
    taxa_cartao: Mapped[Optional[float]] = mapped_column(Numeric(7, 2, asdecimal=False))
    valor_final: Mapped[Optional[float]] = mapped_column(Numeric(15, 2, asdecimal=False))
    data_vencimento: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    registrado_por: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    nfe: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    itens: Mapped[List[ItemVenda]] = relationship(
        back_populates="venda",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=ItemVenda.id,
    )

    @property
    def valor_a_receber(self) -> float:
        return self.valor_final if self.valor_final is not None else self.valor_total

    def to_dict(self) -> Dict[str, Any]:
        data = self.column_values()
        data['produtos'] = [item.to_dict() for item in self.itens]
        return data
