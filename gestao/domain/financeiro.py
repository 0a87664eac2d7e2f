# gestao/domain/financeiro.py
# Contas a pagar e a receber.

from datetime import date, datetime, timezone
from typing import Optional
from sqlalchemy import Integer, String, Text, Date, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from gestao.database.base import Base, SerializableMixin

STATUS_PENDENTE = 'Pendente'
STATUS_PAGA = 'Paga'
STATUS_RECEBIDA = 'Recebida'


class ContaAPagar(SerializableMixin, Base):
    """Título a pagar, opcionalmente ligado a um abate ou a uma compra."""
    __tablename__ = 'contas_a_pagar'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    abate_id: Mapped[Optional[int]] = mapped_column(ForeignKey('abates.id'), index=True)
    compra_id: Mapped[Optional[int]] = mapped_column(ForeignKey('compras.id'), index=True)
    fornecedor_id: Mapped[Optional[int]] = mapped_column(ForeignKey('fornecedores.id'))
    descricao: Mapped[str] = mapped_column(Text, nullable=False)
    valor: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), nullable=False)
    parcela: Mapped[Optional[str]] = mapped_column(String(20))
    data_emissao: Mapped[date] = mapped_column(Date, nullable=False)
    data_vencimento: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_PENDENTE, nullable=False, index=True)
    data_pagamento: Mapped[Optional[date]] = mapped_column(Date)
    conta_bancaria_id: Mapped[Optional[int]] = mapped_column(ForeignKey('contas_bancarias.id'))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)


class ContaAReceber(SerializableMixin, Base):
    """Título a receber criado por uma venda a prazo."""
    __tablename__ = 'contas_a_receber'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    venda_id: Mapped[int] = mapped_column(ForeignKey('vendas.id'), nullable=False, index=True)
    cliente_id: Mapped[int] = mapped_column(ForeignKey('clientes.id'), nullable=False)
    cliente_nome: Mapped[Optional[str]] = mapped_column(Text)
    valor: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), nullable=False)
    data_emissao: Mapped[date] = mapped_column(Date, nullable=False)
    data_vencimento: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_PENDENTE, nullable=False, index=True)
    data_recebimento: Mapped[Optional[date]] = mapped_column(Date)
    conta_bancaria_id: Mapped[Optional[int]] = mapped_column(ForeignKey('contas_bancarias.id'))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
