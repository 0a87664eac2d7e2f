# gestao/domain/compra.py
# Compras de fornecedores (nota de entrada).

from datetime import date, datetime, timezone
from typing import Optional, Dict, Any, List
from sqlalchemy import Integer, String, Text, Date, DateTime, ForeignKey, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column

from gestao.database.base import Base, SerializableMixin


class Compra(SerializableMixin, Base):
    __tablename__ = 'compras'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    fornecedor_id: Mapped[int] = mapped_column(ForeignKey('fornecedores.id'), nullable=False, index=True)
    nota_fiscal: Mapped[str] = mapped_column(String(60), nullable=False)
    data: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    itens: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False)
    valor_total: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), nullable=False)
    conta_bancaria_id: Mapped[int] = mapped_column(ForeignKey('contas_bancarias.id'), nullable=False)
    condicao_pagamento: Mapped[str] = mapped_column(String(10), nullable=False)
    numero_parcelas: Mapped[Optional[int]] = mapped_column(Integer)
    data_primeiro_vencimento: Mapped[Optional[date]] = mapped_column(Date)
    registrado_por: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(String(20), default='ativo', nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
