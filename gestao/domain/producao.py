# gestao/domain/producao.py
# Abate (lote de animais) e Produção derivada dele.

from datetime import date, datetime, timezone
from typing import Optional, Dict, Any, List
from sqlalchemy import Integer, String, Text, Date, DateTime, ForeignKey, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column

from gestao.database.base import Base, SerializableMixin

STATUS_AGUARDANDO = 'Aguardando Processamento'
STATUS_EM_PROCESSAMENTO = 'Em Processamento'
STATUS_FINALIZADO = 'Finalizado'
STATUS_CANCELADO = 'Cancelado'
STATUS_ABATE = (STATUS_AGUARDANDO, STATUS_EM_PROCESSAMENTO, STATUS_FINALIZADO, STATUS_CANCELADO)


class Abate(SerializableMixin, Base):
    """
    Lote de abate. Nasce em 'Aguardando Processamento' e passa a 'Finalizado'
    quando a produção correspondente é registrada.
    """
    __tablename__ = 'abates'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lote_id: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    data: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    fornecedor_id: Mapped[int] = mapped_column(ForeignKey('fornecedores.id'), nullable=False)
    responsavel_id: Mapped[Optional[int]] = mapped_column(ForeignKey('funcionarios.id'))
    compra_id: Mapped[Optional[int]] = mapped_column(ForeignKey('compras.id'))
    numero_animais: Mapped[int] = mapped_column(Integer, nullable=False)
    custo_por_animal: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), nullable=False)
    custo_total: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), nullable=False)
    condenado: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(30), default=STATUS_AGUARDANDO, nullable=False, index=True)
    registrado_por: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)


class Producao(SerializableMixin, Base):
    __tablename__ = 'producoes'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    data: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    responsavel_id: Mapped[int] = mapped_column(ForeignKey('funcionarios.id'), nullable=False)
    abate_id: Mapped[int] = mapped_column(ForeignKey('abates.id'), nullable=False, index=True)
    lote: Mapped[Optional[str]] = mapped_column(String(40))
    descricao: Mapped[Optional[str]] = mapped_column(Text)
    produtos: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False)
    registrado_por: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(String(20), default='ativo', nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)


class Lote(SerializableMixin, Base):
    """Lote de produto acabado gerado por uma produção."""
    __tablename__ = 'lotes'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    producao_id: Mapped[int] = mapped_column(ForeignKey('producoes.id'), nullable=False, index=True)
    produto_id: Mapped[int] = mapped_column(ForeignKey('produtos.id'), nullable=False, index=True)
    codigo: Mapped[str] = mapped_column(String(60), nullable=False)
    quantidade: Mapped[float] = mapped_column(Numeric(15, 4, asdecimal=False), nullable=False)
    data_producao: Mapped[date] = mapped_column(Date, nullable=False)
    data_validade: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default='ativo', nullable=False)
