# gestao/domain/estoque.py
# Registro de auditoria das movimentações de estoque (append-only).

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column

from gestao.database.base import Base, SerializableMixin

TIPO_ENTRADA = 'entrada'
TIPO_SAIDA = 'saida'
TIPOS_MOVIMENTACAO = (TIPO_ENTRADA, TIPO_SAIDA)


class MovimentacaoEstoque(SerializableMixin, Base):
    """Uma linha por alteração de quantidade de produto. Nunca é atualizada nem removida."""
    __tablename__ = 'movimentacoes_estoque'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    produto_id: Mapped[int] = mapped_column(ForeignKey('produtos.id'), nullable=False, index=True)
    produto_nome: Mapped[str] = mapped_column(Text, nullable=False)
    quantidade: Mapped[float] = mapped_column(Numeric(15, 4, asdecimal=False), nullable=False)
    tipo: Mapped[str] = mapped_column(String(10), nullable=False)
    motivo: Mapped[Optional[str]] = mapped_column(Text)
    venda_id: Mapped[Optional[int]] = mapped_column(ForeignKey('vendas.id'), index=True)
    producao_id: Mapped[Optional[int]] = mapped_column(ForeignKey('producoes.id'), index=True)
    registrado_por: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    data: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False, index=True)
