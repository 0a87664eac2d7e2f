# gestao/domain/cadastros.py
# Modelos ORM dos cadastros básicos: unidades, categorias, cargos, clientes,
# fornecedores, funcionários, contas bancárias e metas de produção.

from datetime import datetime, timezone
from typing import Optional, Dict, Any, TYPE_CHECKING
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gestao.database.base import Base, SerializableMixin

if TYPE_CHECKING:
    from .produto import Produto

STATUS_ATIVO = 'ativo'
STATUS_INATIVO = 'inativo'


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Unidade(SerializableMixin, Base):
    __tablename__ = 'unidades'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome: Mapped[str] = mapped_column(String(120), nullable=False)
    sigla: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ATIVO, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Categoria(SerializableMixin, Base):
    __tablename__ = 'categorias'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome: Mapped[str] = mapped_column(String(120), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ATIVO, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Cargo(SerializableMixin, Base):
    __tablename__ = 'cargos'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome: Mapped[str] = mapped_column(String(120), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ATIVO, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Cliente(SerializableMixin, Base):
    """Cliente (pessoa física ou jurídica). Endereço armazenado como JSON."""
    __tablename__ = 'clientes'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome_razao_social: Mapped[str] = mapped_column(Text, nullable=False)
    tipo_pessoa: Mapped[str] = mapped_column(String(10), nullable=False)
    cpf_cnpj: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    inscricao_estadual: Mapped[Optional[str]] = mapped_column(String(30))
    telefone: Mapped[Optional[str]] = mapped_column(String(30))
    email: Mapped[Optional[str]] = mapped_column(Text)
    endereco: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    registrado_por: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ATIVO, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Fornecedor(SerializableMixin, Base):
    __tablename__ = 'fornecedores'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome_razao_social: Mapped[str] = mapped_column(Text, nullable=False)
    nome_fantasia: Mapped[Optional[str]] = mapped_column(Text)
    tipo_pessoa: Mapped[str] = mapped_column(String(10), nullable=False)
    cpf_cnpj: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    inscricao_estadual: Mapped[Optional[str]] = mapped_column(String(30))
    telefone: Mapped[Optional[str]] = mapped_column(String(30))
    email: Mapped[Optional[str]] = mapped_column(Text)
    endereco: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    dados_bancarios: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    registrado_por: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ATIVO, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Funcionario(SerializableMixin, Base):
    """Funcionário contratado como PJ: guarda CNPJ da empresa e CPF do titular."""
    __tablename__ = 'funcionarios'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    razao_social: Mapped[str] = mapped_column(Text, nullable=False)
    cnpj: Mapped[str] = mapped_column(String(20), nullable=False)
    nome_completo: Mapped[str] = mapped_column(Text, nullable=False)
    cpf: Mapped[str] = mapped_column(String(20), nullable=False)
    contato: Mapped[str] = mapped_column(String(30), nullable=False)
    cargo_id: Mapped[int] = mapped_column(ForeignKey('cargos.id'), nullable=False, index=True)
    banco: Mapped[str] = mapped_column(String(80), nullable=False)
    agencia: Mapped[str] = mapped_column(String(20), nullable=False)
    conta: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ATIVO, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    cargo: Mapped[Optional[Cargo]] = relationship(lazy='joined')

    def to_dict(self) -> Dict[str, Any]:
        data = self.column_values()
        data['cargo_nome'] = self.cargo.nome if self.cargo else None
        return data


class ContaBancaria(SerializableMixin, Base):
    """Conta bancária ou caixa. saldo_atual só muda via baixas de contas a pagar/receber."""
    __tablename__ = 'contas_bancarias'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome_conta: Mapped[str] = mapped_column(Text, nullable=False)
    banco: Mapped[str] = mapped_column(String(80), nullable=False)
    agencia: Mapped[Optional[str]] = mapped_column(String(20))
    conta: Mapped[Optional[str]] = mapped_column(String(30))
    tipo: Mapped[str] = mapped_column(String(30), nullable=False)
    saldo_inicial: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), default=0, nullable=False)
    saldo_atual: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), default=0, nullable=False)
    registrado_por: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(String(20), default='ativa', nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Meta(SerializableMixin, Base):
    """Meta de rendimento de um produto por animal abatido."""
    __tablename__ = 'metas'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    produto_id: Mapped[int] = mapped_column(ForeignKey('produtos.id'), nullable=False, index=True)
    meta_por_animal: Mapped[float] = mapped_column(Numeric(15, 4, asdecimal=False), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ATIVO, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    produto: Mapped[Optional["Produto"]] = relationship(lazy='joined')

    def to_dict(self) -> Dict[str, Any]:
        data = self.column_values()
        data['produto_nome'] = self.produto.nome if self.produto else None
        data['unidade'] = self.produto.unidade.sigla if self.produto and self.produto.unidade else None
        return data
