# gestao/domain/user.py
from datetime import datetime, timezone
import bcrypt
from typing import Optional, Dict, Any, List
from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship, Mapped, mapped_column

from gestao.database.base import Base
from gestao.utils.logger import logger

MODULOS = (
    'clientes', 'fornecedores', 'produtos', 'funcionarios', 'cargos', 'usuarios',
    'permissoes', 'compras', 'abates', 'producao', 'vendas', 'estoque',
    'financeiro', 'relatorios', 'metas', 'settings',
)
ACOES = ('ler', 'criar', 'editar', 'inativar')


class Role(Base):
    """
    Perfil de acesso: matriz ordenada de {modulo, acoes}.
    Única entidade com exclusão física.
    """
    __tablename__ = 'roles'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    descricao: Mapped[Optional[str]] = mapped_column(Text)
    permissoes: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'nome': self.nome,
            'descricao': self.descricao,
            'permissoes': list(self.permissoes or []),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Role(id={self.id}, nome='{self.nome}')>"


class Usuario(Base):
    """
    Usuário da aplicação como modelo ORM.
    """
    __tablename__ = 'usuarios'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role_id: Mapped[Optional[int]] = mapped_column(ForeignKey('roles.id'), index=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='ativo', nullable=False)
    dashboard_layout: Mapped[Optional[List[Any]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    role: Mapped[Optional[Role]] = relationship(lazy="joined")

    @property
    def is_active(self) -> bool:
        return self.status == 'ativo'

    def set_password(self, password: str):
        """Hashes the given password and sets the password_hash."""
        if not password:
            self.password_hash = ""
            logger.warning(f"Tentativa de definir senha vazia para usuário {self.email}")
            return
        salt = bcrypt.gensalt()
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def verify_password(self, password: str) -> bool:
        """Verifies the given password against the stored hash."""
        if not self.password_hash or not password:
            logger.debug(f"Verificação de senha falhou para usuário {self.email}: hash ou senha ausente.")
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError as e:
            logger.error(f"Erro ao verificar senha para usuário {self.email}: {e}. Hash possivelmente corrompido.")
            return False

    def update_last_login(self):
        self.last_login = datetime.now(timezone.utc)

    def actor_stamp(self) -> Dict[str, Any]:
        """Carimbo de autoria gravado em movimentações, vendas e demais registros."""
        return {'uid': self.id, 'nome': self.nome}

    def to_dict(self, include_hash: bool = False) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'nome': self.nome,
            'email': self.email,
            'role_id': self.role_id,
            'role_nome': self.role.nome if self.role else None,
            'is_admin': self.is_admin,
            'status': self.status,
            'dashboard_layout': self.dashboard_layout,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_login': self.last_login.isoformat() if self.last_login else None,
        }
        if include_hash:
            data['password_hash'] = self.password_hash
        return data

    def __repr__(self):
        return f"<Usuario(id={self.id}, email='{self.email}', role_id={self.role_id})>"
