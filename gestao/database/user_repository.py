# gestao/database/user_repository.py
# Gerencia operações de banco de dados relacionadas a Usuários e Perfis usando SQLAlchemy ORM.

from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .base_repository import BaseRepository
from gestao.domain.user import Usuario, Role
from gestao.utils.logger import logger
from gestao.api.errors import DatabaseError, BusinessRuleError


class UserRepository(BaseRepository[Usuario]):
    """
    Repositório de usuários. Os métodos esperam que um objeto Session seja passado.
    """
    model = Usuario

    def find_by_email(self, db: Session, email: str) -> Optional[Usuario]:
        """Busca um usuário pelo e-mail (case-insensitive), independente do status."""
        logger.debug(f"ORM: Buscando usuário pelo email '{email}'")
        return self._run(
            "buscar usuário pelo email",
            lambda: db.scalars(select(Usuario).where(func.lower(Usuario.email) == func.lower(email))).first(),
        )

    def add(self, db: Session, user: Usuario) -> Usuario:
        logger.debug(f"ORM: Adicionando usuário '{user.email}' à sessão")
        try:
            db.add(user)
            db.flush()
            logger.info(f"ORM: Usuário '{user.email}' adicionado à sessão (ID: {user.id}). Commit pendente.")
            return user
        except IntegrityError as e:
            logger.warning(f"ORM: Erro de integridade ao adicionar usuário '{user.email}': {e}")
            raise BusinessRuleError(f"E-mail '{user.email}' já está em uso.") from e
        except SQLAlchemyError as e:
            logger.error(f"ORM: Erro de banco de dados ao adicionar usuário '{user.email}': {e}", exc_info=True)
            raise DatabaseError(f"Falha ao adicionar usuário: {e}") from e

    def count_by_role(self, db: Session, role_id: int) -> int:
        return self._run(
            "contar usuários do perfil",
            lambda: db.scalar(select(func.count(Usuario.id)).where(Usuario.role_id == role_id)) or 0,
        )


class RoleRepository(BaseRepository[Role]):
    model = Role

    def find_by_nome(self, db: Session, nome: str) -> Optional[Role]:
        return self._run(
            "buscar perfil pelo nome",
            lambda: db.scalars(select(Role).where(func.lower(Role.nome) == func.lower(nome))).first(),
        )
