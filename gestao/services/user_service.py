# gestao/services/user_service.py
# Gestão de usuários e perfis de acesso usando ORM.

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from gestao.database import get_db_session
from gestao.database.user_repository import UserRepository, RoleRepository
from gestao.domain.user import Usuario, Role
from gestao.domain import schemas
from gestao.domain.validation import validate_payload, validate_partial
from gestao.services.crud_service import service_errors
from gestao.services.subscriptions import ChangeFeed, Subscription, Callback
from gestao.utils.logger import logger
from gestao.api.errors import BusinessRuleError, NotFoundError, ValidationError


class RoleService:
    """
    Perfis de acesso. Única entidade com exclusão física: um perfil em uso
    por algum usuário não pode ser excluído.
    """

    def __init__(self, role_repository: RoleRepository, user_repository: UserRepository):
        self.role_repository = role_repository
        self.user_repository = user_repository
        self.feed = ChangeFeed('perfis', lambda _include_inactive: self.list())
        logger.info("RoleService inicializado (ORM).")

    def list(self) -> List[Dict[str, Any]]:
        with service_errors("listar perfis"):
            with get_db_session() as db:
                roles = self.role_repository.find_all(db, include_inactive=True)
                return [r.to_dict() for r in sorted(roles, key=lambda r: r.nome.lower())]

    def get(self, role_id: int) -> Dict[str, Any]:
        with service_errors("buscar perfil"):
            with get_db_session() as db:
                return self._get_or_404(db, role_id).to_dict()

    def subscribe(self, callback: Callback) -> Subscription:
        return self.feed.subscribe(callback)

    def add(self, data: Any) -> Dict[str, Any]:
        validated = validate_payload(schemas.RoleSchema, data).unwrap()
        with service_errors("adicionar perfil"):
            with get_db_session() as db:
                if self.role_repository.find_by_nome(db, validated['nome']):
                    raise BusinessRuleError(f"Já existe um perfil chamado '{validated['nome']}'.")
                role = Role(**validated)
                self.role_repository.add(db, role)
                result = role.to_dict()
        logger.info(f"Perfil '{result['nome']}' criado (ID: {result['id']}).")
        self.feed.publish()
        return result

    def update(self, role_id: int, data: Any) -> Dict[str, Any]:
        with service_errors("atualizar perfil"):
            with get_db_session() as db:
                role = self._get_or_404(db, role_id, for_update=True)
                changes = validate_partial(schemas.RoleSchema, role.to_dict(), data).unwrap()
                novo_nome = changes.get('nome')
                if novo_nome:
                    existente = self.role_repository.find_by_nome(db, novo_nome)
                    if existente is not None and existente.id != role.id:
                        raise BusinessRuleError(f"Já existe um perfil chamado '{novo_nome}'.")
                self.role_repository.update(db, role, changes)
                result = role.to_dict()
        logger.info(f"Perfil {role_id} atualizado.")
        self.feed.publish()
        return result

    def delete(self, role_id: int) -> None:
        with service_errors("excluir perfil"):
            with get_db_session() as db:
                role = self._get_or_404(db, role_id, for_update=True)
                em_uso = self.user_repository.count_by_role(db, role_id)
                if em_uso:
                    raise BusinessRuleError(
                        f"O perfil '{role.nome}' está atribuído a {em_uso} usuário(s) e não pode ser excluído."
                    )
                self.role_repository.delete(db, role)
        logger.info(f"Perfil {role_id} excluído.")
        self.feed.publish()

    def _get_or_404(self, db, role_id: int, for_update: bool = False) -> Role:
        role = self.role_repository.find_by_id(db, role_id, for_update=for_update)
        if role is None:
            raise NotFoundError(f"Perfil com ID {role_id} não encontrado.")
        return role


class UserService:
    """Cadastro de usuários: senha sempre gravada como hash bcrypt, nunca devolvida."""

    STATUS_VALIDOS = ('ativo', 'inativo')

    def __init__(self, user_repository: UserRepository, role_repository: RoleRepository):
        self.user_repository = user_repository
        self.role_repository = role_repository
        self.feed = ChangeFeed('usuarios', lambda _include_inactive: self.list())
        logger.info("UserService inicializado (ORM).")

    def list(self) -> List[Dict[str, Any]]:
        logger.debug("Listando usuários.")
        with service_errors("listar usuários"):
            with get_db_session() as db:
                return [u.to_dict() for u in self.user_repository.find_all(db, include_inactive=True)]

    def get(self, user_id: int) -> Dict[str, Any]:
        with service_errors("buscar usuário"):
            with get_db_session() as db:
                return self._get_or_404(db, user_id).to_dict()

    def subscribe(self, callback: Callback) -> Subscription:
        return self.feed.subscribe(callback)

    def add(self, data: Any) -> Dict[str, Any]:
        validated = validate_payload(schemas.UsuarioCreateSchema, data).unwrap()
        password = validated.pop('password')
        with service_errors("adicionar usuário"):
            with get_db_session() as db:
                self._check_role(db, validated.get('role_id'))
                if self.user_repository.find_by_email(db, validated['email']):
                    raise BusinessRuleError(f"E-mail '{validated['email']}' já está em uso.")
                user = Usuario(**validated, status='ativo', created_at=datetime.now(timezone.utc))
                user.set_password(password)
                self.user_repository.add(db, user)
                result = user.to_dict()
        logger.info(f"Usuário '{result['email']}' criado (ID: {result['id']}).")
        self.feed.publish()
        return result

    def update(self, user_id: int, data: Any) -> Dict[str, Any]:
        """Atualização parcial; `password` só é trocada quando enviada e não vazia."""
        with service_errors("atualizar usuário"):
            with get_db_session() as db:
                user = self._get_or_404(db, user_id, for_update=True)
                changes = validate_partial(schemas.UsuarioSchema, user.to_dict(), data).unwrap()
                password = changes.pop('password', None)
                if 'role_id' in changes:
                    self._check_role(db, changes['role_id'])
                if 'email' in changes:
                    existente = self.user_repository.find_by_email(db, changes['email'])
                    if existente is not None and existente.id != user.id:
                        raise BusinessRuleError(f"E-mail '{changes['email']}' já está em uso.")
                self.user_repository.update(db, user, changes)
                if password:
                    user.set_password(password)
                    logger.info(f"Senha do usuário {user_id} redefinida.")
                db.flush()
                result = user.to_dict()
        logger.info(f"Usuário {user_id} atualizado.")
        self.feed.publish()
        return result

    def set_status(self, user_id: int, status: Any) -> Dict[str, Any]:
        if status not in self.STATUS_VALIDOS:
            raise ValidationError("Status inválido. Valores aceitos: ativo, inativo.")
        with service_errors("alterar status do usuário"):
            with get_db_session() as db:
                user = self._get_or_404(db, user_id, for_update=True)
                self.user_repository.update(db, user, {'status': status})
                result = user.to_dict()
        logger.info(f"Usuário {user_id} agora está '{status}'.")
        self.feed.publish()
        return result

    def get_dashboard_layout(self, user_id: int) -> List[Any]:
        with service_errors("carregar layout do dashboard"):
            with get_db_session() as db:
                return list(self._get_or_404(db, user_id).dashboard_layout or [])

    def save_dashboard_layout(self, user_id: int, layout: Any) -> List[Any]:
        if not isinstance(layout, list):
            raise ValidationError("O layout do dashboard deve ser uma lista.")
        with service_errors("salvar layout do dashboard"):
            with get_db_session() as db:
                user = self._get_or_404(db, user_id, for_update=True)
                self.user_repository.update(db, user, {'dashboard_layout': layout})
        logger.debug(f"Layout do dashboard salvo para o usuário {user_id}.")
        return layout

    def _check_role(self, db, role_id: Optional[int]) -> None:
        if role_id is not None and self.role_repository.find_by_id(db, role_id) is None:
            raise ValidationError(f"Perfil com ID {role_id} não encontrado.")

    def _get_or_404(self, db, user_id: int, for_update: bool = False) -> Usuario:
        user = self.user_repository.find_by_id(db, user_id, for_update=for_update)
        if user is None:
            raise NotFoundError(f"Usuário com ID {user_id} não encontrado.")
        return user
