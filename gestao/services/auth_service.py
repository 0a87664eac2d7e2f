# gestao/services/auth_service.py
# Login por e-mail/senha e tokens JWT (HS256). O token vai no cabeçalho
# Authorization ou fica na sessão Flask, o que permite abrir /pdf/<ref> e os
# streams SSE direto no navegador.

import jwt
from datetime import datetime, timedelta, timezone
from flask import current_app, request, session
from typing import Tuple, Optional, Dict, Any

from gestao.domain.user import Usuario
from gestao.database.user_repository import UserRepository
from gestao.database import get_db_session

from gestao.utils.logger import logger
from gestao.api.errors import (
    AuthenticationError, InvalidTokenError, ExpiredTokenError, DatabaseError, ConfigurationError, ValidationError,
)

JWT_ALGORITHM = 'HS256'
SESSION_TOKEN_KEY = 'token'
CREDENCIAIS_INVALIDAS = "E-mail ou senha inválidos."


def _secret_key() -> str:
    secret = current_app.config.get('SECRET_KEY')
    if not secret:
        logger.critical("SECRET_KEY ausente: impossível assinar ou validar tokens.")
        raise ConfigurationError("Chave de assinatura de tokens não configurada.")
    return secret


def _token_from_request() -> Optional[str]:
    scheme, _, value = (request.headers.get('Authorization') or '').partition(' ')
    if scheme == 'Bearer' and value:
        return value.strip()
    return session.get(SESSION_TOKEN_KEY)


class AuthService:

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository
        logger.info("AuthService inicializado.")

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[str, Dict[str, Any]]:
        """
        Valida as credenciais, registra o último acesso e emite o token.

        Retorna (token, usuário serializado sem o hash da senha). A mesma mensagem
        é usada para e-mail desconhecido e senha errada.
        """
        if not email or not password:
            raise ValidationError("E-mail e senha são obrigatórios.")
        email = email.strip().lower()

        with get_db_session() as db:
            user = self.user_repository.find_by_email(db, email)
            if user is None or not user.verify_password(password):
                logger.warning(f"Login recusado para '{email}': credenciais inválidas.")
                raise AuthenticationError(CREDENCIAIS_INVALIDAS)
            if not user.is_active:
                logger.warning(f"Login recusado para '{email}': usuário inativo.")
                raise AuthenticationError("Usuário inativo.")

            user.update_last_login()
            token = self.issue_token(user)
            user_data = user.to_dict(include_hash=False)

        session[SESSION_TOKEN_KEY] = token
        logger.info(f"Login de '{email}' (ID {user_data['id']}).")
        return token, user_data

    def issue_token(self, user: Usuario) -> str:
        now = datetime.now(timezone.utc)
        hours = current_app.config.get('TOKEN_EXPIRATION_HOURS', 24)
        claims = {
            'user_id': user.id,
            'email': user.email,
            'adm': bool(user.is_admin),
            'role_id': user.role_id,
            'iat': now,
            'exp': now + timedelta(hours=hours),
        }
        return jwt.encode(claims, _secret_key(), algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """Decodifica o token; ExpiredTokenError/InvalidTokenError (401) quando não serve."""
        try:
            return jwt.decode(token, _secret_key(), algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError("Token de autenticação expirado.")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Token de autenticação inválido: {e}")

    def get_current_user_from_request(self) -> Optional[Usuario]:
        """Usuário ativo dono do token da requisição, ou None."""
        token = _token_from_request()
        if not token:
            return None

        try:
            user_id = self.verify_token(token).get('user_id')
        except (ExpiredTokenError, InvalidTokenError) as e:
            logger.debug(f"Token rejeitado: {e.message}")
            session.pop(SESSION_TOKEN_KEY, None)
            return None
        if not user_id:
            return None

        try:
            with get_db_session() as db:
                user = self.user_repository.find_by_id(db, user_id)
        except DatabaseError as e:
            logger.error(f"Não foi possível carregar o usuário {user_id} do token: {e}")
            return None

        if user is None or not user.is_active:
            logger.warning(f"Token válido para o usuário {user_id}, mas ele não existe ou está inativo.")
            return None
        return user

    def logout(self) -> bool:
        return session.pop(SESSION_TOKEN_KEY, None) is not None
