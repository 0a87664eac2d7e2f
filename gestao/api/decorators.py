# gestao/api/decorators.py
# Acesso aos serviços registrados no app e guardas de autenticação das rotas.

from functools import wraps
from flask import request, current_app
from gestao.api.errors import AuthenticationError, ForbiddenError, ServiceError
from gestao.utils.logger import logger


def get_service(key: str, label: str):
    """Busca um serviço registrado em app.config; 503 se a aplicação não o configurou."""
    service = current_app.config.get(key)
    if service is None:
        logger.critical(f"Serviço '{key}' ({label}) não registrado no app factory.")
        raise ServiceError(f"Serviço de {label} indisponível.", 503)
    return service


def login_required(f):
    """Exige token válido de um usuário ativo e o expõe em `request.current_user`."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = get_service('auth_service', 'autenticação').get_current_user_from_request()
        if user is None:
            raise AuthenticationError("Autenticação necessária. Faça login.")
        request.current_user = user
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Gestão de usuários e perfis: só administradores."""
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        user = request.current_user
        if not user.is_admin:
            logger.warning(f"'{user.email}' (ID {user.id}) tentou acessar {request.path} sem ser administrador.")
            raise ForbiddenError("Acesso restrito a administradores.")
        return f(*args, **kwargs)
    return decorated_function
