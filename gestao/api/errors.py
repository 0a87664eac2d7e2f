# gestao/api/errors.py
# Exceções da aplicação e handlers que as convertem em {message, detalhes}.

from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from gestao.utils.logger import logger

# --- Exceções ---

class ApiError(Exception):
    """Erro com status HTTP; `payload` vira o campo `detalhes` da resposta."""
    status_code = 500
    message = "Ocorreu um erro interno no servidor."

    def __init__(self, message=None, status_code=None, payload=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = {'message': self.message}
        if self.payload is not None:
            rv['detalhes'] = self.payload
        return rv

    def __str__(self):
        return self.message

class ValidationError(ApiError):
    """Corpo ausente, campo obrigatório faltando ou valor fora das regras do cadastro."""
    status_code = 400
    message = "Dados inválidos."

class AuthenticationError(ApiError):
    """Sem token, token inválido ou credenciais erradas."""
    status_code = 401
    message = "Falha de autenticação."

class InvalidTokenError(AuthenticationError):
    message = "Token de autenticação inválido."

class ExpiredTokenError(AuthenticationError):
    message = "Token de autenticação expirado."

class ForbiddenError(ApiError):
    """Usuário autenticado sem permissão (ex.: rota só de administradores)."""
    status_code = 403
    message = "Você não tem permissão para realizar esta ação."

class NotFoundError(ApiError):
    """Registro inexistente ou referência (cliente, produto, conta) que não existe."""
    status_code = 404
    message = "O recurso solicitado não foi encontrado."

class BusinessRuleError(ApiError):
    """Regra de negócio impediu a operação; a transação foi desfeita."""
    status_code = 409
    message = "A operação viola uma regra de negócio."

class InsufficientStockError(BusinessRuleError):
    """Saída que deixaria o produto com quantidade negativa."""
    message = "Estoque insuficiente."

    def __init__(self, produto_nome=None, disponivel=None, solicitado=None, message=None):
        if message is None and produto_nome is not None:
            message = (f"Estoque insuficiente para o produto \"{produto_nome}\". "
                       f"Disponível: {disponivel}, solicitado: {solicitado}.")
        payload = None
        if produto_nome is not None:
            payload = {'produto': produto_nome, 'disponivel': disponivel, 'solicitado': solicitado}
        super().__init__(message, payload=payload)
        self.produto_nome = produto_nome

class ServiceError(ApiError):
     """Falha inesperada dentro de um serviço."""
     status_code = 500
     message = "Erro no processamento do serviço."

class DatabaseError(ApiError):
    """Falha do SQLAlchemy/driver; a sessão já fez rollback."""
    status_code = 500
    message = "Erro de banco de dados."

class ConfigurationError(ApiError):
     """SECRET_KEY, URI do banco ou credenciais do Focus NFe ausentes."""
     status_code = 500
     message = "Erro de configuração do servidor."

class FiscalProviderError(ApiError):
    """Resposta de erro do Focus NFe (status espelhado) ou falha de rede (502)."""
    status_code = 500
    message = "Erro ao comunicar com o servidor de NF-e."

class ExternalLookupError(ApiError):
    """BrasilAPI fora do ar ou respondendo com erro."""
    status_code = 502
    message = "Falha na comunicação com o serviço de consulta."


# --- Handlers ---

def register_error_handlers(app):
    """Toda resposta de erro da API é JSON com `message` (e `detalhes` quando houver)."""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        log = logger.error if error.status_code >= 500 else logger.warning
        log(f"{request.method} {request.path} -> {error.status_code} {type(error).__name__}: {error.message}")
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        # 404/405 do roteamento também saem em JSON
        logger.warning(f"{request.method} {request.path} -> {error.code} {error.name}")
        response = jsonify({"message": f"{error.name}: {error.description}"})
        response.status_code = error.code
        return response

    @app.errorhandler(Exception)
    def handle_generic_exception(error):
        # o detalhe fica só no log
        logger.error(f"Erro não tratado em {request.method} {request.path}: {error}", exc_info=True)
        response = jsonify({"message": "Ocorreu um erro interno inesperado no servidor."})
        response.status_code = 500
        return response

    logger.info("Handlers de erro registrados.")
