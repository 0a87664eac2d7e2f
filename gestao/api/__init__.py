# gestao/api/__init__.py
# Initializes the API layer and registers blueprints.

from flask import Flask

from gestao.utils.logger import logger


def _blueprints():
    """Lista de (blueprint, prefixo). Adicionar novos blueprints aqui."""
    from .routes.auth import auth_bp
    from .routes.cadastros import CADASTRO_BLUEPRINTS
    from .routes.operacoes import OPERACAO_BLUEPRINTS
    from .routes.vendas import vendas_bp
    from .routes.estoque import estoque_bp
    from .routes.financeiro import financeiro_bp
    from .routes.usuarios import usuarios_bp, roles_bp
    from .routes.settings import settings_bp
    from .routes.consultas import consultas_bp
    from .routes.nfe import nfe_bp, pdf_bp
    from .routes.sync import sync_bp

    return [
        (auth_bp, '/api/auth'),
        *CADASTRO_BLUEPRINTS,
        *OPERACAO_BLUEPRINTS,
        (vendas_bp, '/api/vendas'),
        (estoque_bp, '/api/estoque'),
        (financeiro_bp, '/api/financeiro'),
        (usuarios_bp, '/api/usuarios'),
        (roles_bp, '/api/roles'),
        (settings_bp, '/api/settings'),
        (consultas_bp, '/api/consultas'),
        (nfe_bp, '/api/nfe'),
        (pdf_bp, '/pdf'),
        (sync_bp, '/api/sync'),
    ]


def register_blueprints(app: Flask):
    """
    Registers all defined blueprints with the Flask application.

    Route modules are imported here, not at package import time, because the domain
    and database layers import `gestao.api.errors`.
    """
    logger.info("Registering API blueprints...")
    for bp, prefix in _blueprints():
        app.register_blueprint(bp, url_prefix=prefix)
        logger.debug(f"Blueprint '{bp.name}' registered with prefix '{prefix}'.")
    logger.info("All API blueprints registered.")

__all__ = ["register_blueprints"]
