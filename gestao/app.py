# gestao/app.py
from flask import Flask, jsonify
from flask_cors import CORS
import atexit
from typing import Optional

from gestao.config import Config
from gestao.api import register_blueprints
from gestao.api.errors import register_error_handlers, ConfigurationError
from gestao.database import (
    get_db_session,
    init_sqlalchemy,
    dispose_sqlalchemy_engine,
)
from gestao.utils.logger import logger, configure_logger

from gestao.database.cadastro_repositories import (
    ProdutoRepository, ClienteRepository, FornecedorRepository, ContaBancariaRepository,
    FuncionarioRepository, CargoRepository, MetaRepository, CategoriaRepository, UnidadeRepository,
)
from gestao.database.movimentacao_repository import MovimentacaoRepository
from gestao.database.venda_repository import VendaRepository
from gestao.database.financeiro_repository import ContaAPagarRepository, ContaAReceberRepository
from gestao.database.producao_repository import CompraRepository, AbateRepository, ProducaoRepository, LoteRepository
from gestao.database.user_repository import UserRepository, RoleRepository
from gestao.database.empresa_repository import CompanyInfoRepository

from gestao.integrations.brasil_api_client import BrasilApiClient
from gestao.services.auth_service import AuthService
from gestao.services.cadastro_services import (
    ProdutoService, ClienteService, FornecedorService, ContaBancariaService,
    FuncionarioService, CargoService, MetaService, CategoriaService, UnidadeService,
)
from gestao.services.estoque_service import EstoqueService
from gestao.services.venda_service import VendaService
from gestao.services.financeiro_service import ContaAPagarService, ContaAReceberService
from gestao.services.compra_service import CompraService
from gestao.services.abate_service import AbateService
from gestao.services.producao_service import ProducaoService
from gestao.services.user_service import UserService, RoleService
from gestao.services.settings_service import SettingsService
from gestao.services.nfe_service import NfeService, ClientFactory
from gestao.services.nfe_sync_service import (
    NfeSyncService,
    start_nfe_sync_scheduler,
    stop_nfe_sync_scheduler,
)


def create_app(config_object: Config, nfe_client_factory: Optional[ClientFactory] = None,
               brasil_api_client: Optional[BrasilApiClient] = None) -> Flask:
    """
    Factory function to create and configure the Flask application with SQLAlchemy.

    Args:
        config_object: The configuration object for the application.
        nfe_client_factory: Builds the Focus NFe client for an environment (tests inject fakes).
        brasil_api_client: Public lookup client (tests inject fakes).

    Returns:
        The configured Flask application instance.
    """
    app = Flask("Gestao-Backend")
    app.config.from_object(config_object)

    # --- Logging ---
    configure_logger(config_object.LOG_LEVEL)
    logger.info("Iniciando a aplicação Flask para o Gestao-Backend.")
    logger.info(f"Modo de depuração: {app.config.get('APP_DEBUG')}")

    # --- Secret Key Check ---
    if not app.config.get('SECRET_KEY') or app.config.get('SECRET_KEY') == 'default_secret_key_change_me_in_env':
        logger.critical("ALERTA CRÍTICO DE SEGURANÇA: SECRET_KEY não está definida ou está usando o valor padrão!")
        if not app.config.get('APP_DEBUG', False):
            raise ConfigurationError("SECRET_KEY deve ser configurada com um valor seguro e único em produção.")
        logger.warning("Usando SECRET_KEY padrão/insegura no modo de depuração.")

    # --- CORS Configuration ---
    CORS(app, supports_credentials=True, resources={r"/api/*": {"origins": "*"}, r"/pdf/*": {"origins": "*"}})

    # --- Database Initialization (SQLAlchemy) ---
    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI')
    if not db_uri:
        raise ConfigurationError("SQLALCHEMY_DATABASE_URI não está configurado.")
    db_engine = init_sqlalchemy(
        db_uri,
        admin_email=config_object.DEFAULT_ADMIN_EMAIL,
        admin_password=config_object.DEFAULT_ADMIN_PASSWORD,
    )
    atexit.register(dispose_sqlalchemy_engine)
    logger.info("Motor SQLAlchemy e fábrica de sessões inicializados com sucesso.")

    # --- Dependency Injection (Service Instantiation) ---
    logger.info("Instanciando serviços...")

    produto_repo = ProdutoRepository(db_engine)
    user_repo = UserRepository(db_engine)
    role_repo = RoleRepository(db_engine)
    venda_repo = VendaRepository(db_engine)

    produto_svc = ProdutoService(produto_repo)
    conta_bancaria_svc = ContaBancariaService(ContaBancariaRepository(db_engine))
    conta_pagar_svc = ContaAPagarService(ContaAPagarRepository(db_engine), conta_bancaria_svc)
    conta_receber_svc = ContaAReceberService(ContaAReceberRepository(db_engine), conta_bancaria_svc)
    venda_svc = VendaService(venda_repo, produto_svc, conta_receber_svc)
    conta_receber_svc.venda_service = venda_svc
    abate_svc = AbateService(AbateRepository(db_engine), conta_pagar_svc)

    if brasil_api_client is None:
        brasil_api_client = BrasilApiClient(config_object.BRASIL_API_URL, cache_ttl=config_object.BRASIL_API_CACHE_TTL)
    nfe_svc = NfeService(
        config_object.nfe_settings(),
        municipio_lookup=brasil_api_client.find_municipio,
        client_factory=nfe_client_factory,
        venda_service=venda_svc,
    )
    nfe_sync_svc = NfeSyncService(venda_repo, nfe_svc, venda_svc)

    services = {
        'auth_service': AuthService(user_repo),
        'user_service': UserService(user_repo, role_repo),
        'role_service': RoleService(role_repo, user_repo),
        'produto_service': produto_svc,
        'cliente_service': ClienteService(ClienteRepository(db_engine)),
        'fornecedor_service': FornecedorService(FornecedorRepository(db_engine)),
        'conta_bancaria_service': conta_bancaria_svc,
        'funcionario_service': FuncionarioService(FuncionarioRepository(db_engine)),
        'cargo_service': CargoService(CargoRepository(db_engine)),
        'meta_service': MetaService(MetaRepository(db_engine)),
        'categoria_service': CategoriaService(CategoriaRepository(db_engine)),
        'unidade_service': UnidadeService(UnidadeRepository(db_engine)),
        'estoque_service': EstoqueService(produto_repo, MovimentacaoRepository(db_engine), produto_svc),
        'venda_service': venda_svc,
        'conta_pagar_service': conta_pagar_svc,
        'conta_receber_service': conta_receber_svc,
        'compra_service': CompraService(CompraRepository(db_engine), conta_pagar_svc),
        'abate_service': abate_svc,
        'producao_service': ProducaoService(ProducaoRepository(db_engine), LoteRepository(db_engine), abate_svc, produto_svc),
        'settings_service': SettingsService(CompanyInfoRepository(db_engine)),
        'brasil_api_client': brasil_api_client,
        'nfe_service': nfe_svc,
        'nfe_sync_service': nfe_sync_svc,
    }
    app.config.update(services)
    logger.info(f"{len(services)} serviços instanciados e adicionados à configuração do aplicativo.")

    # --- Register Blueprints (API Routes) ---
    register_blueprints(app)

    # --- Register Error Handlers ---
    register_error_handlers(app)

    # --- Start Background Schedulers ---
    if config_object.NFE_SYNC_ENABLED:
        logger.info("Iniciando agendador de sincronização de NF-e...")
        start_nfe_sync_scheduler(
            nfe_sync_svc,
            interval_min=config_object.NFE_SYNC_INTERVAL_MINUTES,
            debug=config_object.APP_DEBUG,
        )
        atexit.register(stop_nfe_sync_scheduler)
    else:
        logger.info("Sincronização de NF-e em segundo plano desabilitada (NFE_SYNC_ENABLED=False).")

    # --- Simple Health Check Endpoint ---
    @app.route('/health', methods=['GET'])
    def health_check():
        db_status = "ok"
        db_error = None
        try:
            with get_db_session():
                pass
        except Exception as e:
            logger.error(f"Verificação de saúde da sessão do banco de dados falhou: {e}")
            db_status = "error"
            db_error = str(e)

        return jsonify({
            "status": "ok",
            "database": db_status,
            "database_error": db_error,
            "nfe_sync_running": NfeSyncService._is_running,
            "nfe_ambiente": config_object.NFE_AMBIENTE,
        }), 200 if db_status == "ok" else 503

    logger.info("Aplicação Gestao-Backend configurada com sucesso.")
    return app
