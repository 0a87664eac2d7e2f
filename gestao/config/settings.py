# gestao/config/settings.py
# Loads environment variables and defines the application configuration.

from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv
import os
import logging
import sys
from urllib.parse import quote_plus # Para senhas na URL

# Determine the project root directory dynamically
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
dotenv_path = os.path.join(PROJECT_ROOT, '.env')
load_dotenv(dotenv_path=dotenv_path)

AMBIENTE_PRODUCAO = 'PRODUCAO'
AMBIENTE_HOMOLOGACAO = 'HOMOLOGACAO'


@dataclass(frozen=True)
class FocusNfeEnvironment:
    """Credentials and base URL for one Focus NFe environment."""
    provider_url: Optional[str]
    provider_token: Optional[str]
    environment_tag: str

    @property
    def is_configured(self) -> bool:
        return bool(self.provider_url and self.provider_token)

    @property
    def ambiente_codigo(self) -> int:
        """SEFAZ environment code: 1 = produção, 2 = homologação."""
        return 1 if self.environment_tag == AMBIENTE_PRODUCAO else 2


@dataclass(frozen=True)
class NfeSettings:
    """
    Explicit fiscal provider configuration handed to the NF-e proxy at construction.
    `selected` is the environment used for issue/query/cancel/DANFE;
    preview always uses `homologacao`.
    """
    producao: FocusNfeEnvironment
    homologacao: FocusNfeEnvironment
    ambiente: str = AMBIENTE_HOMOLOGACAO
    timeout_seconds: int = 45

    @property
    def selected(self) -> FocusNfeEnvironment:
        return self.producao if self.ambiente == AMBIENTE_PRODUCAO else self.homologacao


@dataclass
class Config:
    """
    Application configuration loaded from environment variables.
    Provides type hints and default values.
    """
    # Flask Settings
    SECRET_KEY: str = field(default_factory=lambda: os.environ.get('SECRET_KEY', 'default_secret_key_change_me_in_env'))
    APP_HOST: str = field(default_factory=lambda: os.environ.get('APP_HOST', '0.0.0.0'))
    APP_PORT: int = field(default_factory=lambda: int(os.environ.get('APP_PORT', 5004)))
    APP_DEBUG: bool = field(default_factory=lambda: os.environ.get('APP_DEBUG', 'True').lower() == 'true')
    TOKEN_EXPIRATION_HOURS: int = field(default_factory=lambda: int(os.environ.get('TOKEN_EXPIRATION_HOURS', 24)))
    LOG_LEVEL: str = field(default_factory=lambda: os.environ.get('LOG_LEVEL', 'DEBUG').upper())
    DEFAULT_ADMIN_EMAIL: str = field(default_factory=lambda: os.environ.get('DEFAULT_ADMIN_EMAIL', 'admin@example.com'))
    DEFAULT_ADMIN_PASSWORD: str = field(default_factory=lambda: os.environ.get('DEFAULT_ADMIN_PASSWORD', 'admin123'))

    # --- Database Settings ---
    DB_TYPE: str = field(default_factory=lambda: os.environ.get('DB_TYPE', 'POSTGRES').upper())
    DATABASE_URL: str = field(default_factory=lambda: os.environ.get('DATABASE_URL', ''))

    # PostgreSQL Specific Settings (read from .env)
    POSTGRES_HOST: str = field(default_factory=lambda: os.environ.get('POSTGRES_HOST', 'localhost'))
    POSTGRES_PORT: int = field(default_factory=lambda: int(os.environ.get('POSTGRES_PORT', 5432)))
    POSTGRES_USER: str = field(default_factory=lambda: os.environ.get('POSTGRES_USER', ''))
    POSTGRES_PASSWORD: str = field(default_factory=lambda: os.environ.get('POSTGRES_PASSWORD', ''))
    POSTGRES_DB: str = field(default_factory=lambda: os.environ.get('POSTGRES_DB', ''))

    # --- SQLAlchemy Database URL ---
    # Constructed based on the DB_TYPE and specific settings
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # Focus NFe (emissor fiscal)
    NFE_AMBIENTE: str = field(default_factory=lambda: os.environ.get('NFE_AMBIENTE', AMBIENTE_HOMOLOGACAO).upper())
    FOCUS_NFE_URL_PRODUCAO: str = field(default_factory=lambda: os.environ.get('FOCUS_NFE_URL_PRODUCAO', ''))
    FOCUS_NFE_TOKEN_PRODUCAO: str = field(default_factory=lambda: os.environ.get('FOCUS_NFE_TOKEN_PRODUCAO', ''))
    FOCUS_NFE_URL_HOMOLOGACAO: str = field(default_factory=lambda: os.environ.get('FOCUS_NFE_URL_HOMOLOGACAO', ''))
    FOCUS_NFE_TOKEN_HOMOLOGACAO: str = field(default_factory=lambda: os.environ.get('FOCUS_NFE_TOKEN_HOMOLOGACAO', ''))
    NFE_HTTP_TIMEOUT: int = field(default_factory=lambda: int(os.environ.get('NFE_HTTP_TIMEOUT', 45)))

    # Sincronização de NF-e em segundo plano
    NFE_SYNC_ENABLED: bool = field(default_factory=lambda: os.environ.get('NFE_SYNC_ENABLED', 'True').lower() == 'true')
    NFE_SYNC_INTERVAL_MINUTES: int = field(default_factory=lambda: int(os.environ.get('NFE_SYNC_INTERVAL_MINUTES', 10)))

    # BrasilAPI (CNPJ, CEP, municípios IBGE)
    BRASIL_API_URL: str = field(default_factory=lambda: os.environ.get('BRASIL_API_URL', 'https://brasilapi.com.br/api'))
    BRASIL_API_CACHE_TTL: int = field(default_factory=lambda: int(os.environ.get('BRASIL_API_CACHE_TTL', 86400)))

    def __post_init__(self):
        # Validate log level
        valid_levels = list(logging._nameToLevel.keys())
        if self.LOG_LEVEL not in valid_levels:
             print(f"Warning: Invalid LOG_LEVEL '{self.LOG_LEVEL}'. Valid levels: {valid_levels}. Defaulting to DEBUG.", file=sys.stderr)
             self.LOG_LEVEL = 'DEBUG'

        if self.NFE_AMBIENTE != AMBIENTE_PRODUCAO:
            self.NFE_AMBIENTE = AMBIENTE_HOMOLOGACAO

        # --- Build SQLAlchemy Database URI ---
        if self.DATABASE_URL:
            self.SQLALCHEMY_DATABASE_URI = self.DATABASE_URL
        elif self.DB_TYPE == 'POSTGRES':
            if not all([self.POSTGRES_HOST, self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_DB]):
                print("Warning: Missing PostgreSQL connection details in environment variables. Database connection will likely fail.", file=sys.stderr)
                self.SQLALCHEMY_DATABASE_URI = None
            else:
                 encoded_password = quote_plus(self.POSTGRES_PASSWORD)
                 self.SQLALCHEMY_DATABASE_URI = f"postgresql+psycopg://{self.POSTGRES_USER}:{encoded_password}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        elif self.DB_TYPE == 'SQLITE':
             db_path = os.environ.get('DATABASE_PATH')
             if db_path:
                  abs_path = os.path.join(PROJECT_ROOT, db_path) if not os.path.isabs(db_path) else db_path
                  os.makedirs(os.path.dirname(abs_path), exist_ok=True)
                  self.SQLALCHEMY_DATABASE_URI = f"sqlite:///{abs_path}"
             else:
                  print("Warning: DB_TYPE is SQLITE but DATABASE_PATH is not set.", file=sys.stderr)
                  self.SQLALCHEMY_DATABASE_URI = None
        else:
             print(f"Warning: Unsupported DB_TYPE '{self.DB_TYPE}'. No database URI configured.", file=sys.stderr)
             self.SQLALCHEMY_DATABASE_URI = None

        if self.NFE_SYNC_INTERVAL_MINUTES < 1:
            print(f"Warning: NFE_SYNC_INTERVAL_MINUTES ({self.NFE_SYNC_INTERVAL_MINUTES}) is invalid. Setting to 10.", file=sys.stderr)
            self.NFE_SYNC_INTERVAL_MINUTES = 10

    def nfe_settings(self) -> NfeSettings:
        """Builds the explicit fiscal provider configuration struct."""
        return NfeSettings(
            producao=FocusNfeEnvironment(
                provider_url=self.FOCUS_NFE_URL_PRODUCAO or None,
                provider_token=self.FOCUS_NFE_TOKEN_PRODUCAO or None,
                environment_tag=AMBIENTE_PRODUCAO,
            ),
            homologacao=FocusNfeEnvironment(
                provider_url=self.FOCUS_NFE_URL_HOMOLOGACAO or None,
                provider_token=self.FOCUS_NFE_TOKEN_HOMOLOGACAO or None,
                environment_tag=AMBIENTE_HOMOLOGACAO,
            ),
            ambiente=self.NFE_AMBIENTE,
            timeout_seconds=self.NFE_HTTP_TIMEOUT,
        )

# Singleton instance, created by load_config
_config_instance: Optional[Config] = None

def load_config() -> Config:
    """Loads or returns the singleton Config instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
        # Log loaded config values (mask sensitive ones)
        print("--- Configuration Loaded ---")
        print(f"  APP_HOST: {_config_instance.APP_HOST}")
        print(f"  APP_PORT: {_config_instance.APP_PORT}")
        print(f"  APP_DEBUG: {_config_instance.APP_DEBUG}")
        print(f"  LOG_LEVEL: {_config_instance.LOG_LEVEL}")
        print(f"  DB_TYPE: {_config_instance.DB_TYPE}")
        db_uri_log = str(_config_instance.SQLALCHEMY_DATABASE_URI)
        if _config_instance.POSTGRES_PASSWORD:
             db_uri_log = db_uri_log.replace(quote_plus(_config_instance.POSTGRES_PASSWORD), '********')
        print(f"  SQLALCHEMY_DATABASE_URI: {db_uri_log}")
        print(f"  NFE_AMBIENTE: {_config_instance.NFE_AMBIENTE}")
        selected = _config_instance.nfe_settings().selected
        print(f"  FOCUS_NFE_URL: {selected.provider_url or 'Not Set'}")
        print(f"  FOCUS_NFE_TOKEN: {'*' * 8 if selected.provider_token else 'Not Set'}")
        print(f"  NFE_SYNC_ENABLED: {_config_instance.NFE_SYNC_ENABLED} (every {_config_instance.NFE_SYNC_INTERVAL_MINUTES} min)")
        print("--------------------------")
    return _config_instance

# Expose the singleton instance directly
config = load_config()
