# gestao/database/schema_manager.py
# Gerencia a criação inicial das tabelas do banco de dados e dados essenciais.

from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.orm import Session

from .base import Base
from gestao.utils.logger import logger
from gestao.api.errors import DatabaseError

DEFAULT_ADMIN_EMAIL = 'admin@example.com'
DEFAULT_ADMIN_PASSWORD = 'admin123'
ADMIN_ROLE_NAME = 'Administrador'


class SchemaManager:
    def __init__(self, engine: Engine, admin_email: Optional[str] = None, admin_password: Optional[str] = None):
        self.engine = engine
        self.admin_email = (admin_email or DEFAULT_ADMIN_EMAIL).lower()
        self.admin_password = admin_password or DEFAULT_ADMIN_PASSWORD
        if len(self.admin_password) < 6:
            logger.warning("Senha padrão do admin é muito curta, usando 'admin123' como alternativa.")
            self.admin_password = DEFAULT_ADMIN_PASSWORD
        logger.debug("SchemaManager inicializado com o engine do SQLAlchemy.")

    def initialize_schema(self):
        import gestao.domain  # noqa: F401  registra todos os modelos no metadata

        try:
            logger.info("Iniciando a criação do esquema do banco de dados...")
            Base.metadata.create_all(bind=self.engine)
            logger.info("Tabelas criadas/verificadas com sucesso.")

            with Session(self.engine) as db:
                with db.begin():
                    self._ensure_admin_user_exists(db)

            logger.info("Esquema do banco de dados inicializado com sucesso.")
        except SQLAlchemyError as e:
            logger.critical(f"Falha na inicialização do esquema do banco de dados: {e}", exc_info=True)
            raise DatabaseError(f"Falha na inicialização do esquema: {e}") from e

    def _ensure_admin_user_exists(self, db: Session):
        from gestao.domain.user import Role, Usuario, MODULOS, ACOES

        logger.debug("Verificando existência do perfil e do usuário admin...")
        role = db.scalars(select(Role).where(Role.nome == ADMIN_ROLE_NAME)).first()
        if role is None:
            role = Role(
                nome=ADMIN_ROLE_NAME,
                descricao='Acesso total a todos os módulos.',
                permissoes=[{'modulo': modulo, 'acoes': list(ACOES)} for modulo in MODULOS],
            )
            db.add(role)
            db.flush()
            logger.info(f"Perfil '{ADMIN_ROLE_NAME}' criado (ID: {role.id}).")

        admin = db.scalars(select(Usuario).where(Usuario.email == self.admin_email)).first()
        if admin is None:
            logger.info("Usuário admin não encontrado. Criando...")
            admin = Usuario(nome='Administrador', email=self.admin_email, role_id=role.id, is_admin=True, status='ativo')
            admin.set_password(self.admin_password)
            try:
                db.add(admin)
                db.flush()
            except IntegrityError as e:
                logger.warning(f"Falha ao criar usuário admin devido a restrição de integridade: {e}")
                raise
            logger.info(f"Usuário admin criado com ID {admin.id}.")
        elif not admin.is_admin:
            admin.is_admin = True
            logger.debug(f"Permissão de administrador garantida para o usuário admin (ID: {admin.id}).")
