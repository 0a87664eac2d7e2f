# gestao/services/settings_service.py
# Dados da empresa (singleton) usados no cabeçalho das notas fiscais.

from typing import Any, Dict, Optional

from gestao.database import get_db_session
from gestao.database.empresa_repository import CompanyInfoRepository
from gestao.domain import schemas
from gestao.domain.validation import validate_payload
from gestao.services.crud_service import service_errors
from gestao.utils.logger import logger


class SettingsService:

    def __init__(self, company_repository: CompanyInfoRepository):
        self.company_repository = company_repository
        logger.info("SettingsService inicializado (ORM).")

    def get_company_info(self) -> Optional[Dict[str, Any]]:
        """Devolve os dados da empresa ou None se ainda não foram cadastrados."""
        with service_errors("carregar os dados da empresa"):
            with get_db_session() as db:
                info = self.company_repository.get(db)
                return info.to_dict() if info else None

    def save_company_info(self, data: Any) -> Dict[str, Any]:
        validated = validate_payload(schemas.CompanyInfoSchema, data).unwrap()
        with service_errors("salvar os dados da empresa"):
            with get_db_session() as db:
                info = self.company_repository.save(db, validated)
                result = info.to_dict()
        logger.info(f"Dados da empresa salvos ({result.get('razao_social')}).")
        return result
