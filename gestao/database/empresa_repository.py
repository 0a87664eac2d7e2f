# gestao/database/empresa_repository.py
# Registro único com os dados da empresa emitente.

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session
from datetime import datetime, timezone

from .base_repository import BaseRepository
from gestao.domain.empresa import CompanyInfo, COMPANY_INFO_ID
from gestao.utils.logger import logger


class CompanyInfoRepository(BaseRepository[CompanyInfo]):
    model = CompanyInfo
    natural_key = 'id'

    def get(self, db: Session) -> Optional[CompanyInfo]:
        return self.find_by_id(db, COMPANY_INFO_ID)

    def save(self, db: Session, dados: Dict[str, Any]) -> CompanyInfo:
        """Cria ou substitui o registro único."""
        def _save():
            info = db.get(CompanyInfo, COMPANY_INFO_ID)
            if info is None:
                info = CompanyInfo(id=COMPANY_INFO_ID, dados=dados)
                db.add(info)
            else:
                info.dados = dados
            info.updated_at = datetime.now(timezone.utc)
            db.flush()
            logger.info("ORM: Dados da empresa gravados na sessão. Commit pendente.")
            return info
        return self._run("gravar dados da empresa", _save)
