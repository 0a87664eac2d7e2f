# gestao/domain/empresa.py
# Dados cadastrais e fiscais da empresa emitente (registro único).

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from sqlalchemy import Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from gestao.database.base import Base

COMPANY_INFO_ID = 1


class CompanyInfo(Base):
    __tablename__ = 'company_info'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=COMPANY_INFO_ID)
    dados: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.dados or {})
        data['updated_at'] = self.updated_at.isoformat() if self.updated_at else None
        return data
