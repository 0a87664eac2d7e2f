# gestao/database/base.py
# Define a base declarativa para os modelos SQLAlchemy ORM.

from datetime import date, datetime
from typing import Any, Dict

from sqlalchemy.orm import declarative_base
from sqlalchemy import MetaData, inspect

# Convenção de nomenclatura para constraints: nomes estáveis entre SQLite, PostgreSQL e Alembic.
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)

Base = declarative_base(metadata=metadata)


class SerializableMixin:
    """to_dict() genérico baseado nas colunas mapeadas (datas em ISO 8601)."""

    def column_values(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for attr in inspect(self).mapper.column_attrs:
            value = getattr(self, attr.key)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            values[attr.key] = value
        return values

    def to_dict(self) -> Dict[str, Any]:
        return self.column_values()

    def __repr__(self):
        return f"<{type(self).__name__}(id={getattr(self, 'id', None)})>"
