# gestao/utils/__init__.py
# Makes 'utils' a package. Exports utility functions/classes.

from .logger import logger
from .formatters import only_digits, format_cpf_cnpj, format_cep
from .validators import is_valid_cpf, is_valid_cnpj, is_valid_cpf_or_cnpj

__all__ = [
    "logger",
    "only_digits",
    "format_cpf_cnpj",
    "format_cep",
    "is_valid_cpf",
    "is_valid_cnpj",
    "is_valid_cpf_or_cnpj",
]
