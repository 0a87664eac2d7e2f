# gestao/utils/formatters.py
# Máscaras de documentos brasileiros (CPF, CNPJ, CEP).

import re
from typing import Optional

_NON_DIGITS = re.compile(r'\D')


def only_digits(value: Optional[str]) -> str:
    """Remove tudo que não for dígito."""
    return _NON_DIGITS.sub('', value or '')


def format_cpf_cnpj(value: Optional[str]) -> str:
    """
    Aplica a máscara de CPF (11 dígitos) ou CNPJ (14 dígitos).
    Valores com outra quantidade de dígitos são devolvidos sem alteração.
    """
    if not value:
        return ''
    digits = only_digits(value)
    if len(digits) == 11:
        return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"
    if len(digits) == 14:
        return f"{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}"
    return value


def format_cep(value: Optional[str]) -> str:
    if not value:
        return ''
    digits = only_digits(value)
    if len(digits) == 8:
        return f"{digits[:5]}-{digits[5:]}"
    return value
