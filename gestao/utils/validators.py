# gestao/utils/validators.py
# Validação de dígitos verificadores de CPF e CNPJ.

from typing import Optional

from .formatters import only_digits

_CNPJ_WEIGHTS_1 = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
_CNPJ_WEIGHTS_2 = (6,) + _CNPJ_WEIGHTS_1


def _mod11_digit(total: int) -> int:
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def is_valid_cpf(value: Optional[str]) -> bool:
    digits = only_digits(value)
    if len(digits) != 11 or digits == digits[0] * 11:
        return False
    numbers = [int(d) for d in digits]
    first = _mod11_digit(sum(n * w for n, w in zip(numbers[:9], range(10, 1, -1))))
    second = _mod11_digit(sum(n * w for n, w in zip(numbers[:10], range(11, 1, -1))))
    return numbers[9] == first and numbers[10] == second


def is_valid_cnpj(value: Optional[str]) -> bool:
    digits = only_digits(value)
    if len(digits) != 14 or digits == digits[0] * 14:
        return False
    numbers = [int(d) for d in digits]
    first = _mod11_digit(sum(n * w for n, w in zip(numbers[:12], _CNPJ_WEIGHTS_1)))
    second = _mod11_digit(sum(n * w for n, w in zip(numbers[:13], _CNPJ_WEIGHTS_2)))
    return numbers[12] == first and numbers[13] == second


def is_valid_cpf_or_cnpj(value: Optional[str]) -> bool:
    return is_valid_cpf(value) or is_valid_cnpj(value)
