# gestao/utils/data_conversion.py

from typing import Any, Optional
from .logger import logger

def safe_float(value: Any) -> Optional[float]:
    """Converte um valor para float de forma segura, retornando None em caso de falha."""
    if value is None:
        return None
    try:
        return float(value)
    except (ValueError, TypeError) as e:
        logger.debug(f"Não foi possível converter o valor '{value}' (tipo: {type(value)}) para float: {e}")
        return None

def round_money(value: Any) -> float:
    """Arredonda um valor monetário para 2 casas decimais (0.0 quando inválido)."""
    converted = safe_float(value)
    return round(converted, 2) if converted is not None else 0.0
