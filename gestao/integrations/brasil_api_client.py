# gestao/integrations/brasil_api_client.py
# Consultas públicas na BrasilAPI: CNPJ, CEP e código IBGE de municípios.

import threading
import unicodedata
import requests
from cachetools import TTLCache
from typing import Any, Dict, List, Optional

from gestao.utils.formatters import only_digits
from gestao.utils.logger import logger
from gestao.api.errors import ExternalLookupError, NotFoundError, ValidationError


def normalize_nome(value: str) -> str:
    """Remove acentos e caixa para comparar nomes de cidades."""
    decomposed = unicodedata.normalize('NFD', value or '')
    return ''.join(ch for ch in decomposed if unicodedata.category(ch) != 'Mn').lower().strip()


class BrasilApiClient:
    """
    Cliente da BrasilAPI. A lista de municípios de cada UF fica em um TTLCache,
    já que é consultada a cada emissão de NF-e.
    """

    def __init__(self, base_url: str = 'https://brasilapi.com.br/api', cache_ttl: int = 86400,
                 timeout: int = 15, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self._municipios_cache: TTLCache = TTLCache(maxsize=64, ttl=cache_ttl)
        self._cache_lock = threading.Lock()
        logger.info(f"BrasilApiClient inicializado ({self.base_url}, cache {cache_ttl}s).")

    def fetch_cnpj(self, cnpj: str) -> Dict[str, Any]:
        digits = only_digits(cnpj)
        if len(digits) != 14:
            raise ValidationError("O CNPJ deve conter 14 dígitos.")
        data = self._get(f"/cnpj/v1/{digits}", not_found="O CNPJ informado não foi encontrado na base da Receita Federal.")
        if not isinstance(data, dict) or not data.get('razao_social'):
            raise ExternalLookupError("Resposta inválida da API. Verifique o CNPJ digitado.")
        return data

    def fetch_cep(self, cep: str) -> Dict[str, Any]:
        digits = only_digits(cep)
        if len(digits) != 8:
            raise ValidationError("O CEP deve conter 8 dígitos.")
        data = self._get(f"/cep/v1/{digits}", not_found="CEP não encontrado.")
        if not isinstance(data, dict):
            raise ExternalLookupError("Resposta inválida da API de CEP.")
        return data

    def fetch_municipios(self, uf: str) -> List[Dict[str, Any]]:
        uf = (uf or '').strip().upper()
        with self._cache_lock:
            cached = self._municipios_cache.get(uf)
        if cached is not None:
            logger.debug(f"Municípios de {uf} obtidos do cache.")
            return cached
        data = self._get(f"/ibge/municipios/v1/{uf}", not_found=f"UF '{uf}' não encontrada.")
        if not isinstance(data, list):
            raise ExternalLookupError("Não foi possível validar o município do destinatário.")
        with self._cache_lock:
            self._municipios_cache[uf] = data
        return data

    def find_municipio(self, uf: str, cidade: str) -> Optional[Dict[str, Any]]:
        """Busca o município pelo nome (sem acentos nem caixa). None quando não existe na UF."""
        alvo = normalize_nome(cidade)
        for municipio in self.fetch_municipios(uf):
            if normalize_nome(municipio.get('nome', '')) == alvo:
                return municipio
        return None

    def _get(self, path: str, not_found: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"BrasilAPI: GET {path}")
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Erro de rede ao consultar a BrasilAPI ({path}): {e}", exc_info=True)
            raise ExternalLookupError() from e

        if response.status_code == 404:
            logger.info(f"BrasilAPI: recurso não encontrado ({path}).")
            raise NotFoundError(not_found)
        if response.status_code != 200:
            logger.warning(f"BrasilAPI respondeu {response.status_code} para {path}: {response.text[:200]}")
            raise ExternalLookupError()
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Resposta não-JSON da BrasilAPI ({path}): {e}")
            raise ExternalLookupError() from e
