# gestao/integrations/focus_nfe_client.py
# Cliente HTTP da API v2 do Focus NFe para um ambiente (produção ou homologação).

import requests
from dataclasses import dataclass
from typing import Any, Dict, Optional

from gestao.config.settings import FocusNfeEnvironment
from gestao.utils.logger import logger
from gestao.api.errors import ConfigurationError, FiscalProviderError


@dataclass
class FocusResponse:
    """Resposta crua do provedor: quem chama decide o que é erro (o status não é levantado aqui)."""
    status_code: int
    data: Any = None
    content: bytes = b''

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


class FocusNfeClient:
    """
    Wrapper fino sobre `requests` para os endpoints de NF-e.
    Consultas, PDF e exclusão de preview usam o token na query; emissão e
    cancelamento usam HTTP basic auth (token como usuário, senha vazia).
    Não há novas tentativas automáticas.
    """

    def __init__(self, environment: FocusNfeEnvironment, timeout: int = 45, session: Optional[requests.Session] = None):
        if not environment.is_configured:
            raise ConfigurationError("Erro de configuração do servidor.")
        self.environment = environment
        self.base_url = environment.provider_url.rstrip('/')
        self.token = environment.provider_token
        self.timeout = timeout
        self.session = session or requests.Session()
        logger.debug(f"FocusNfeClient inicializado para o ambiente {environment.environment_tag}.")

    @property
    def ambiente(self) -> int:
        return self.environment.ambiente_codigo

    # --- Endpoints ---

    def consultar(self, ref: str) -> FocusResponse:
        return self._request("GET", f"/v2/nfe/{ref}", params={'token': self.token})

    def emitir(self, ref: str, payload: Dict[str, Any]) -> FocusResponse:
        return self._request("POST", "/v2/nfe", params={'ref': ref}, json_body=payload, basic_auth=True)

    def cancelar(self, ref: str, justificativa: str) -> FocusResponse:
        return self._request("DELETE", f"/v2/nfe/{ref}", json_body={'justificativa': justificativa}, basic_auth=True)

    def excluir(self, ref: str) -> FocusResponse:
        """Remove um registro de pré-visualização criado em homologação."""
        return self._request("DELETE", f"/v2/nfe/{ref}", params={'token': self.token})

    def baixar_pdf(self, ref: str) -> FocusResponse:
        return self._request("GET", f"/v2/nfe/{ref}/pdf", params={'token': self.token}, binary=True)

    # --- Internals ---

    def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                 json_body: Optional[Dict[str, Any]] = None, basic_auth: bool = False,
                 binary: bool = False) -> FocusResponse:
        url = f"{self.base_url}{path}"
        auth = (self.token, '') if basic_auth else None
        logger.debug(f"Focus NFe [{self.environment.environment_tag}]: {method} {path}")
        try:
            response = self.session.request(method, url, params=params, json=json_body, auth=auth, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Erro de rede ao chamar o Focus NFe ({method} {path}): {e}", exc_info=True)
            raise FiscalProviderError(f"Falha de comunicação com o servidor de NF-e: {e}", status_code=502) from e

        if binary and response.status_code < 400:
            return FocusResponse(status_code=response.status_code, content=response.content)

        try:
            data = response.json() if response.content else None
        except ValueError:
            logger.warning(f"Resposta não-JSON do Focus NFe ({method} {path}, status {response.status_code}): {response.text[:200]}")
            data = response.text
        if response.status_code >= 400:
            logger.warning(f"Focus NFe respondeu {response.status_code} para {method} {path}.")
        return FocusResponse(status_code=response.status_code, data=data, content=response.content)
