# gestao/services/nfe_service.py
# Proxy entre as vendas deste sistema e o emissor fiscal Focus NFe:
# emissão (idempotente por venda), consulta, cancelamento, pré-visualização e DANFE.

import time
from typing import Any, Callable, Dict, Mapping, Optional

from gestao.config.settings import NfeSettings, FocusNfeEnvironment
from gestao.domain import nfe as nfe_states
from gestao.integrations.focus_nfe_client import FocusNfeClient, FocusResponse
from gestao.services.nfe_payload_builder import build_nfe_payload, MunicipioLookup
from gestao.utils.logger import logger
from gestao.api.errors import ApiError, ConfigurationError, FiscalProviderError, ValidationError

ClientFactory = Callable[[FocusNfeEnvironment], Any]

PARTES_OBJETO = ('venda', 'empresa', 'cliente')
PARTES_LISTA = ('todosProdutos', 'todasUnidades')
PARTES_OBRIGATORIAS = PARTES_OBJETO + PARTES_LISTA
JUSTIFICATIVA_MINIMA = 15

MENSAGEM_ERRO_PADRAO = "Erro desconhecido ao processar a emissão da NF-e."


def extract_error_message(data: Any, default: str = MENSAGEM_ERRO_PADRAO) -> str:
    """`mensagem`, senão `message`, senão as mensagens de `erros` unidas por ' | '."""
    if not data:
        return "Erro desconhecido ao comunicar com o servidor de NF-e."
    if isinstance(data, str):
        return data
    if isinstance(data, Mapping):
        if data.get('mensagem'):
            return str(data['mensagem'])
        if data.get('message'):
            return str(data['message'])
        erros = data.get('erros')
        if isinstance(erros, list) and erros:
            return " | ".join(str(e.get('mensagem') or e) if isinstance(e, Mapping) else str(e) for e in erros)
    return default


def _provider_error(response: FocusResponse, message: str) -> FiscalProviderError:
    status = response.status_code if response.status_code >= 400 else 400
    return FiscalProviderError(message, status_code=status, payload=response.data)


class NfeService:
    """
    Recebe a configuração fiscal explícita (NfeSettings) na construção; nunca lê o ambiente.
    Emissão, consulta, cancelamento e DANFE usam o ambiente selecionado; a
    pré-visualização usa sempre homologação.
    """

    def __init__(self, nfe_settings: NfeSettings, municipio_lookup: MunicipioLookup,
                 client_factory: Optional[ClientFactory] = None, venda_service=None):
        self.settings = nfe_settings
        self.municipio_lookup = municipio_lookup
        self.client_factory = client_factory or (
            lambda environment: FocusNfeClient(environment, timeout=nfe_settings.timeout_seconds)
        )
        self.venda_service = venda_service
        logger.info(f"NfeService inicializado (ambiente: {nfe_settings.ambiente}).")

    def _client(self, environment: FocusNfeEnvironment):
        if not environment.is_configured:
            logger.error(f"Focus NFe sem URL/token para o ambiente {environment.environment_tag}.")
            raise ConfigurationError("Erro de configuração do servidor.")
        return self.client_factory(environment)

    @staticmethod
    def _require_parts(body: Any, message: str) -> Mapping[str, Any]:
        """Corpo precisa trazer venda/empresa/cliente como objetos e as listas de produtos e unidades."""
        if not isinstance(body, Mapping) or any(not body.get(parte) for parte in PARTES_OBRIGATORIAS):
            raise ValidationError(message)
        if not all(isinstance(body[parte], Mapping) for parte in PARTES_OBJETO):
            raise ValidationError(message)
        listas = [body[parte] for parte in PARTES_LISTA] + [body['venda'].get('produtos') or []]
        if not all(isinstance(lista, list) and all(isinstance(i, Mapping) for i in lista) for lista in listas):
            raise ValidationError(message)
        return body

    def _build_payload(self, body: Mapping[str, Any], ambiente: int) -> Dict[str, Any]:
        return build_nfe_payload(
            venda=body['venda'], empresa=body['empresa'], cliente=body['cliente'],
            produtos=body['todosProdutos'], unidades=body['todasUnidades'],
            ambiente=ambiente, municipio_lookup=self.municipio_lookup,
        )

    # --- Emissão ---

    def emitir(self, body: Any) -> Dict[str, Any]:
        client = self._client(self.settings.selected)
        body = self._require_parts(body, "Dados insuficientes para emitir a nota.")
        ref = str(body['venda'].get('id') or '')
        if not ref:
            raise ValidationError("A venda precisa de um identificador para emitir a nota.")

        existente = self._nota_existente(client, ref)
        if existente is not None:
            logger.info(f"NF-e {ref} já existe no provedor (status {existente.get('status')}); emissão ignorada.")
            return {'message': "NF-e já existe para essa venda.", **existente}

        payload = self._build_payload(body, client.ambiente)
        logger.info(f"Enviando NF-e {ref} para processamento ({self.settings.ambiente}).")
        response = client.emitir(ref, payload)
        data = response.data if isinstance(response.data, Mapping) else {}
        if response.is_error or data.get('status') == 'erro':
            message = extract_error_message(response.data)
            logger.warning(f"Emissão da NF-e {ref} recusada ({response.status_code}): {message}")
            raise _provider_error(response, message)

        result = {
            'message': "NF-e enviada para processamento com sucesso.",
            'ref': data.get('referencia') or ref,
            'status': data.get('status'),
            'caminho_danfe': data.get('caminho_danfe') or None,
            'caminho_xml_nota_fiscal': data.get('caminho_xml_nota_fiscal') or None,
            'autorizacao': data.get('mensagem_sefaz') or None,
        }
        self._registrar_na_venda(body['venda'].get('id'), result)
        return result

    def _nota_existente(self, client, ref: str) -> Optional[Dict[str, Any]]:
        """Consulta prévia por referência; falhas aqui não impedem a emissão."""
        try:
            check = client.consultar(ref)
        except FiscalProviderError as e:
            logger.warning(f"Consulta prévia da NF-e {ref} falhou, seguindo com a emissão: {e}")
            return None
        if check.status_code == 200 and isinstance(check.data, Mapping) and check.data.get('status'):
            return dict(check.data)
        return None

    def _registrar_na_venda(self, venda_id: Any, result: Dict[str, Any]) -> None:
        if self.venda_service is None or venda_id is None:
            return
        try:
            self.venda_service.registrar_nfe(int(venda_id), {
                'id': result['ref'],
                'status': nfe_states.status_from_provider(result.get('status')),
                'situacao': result.get('status'),
                'url_danfe': f"/pdf/{result['ref']}",
            }, do_provedor=True)
        except (ApiError, ValueError) as e:
            # a sincronização periódica corrige o sub-registro depois
            logger.warning(f"Não foi possível gravar a NF-e {result['ref']} na venda {venda_id}: {e}")

    # --- Consulta ---

    def consultar(self, ref: Optional[str]) -> Dict[str, Any]:
        client = self._client(self.settings.selected)
        if not ref:
            raise ValidationError("Referência obrigatória na query (?ref=...)")
        response = client.consultar(ref)
        if response.is_error:
            message = extract_error_message(response.data, "Erro ao consultar a NF-e.")
            logger.warning(f"Consulta da NF-e {ref} falhou ({response.status_code}): {message}")
            raise _provider_error(response, message)
        return nfe_states.normalize_consulta(ref, response.data if isinstance(response.data, Mapping) else {})

    # --- Cancelamento ---

    def cancelar(self, body: Any) -> Dict[str, Any]:
        client = self._client(self.settings.selected)
        body = body if isinstance(body, Mapping) else {}
        ref, justificativa = body.get('ref'), body.get('justificativa')
        if not ref or not justificativa or len(str(justificativa)) < JUSTIFICATIVA_MINIMA:
            raise ValidationError("Referência e justificativa (mín. 15 caracteres) são obrigatórias.")

        logger.info(f"Solicitando cancelamento da NF-e {ref}.")
        response = client.cancelar(str(ref), str(justificativa))
        data = response.data if isinstance(response.data, Mapping) else {}
        if response.is_error or data.get('status') == 'erro_cancelamento':
            message = data.get('mensagem') or "Erro ao cancelar NF-e."
            logger.warning(f"Cancelamento da NF-e {ref} recusado ({response.status_code}): {message}")
            raise _provider_error(response, message)

        return {
            'ref': ref,
            'status': data.get('status') or 'cancelado',
            'mensagem_sefaz': data.get('mensagem_sefaz') or '',
            'erros': data.get('erros') or [],
        }

    # --- Pré-visualização ---

    def preview(self, body: Any) -> bytes:
        """
        Emite em homologação com uma referência temporária, baixa o DANFE e exclui o
        registro no provedor. Nada é gravado neste sistema.
        """
        client = self._client(self.settings.homologacao)
        body = self._require_parts(body, "Dados insuficientes para gerar o preview.")
        payload = self._build_payload(body, client.ambiente)
        ref = f"preview_{body['venda'].get('id') or int(time.time() * 1000)}"

        response = client.emitir(ref, payload)
        if response.is_error:
            raise _provider_error(response, extract_error_message(response.data, "Falha ao processar o preview de NF-e."))
        data = response.data if isinstance(response.data, Mapping) else {}
        nota_ref = data.get('referencia') or data.get('ref') or ref

        try:
            pdf = client.baixar_pdf(nota_ref)
            if pdf.is_error:
                raise _provider_error(pdf, extract_error_message(pdf.data, "Falha ao obter o DANFE do preview."))
            return pdf.content
        finally:
            self._excluir_preview(client, nota_ref)

    @staticmethod
    def _excluir_preview(client, ref: str) -> None:
        try:
            resposta = client.excluir(ref)
        except FiscalProviderError as e:
            logger.warning(f"Falha ao excluir a NF-e de preview {ref}: {e}")
            return
        if resposta.is_error:
            logger.warning(f"Provedor recusou a exclusão da NF-e de preview {ref} ({resposta.status_code}).")

    # --- DANFE ---

    def danfe(self, ref: str) -> bytes:
        client = self._client(self.settings.selected)
        if not ref:
            raise ValidationError("Referência obrigatória.")
        response = client.baixar_pdf(ref)
        if response.is_error:
            raise _provider_error(response, extract_error_message(response.data, "Não foi possível obter o DANFE."))
        return response.content
