# gestao/domain/nfe.py
# Estados da NF-e vinculada a uma venda e normalização das respostas do provedor.

from typing import Any, Dict, Optional

NAO_EMITIDA = 'nao_emitida'
PROCESSANDO = 'processando'
AUTORIZADA = 'autorizada'
REJEITADA = 'rejeitada'
ERRO = 'erro'
CANCELADA = 'cancelada'

ESTADOS = (NAO_EMITIDA, PROCESSANDO, AUTORIZADA, REJEITADA, ERRO, CANCELADA)
ESTADOS_NAO_FINAIS = (NAO_EMITIDA, PROCESSANDO, ERRO)

_PROVIDER_STATUS_MAP = {
    'processando_autorizacao': PROCESSANDO,
    'autorizado': AUTORIZADA,
    'erro_autorizacao': REJEITADA,
    'denegado': REJEITADA,
    'cancelado': CANCELADA,
    'erro': ERRO,
}

# Qualquer estado pode ir para ERRO (falha de comunicação).
_TRANSICOES = {
    NAO_EMITIDA: {PROCESSANDO},
    PROCESSANDO: {AUTORIZADA, REJEITADA},
    AUTORIZADA: {CANCELADA},
    REJEITADA: {PROCESSANDO},
    ERRO: {PROCESSANDO, AUTORIZADA, REJEITADA, CANCELADA},
    CANCELADA: set(),
}


def status_from_provider(provider_status: Optional[str]) -> str:
    """Mapeia o status do Focus NFe para o estado interno; desconhecido vira 'erro'."""
    if not provider_status:
        return ERRO
    return _PROVIDER_STATUS_MAP.get(str(provider_status).lower(), ERRO)


def can_transition(atual: Optional[str], novo: str) -> bool:
    atual = atual or NAO_EMITIDA
    if novo not in ESTADOS or atual not in ESTADOS:
        return False
    if atual == novo or novo == ERRO:
        return True
    return novo in _TRANSICOES[atual]


def normalize_consulta(ref: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Converte a resposta de consulta do provedor para os nomes de campo usados aqui."""
    return {
        'ref': data.get('referencia') or ref,
        'status': data.get('status'),
        'url_danfe': data.get('caminho_danfe') or None,
        'url_xml': data.get('caminho_xml_nota_fiscal') or None,
        'chave': data.get('chave_nfe') or None,
        'protocolo': data.get('protocolo_autorizacao') or None,
        'mensagem_sefaz': data.get('mensagem_sefaz') or None,
        'erros': data.get('erros') or [],
    }


def sub_registro_from_consulta(consulta: Dict[str, Any]) -> Dict[str, Any]:
    """Sub-registro fiscal gravado na venda a partir de uma consulta normalizada."""
    return {
        'id': consulta.get('ref'),
        'status': status_from_provider(consulta.get('status')),
        'situacao': consulta.get('status'),
        'url_danfe': f"/pdf/{consulta['ref']}" if consulta.get('ref') else consulta.get('url_danfe'),
        'url_xml': consulta.get('url_xml'),
        'chave': consulta.get('chave'),
        'protocolo': consulta.get('protocolo'),
        'mensagem_sefaz': consulta.get('mensagem_sefaz'),
    }
