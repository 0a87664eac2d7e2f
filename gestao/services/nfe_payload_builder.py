# gestao/services/nfe_payload_builder.py
# Monta o corpo da requisição de emissão do Focus NFe a partir da venda, da empresa,
# do cliente e dos cadastros de produtos e unidades.

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from gestao.domain.produto import TIPO_VENDA
from gestao.utils.data_conversion import safe_float
from gestao.utils.formatters import only_digits
from gestao.utils.logger import logger
from gestao.api.errors import ValidationError

AMBIENTE_PRODUCAO = 1
AMBIENTE_HOMOLOGACAO = 2

NOME_DESTINATARIO_HOMOLOGACAO = "NF-E EMITIDA EM AMBIENTE DE HOMOLOGACAO - SEM VALOR FISCAL"

FORMAS_PAGAMENTO = {
    'Dinheiro': '01',
    'Cheque': '02',
    'Cartão de Crédito': '03',
    'Cartão de Débito': '04',
    'Boleto/Prazo': '15',
    'PIX': '17',
}
FORMA_PAGAMENTO_OUTROS = '99'

# (uf, cidade) -> {'nome': ..., 'codigo_ibge': ...} ou None
MunicipioLookup = Callable[[str, str], Optional[Mapping[str, Any]]]


def _is_contribuinte(cliente: Mapping[str, Any]) -> bool:
    ie = cliente.get('inscricao_estadual')
    return bool(ie) and ie != 'ISENTO'


def _indicador_ie(cliente: Mapping[str, Any]) -> str:
    """Tabela 17 da SEFAZ: 1 contribuinte, 2 isento, 9 não contribuinte."""
    if cliente.get('tipo_pessoa') != 'juridica':
        return '9'
    ie = cliente.get('inscricao_estadual')
    if ie and ie != 'ISENTO':
        return '1'
    if ie == 'ISENTO':
        return '2'
    return '9'


def build_pagamentos(venda: Mapping[str, Any]) -> List[Dict[str, Any]]:
    valor = venda.get('valor_final')
    if valor is None:
        valor = venda.get('valor_total')
    return [{
        'forma_pagamento': FORMAS_PAGAMENTO.get(venda.get('metodo_pagamento'), FORMA_PAGAMENTO_OUTROS),
        'valor_pagamento': round(safe_float(valor) or 0.0, 2),
    }]


def build_itens(venda: Mapping[str, Any], produtos: Sequence[Mapping[str, Any]],
                unidades: Sequence[Mapping[str, Any]], empresa: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Um item por linha da venda. Só produtos do tipo VENDA com NCM de 8 dígitos são aceitos."""
    produtos_por_id = {p.get('id'): p for p in produtos}
    siglas = {u.get('id'): u.get('sigla') for u in unidades}
    fiscal = empresa.get('configuracao_fiscal') or {}
    aliquota = safe_float(fiscal.get('aliquota_icms_padrao')) or 0.0

    itens = []
    for index, item in enumerate(venda.get('produtos') or [], start=1):
        nome = item.get('produto_nome')
        produto = produtos_por_id.get(item.get('produto_id'))
        if not produto or produto.get('tipo_produto') != TIPO_VENDA:
            raise ValidationError(f"Produto inválido ou não marcado para venda: \"{nome}\".")
        ncm = produto.get('ncm') or ''
        if len(ncm) != 8:
            raise ValidationError(f"Produto \"{nome}\" com NCM inválido (deve ter 8 dígitos).")

        sigla = siglas.get(produto.get('unidade_id'))
        unidade = sigla.upper() if sigla else 'UN'

        cfop = produto.get('cfop') or fiscal.get('cfop_padrao')
        if not cfop:
            raise ValidationError(f"Produto \"{nome}\" sem CFOP configurado.")
        cst = produto.get('cest') or fiscal.get('cst_padrao')

        quantidade = safe_float(item.get('quantidade')) or 0.0
        preco = safe_float(item.get('preco_unitario')) or 0.0
        valor_bruto = quantidade * preco

        itens.append({
            'numero_item': index,
            'codigo_produto': produto.get('codigo') or item.get('produto_id'),
            'descricao': nome,
            'codigo_ncm': ncm,
            'cfop': cfop,
            'unidade_comercial': unidade,
            'unidade_tributavel': unidade,
            'quantidade_comercial': round(quantidade, 4),
            'valor_unitario_comercial': round(preco, 10),
            'quantidade_tributavel': round(quantidade, 4),
            'valor_unitario_tributavel': round(preco, 10),
            'valor_bruto': round(valor_bruto, 2),
            'icms_origem': '0',
            'icms_situacao_tributaria': cst,
            'icms_modalidade_base_calculo': '3',
            'icms_base_calculo': round(valor_bruto, 2),
            'icms_aliquota': aliquota,
            'icms_valor': round(valor_bruto * aliquota / 100, 2),
            'pis_situacao_tributaria': '07',
            'pis_valor': 0.0,
            'cofins_situacao_tributaria': '07',
            'cofins_valor': 0.0,
        })
    return itens


def build_nfe_payload(venda: Mapping[str, Any], empresa: Mapping[str, Any], cliente: Mapping[str, Any],
                      produtos: Sequence[Mapping[str, Any]], unidades: Sequence[Mapping[str, Any]],
                      ambiente: int, municipio_lookup: MunicipioLookup,
                      now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Monta o payload de emissão.

    Args:
        ambiente: 1 (produção) ou 2 (homologação).
        municipio_lookup: resolve o código IBGE do município do destinatário.

    Raises:
        ValidationError: endereço ou município do cliente inválido, ou produto fora das regras fiscais.
    """
    endereco = cliente.get('endereco')
    if not endereco:
        raise ValidationError("Endereço do cliente é obrigatório para emissão da NF-e.")
    if not isinstance(endereco, Mapping):
        raise ValidationError("Endereço do cliente inválido.")
    uf, cidade = endereco.get('uf'), endereco.get('cidade')
    if not uf or not cidade:
        raise ValidationError("UF e Cidade do endereço do cliente são obrigatórios.")

    municipio = municipio_lookup(uf, cidade)
    if not municipio:
        raise ValidationError(f"Município do destinatário é inválido: \"{cidade} - {uf}\"")

    empresa_endereco = empresa.get('endereco') or {}
    if not isinstance(empresa_endereco, Mapping):
        raise ValidationError("Endereço da empresa inválido.")
    fiscal = empresa.get('configuracao_fiscal') or {}
    juridica = cliente.get('tipo_pessoa') == 'juridica'
    documento = only_digits(cliente.get('cpf_cnpj'))

    payload = {
        'natureza_operacao': "Venda de mercadoria",
        'ambiente': ambiente,
        'data_emissao': (now or datetime.now(timezone.utc)).isoformat(),
        'tipo_documento': 1,
        'finalidade_emissao': 1,
        'consumidor_final': 0 if _is_contribuinte(cliente) else 1,
        'presenca_comprador': 1,
        'id_destino': 1 if empresa_endereco.get('uf') == uf else 2,
        'cnpj_emitente': only_digits(empresa.get('cnpj')),
        'nome_emitente': empresa.get('razao_social'),
        'rua_emitente': empresa_endereco.get('logradouro'),
        'numero_emitente': empresa_endereco.get('numero'),
        'bairro_emitente': empresa_endereco.get('bairro'),
        'municipio_emitente': empresa_endereco.get('cidade'),
        'uf_emitente': empresa_endereco.get('uf'),
        'cep_emitente': only_digits(empresa_endereco.get('cep')),
        'inscricao_estadual_emitente': empresa.get('inscricao_estadual'),
        'regime_tributario_emitente': int(empresa.get('regime_tributario') or 3),
        'nome_destinatario': (NOME_DESTINATARIO_HOMOLOGACAO if ambiente == AMBIENTE_HOMOLOGACAO
                              else cliente.get('nome_razao_social')),
        'logradouro_destinatario': endereco.get('logradouro'),
        'numero_destinatario': endereco.get('numero'),
        'bairro_destinatario': endereco.get('bairro'),
        'municipio_destinatario': cidade,
        'uf_destinatario': uf,
        'cep_destinatario': only_digits(endereco.get('cep')) or None,
        'codigo_municipio_destinatario': municipio.get('codigo_ibge'),
        'indicador_inscricao_estadual': _indicador_ie(cliente),
        'modalidade_frete': 9,
        'items': build_itens(venda, produtos, unidades, empresa),
        'informacoes_adicionais_contribuinte': fiscal.get('informacoes_complementares'),
        'formas_pagamento': build_pagamentos(venda),
    }
    if juridica:
        payload['cnpj_destinatario'] = documento
        payload['inscricao_estadual_destinatario'] = cliente.get('inscricao_estadual')
    else:
        payload['cpf_destinatario'] = documento

    if ambiente == AMBIENTE_HOMOLOGACAO:
        logger.debug(f"[HOMOLOGAÇÃO] Payload NF-e montado para a venda {venda.get('id')}: {payload}")
    return payload
