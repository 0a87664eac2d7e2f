from datetime import datetime, timezone

import pytest

from gestao.api.errors import ValidationError
from gestao.services.nfe_payload_builder import (
    build_nfe_payload, build_pagamentos, build_itens, NOME_DESTINATARIO_HOMOLOGACAO,
)

EMPRESA = {
    'razao_social': 'Frigorífico Exemplo LTDA',
    'cnpj': '11.222.333/0001-81',
    'inscricao_estadual': '123456789',
    'regime_tributario': '1',
    'endereco': {'logradouro': 'Av. Industrial', 'numero': '500', 'bairro': 'Distrito', 'cidade': 'São Paulo', 'uf': 'SP', 'cep': '01001-000'},
    'configuracao_fiscal': {'cfop_padrao': '5101', 'cst_padrao': '102', 'aliquota_icms_padrao': 12, 'informacoes_complementares': 'Obs'},
}

CLIENTE_PF = {
    'nome_razao_social': 'Maria Souza',
    'tipo_pessoa': 'fisica',
    'cpf_cnpj': '529.982.247-25',
    'endereco': {'logradouro': 'Rua A', 'numero': '1', 'bairro': 'Centro', 'cidade': 'Sao Paulo', 'uf': 'SP', 'cep': '01001-000'},
}

PRODUTOS = [
    {'id': 1, 'tipo_produto': 'VENDA', 'ncm': '16010000', 'cfop': '5102', 'codigo': 'LT-01', 'unidade_id': 7},
    {'id': 2, 'tipo_produto': 'USO_INTERNO', 'ncm': None, 'unidade_id': None},
]
UNIDADES = [{'id': 7, 'sigla': 'kg'}]

VENDA = {
    'id': 99,
    'metodo_pagamento': 'PIX',
    'valor_total': 50.0,
    'produtos': [{'produto_id': 1, 'produto_nome': 'Linguiça', 'quantidade': 2, 'preco_unitario': 25.0}],
}


def _lookup(uf, cidade):
    return {'nome': 'São Paulo', 'codigo_ibge': '3550308'} if uf == 'SP' else None


def test_payload_in_homologation_masks_recipient_name():
    payload = build_nfe_payload(VENDA, EMPRESA, CLIENTE_PF, PRODUTOS, UNIDADES, ambiente=2,
                                municipio_lookup=_lookup, now=datetime(2024, 5, 10, tzinfo=timezone.utc))
    assert payload['nome_destinatario'] == NOME_DESTINATARIO_HOMOLOGACAO
    assert payload['cpf_destinatario'] == '52998224725'
    assert 'cnpj_destinatario' not in payload
    assert payload['cnpj_emitente'] == '11222333000181'
    assert payload['codigo_municipio_destinatario'] == '3550308'
    assert payload['id_destino'] == 1
    assert payload['consumidor_final'] == 1
    assert payload['indicador_inscricao_estadual'] == '9'
    assert payload['regime_tributario_emitente'] == 1
    assert payload['data_emissao'].startswith('2024-05-10')


def test_payload_in_production_uses_client_name():
    payload = build_nfe_payload(VENDA, EMPRESA, CLIENTE_PF, PRODUTOS, UNIDADES, ambiente=1, municipio_lookup=_lookup)
    assert payload['nome_destinatario'] == 'Maria Souza'


def test_items_use_product_fiscal_data():
    itens = build_itens(VENDA, PRODUTOS, UNIDADES, EMPRESA)
    assert len(itens) == 1
    item = itens[0]
    assert item['numero_item'] == 1
    assert item['codigo_produto'] == 'LT-01'
    assert item['cfop'] == '5102'
    assert item['unidade_comercial'] == 'KG'
    assert item['valor_bruto'] == 50.0
    assert item['icms_valor'] == 6.0
    assert item['icms_situacao_tributaria'] == '102'


def test_payment_code_and_final_value():
    assert build_pagamentos({'metodo_pagamento': 'PIX', 'valor_total': 50}) == [{'forma_pagamento': '17', 'valor_pagamento': 50.0}]
    pagamento = build_pagamentos({'metodo_pagamento': 'Vale', 'valor_total': 50, 'valor_final': 48.5})[0]
    assert pagamento == {'forma_pagamento': '99', 'valor_pagamento': 48.5}


def test_product_not_for_sale_is_rejected():
    venda = dict(VENDA, produtos=[{'produto_id': 2, 'produto_nome': 'Faca', 'quantidade': 1, 'preco_unitario': 10}])
    with pytest.raises(ValidationError) as exc:
        build_itens(venda, PRODUTOS, UNIDADES, EMPRESA)
    assert exc.value.message == 'Produto inválido ou não marcado para venda: "Faca".'


def test_product_with_short_ncm_is_rejected():
    produtos = [dict(PRODUTOS[0], ncm='1601')]
    with pytest.raises(ValidationError):
        build_itens(VENDA, produtos, UNIDADES, EMPRESA)


def test_unknown_municipality_is_rejected():
    cliente = dict(CLIENTE_PF, endereco=dict(CLIENTE_PF['endereco'], uf='RJ', cidade='Atlântida'))
    with pytest.raises(ValidationError) as exc:
        build_nfe_payload(VENDA, EMPRESA, cliente, PRODUTOS, UNIDADES, ambiente=2, municipio_lookup=_lookup)
    assert 'Atlântida - RJ' in exc.value.message


def test_legal_entity_recipient_with_state_registration():
    cliente = dict(CLIENTE_PF, tipo_pessoa='juridica', cpf_cnpj='11.222.333/0001-81', inscricao_estadual='987654')
    payload = build_nfe_payload(VENDA, EMPRESA, cliente, PRODUTOS, UNIDADES, ambiente=1, municipio_lookup=_lookup)
    assert payload['cnpj_destinatario'] == '11222333000181'
    assert payload['inscricao_estadual_destinatario'] == '987654'
    assert payload['indicador_inscricao_estadual'] == '1'
    assert payload['consumidor_final'] == 0
