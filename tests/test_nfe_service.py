import pytest

from conftest import FakeFocusProvider, make_config
from gestao.api.errors import ConfigurationError, FiscalProviderError, ValidationError
from gestao.integrations.focus_nfe_client import FocusResponse
from gestao.services.nfe_service import NfeService, extract_error_message
from test_nfe_payload import EMPRESA, CLIENTE_PF, PRODUTOS, UNIDADES, VENDA


def _lookup(uf, cidade):
    return {'nome': 'São Paulo', 'codigo_ibge': '3550308'}


def _service(tmp_path, **overrides):
    provider = FakeFocusProvider()
    settings = make_config(tmp_path / 'unused.db', **overrides).nfe_settings()
    return NfeService(settings, municipio_lookup=_lookup, client_factory=provider), provider


def _body(**extra):
    body = {'venda': VENDA, 'empresa': EMPRESA, 'cliente': CLIENTE_PF,
            'todosProdutos': PRODUTOS, 'todasUnidades': UNIDADES}
    body.update(extra)
    return body


def test_extract_error_message_precedence():
    assert extract_error_message({'mensagem': 'A', 'message': 'B'}) == 'A'
    assert extract_error_message({'message': 'B'}) == 'B'
    assert extract_error_message({'erros': [{'mensagem': 'x'}, {'mensagem': 'y'}]}) == 'x | y'
    assert extract_error_message({}) == 'Erro desconhecido ao comunicar com o servidor de NF-e.'


def test_emitir_sends_payload_with_sale_reference(tmp_path):
    service, provider = _service(tmp_path)
    result = service.emitir(_body())

    client = provider.clients['HOMOLOGACAO']
    assert client.call_names() == ['consultar', 'emitir']
    _, ref, payload = client.calls[1]
    assert ref == '99'
    assert payload['ambiente'] == 2
    assert result['message'] == 'NF-e enviada para processamento com sucesso.'
    assert result['ref'] == '99'
    assert result['status'] == 'processando_autorizacao'


def test_emitir_is_idempotent_when_note_exists(tmp_path):
    service, provider = _service(tmp_path)
    client = provider(service.settings.selected)
    client.responses['consultar'] = FocusResponse(200, {'status': 'autorizado', 'referencia': '99'})

    result = service.emitir(_body())

    assert result['message'] == 'NF-e já existe para essa venda.'
    assert result['status'] == 'autorizado'
    assert 'emitir' not in client.call_names()


def test_emitir_with_missing_parts_is_rejected(tmp_path):
    service, provider = _service(tmp_path)
    with pytest.raises(ValidationError) as exc:
        service.emitir({'venda': VENDA})
    assert exc.value.status_code == 400
    assert exc.value.message == 'Dados insuficientes para emitir a nota.'


@pytest.mark.parametrize('extra', [
    {'venda': 'abc'},
    {'cliente': ['nao', 'objeto']},
    {'todosProdutos': {'id': 1}},
    {'todasUnidades': ['KG']},
    {'venda': dict(VENDA, produtos='abc')},
])
def test_emitir_with_malformed_parts_is_rejected(tmp_path, extra):
    service, provider = _service(tmp_path)
    with pytest.raises(ValidationError) as exc:
        service.emitir(_body(**extra))
    assert exc.value.status_code == 400
    assert exc.value.message == 'Dados insuficientes para emitir a nota.'
    assert provider.clients['HOMOLOGACAO'].calls == []


def test_emitir_provider_rejection_keeps_upstream_status(tmp_path):
    service, provider = _service(tmp_path)
    client = provider(service.settings.selected)
    client.responses['emitir'] = FocusResponse(422, {'codigo': 'requisicao_invalida', 'mensagem': 'CNPJ do emitente não autorizado'})

    with pytest.raises(FiscalProviderError) as exc:
        service.emitir(_body())
    assert exc.value.status_code == 422
    assert exc.value.message == 'CNPJ do emitente não autorizado'
    assert exc.value.payload['codigo'] == 'requisicao_invalida'


def test_missing_provider_configuration_is_a_server_error(tmp_path):
    service, provider = _service(tmp_path, FOCUS_NFE_TOKEN_HOMOLOGACAO='')
    with pytest.raises(ConfigurationError) as exc:
        service.emitir(_body())
    assert exc.value.status_code == 500
    assert exc.value.message == 'Erro de configuração do servidor.'
    assert provider.clients == {}


def test_cancel_requires_fifteen_character_justification(tmp_path):
    service, provider = _service(tmp_path)
    with pytest.raises(ValidationError) as exc:
        service.cancelar({'ref': '99', 'justificativa': 'curta demais'})
    assert exc.value.status_code == 400
    assert provider.clients['HOMOLOGACAO'].calls == []


def test_cancel_success(tmp_path):
    service, provider = _service(tmp_path)
    result = service.cancelar({'ref': '99', 'justificativa': 'Pedido cancelado pelo cliente'})
    assert result == {'ref': '99', 'status': 'cancelado', 'mensagem_sefaz': 'Cancelamento homologado', 'erros': []}
    assert provider.clients['HOMOLOGACAO'].calls == [('cancelar', '99', 'Pedido cancelado pelo cliente')]


def test_cancel_refused_by_sefaz(tmp_path):
    service, provider = _service(tmp_path)
    provider(service.settings.selected).responses['cancelar'] = FocusResponse(
        200, {'status': 'erro_cancelamento', 'mensagem': 'Prazo de cancelamento expirado'})
    with pytest.raises(FiscalProviderError) as exc:
        service.cancelar({'ref': '99', 'justificativa': 'Pedido cancelado pelo cliente'})
    assert exc.value.status_code == 400
    assert exc.value.message == 'Prazo de cancelamento expirado'


def test_consultar_requires_ref(tmp_path):
    service, _ = _service(tmp_path)
    with pytest.raises(ValidationError):
        service.consultar('')


def test_consultar_normalizes_response(tmp_path):
    service, provider = _service(tmp_path)
    provider(service.settings.selected).responses['consultar'] = FocusResponse(
        200, {'status': 'autorizado', 'chave_nfe': 'NFe35', 'caminho_xml_nota_fiscal': '/x.xml'})
    consulta = service.consultar('99')
    assert consulta['ref'] == '99'
    assert consulta['chave'] == 'NFe35'
    assert consulta['url_xml'] == '/x.xml'


def test_preview_always_uses_homologation_and_cleans_up(tmp_path):
    service, provider = _service(tmp_path, NFE_AMBIENTE='PRODUCAO')

    pdf = service.preview(_body())

    assert pdf == b'%PDF-1.4 danfe'
    assert list(provider.clients) == ['HOMOLOGACAO']
    client = provider.clients['HOMOLOGACAO']
    assert client.call_names() == ['emitir', 'baixar_pdf', 'excluir']
    _, ref, payload = client.calls[0]
    assert ref == 'preview_99'
    assert payload['nome_destinatario'] == 'NF-E EMITIDA EM AMBIENTE DE HOMOLOGACAO - SEM VALOR FISCAL'


def test_preview_deletes_even_when_pdf_fails(tmp_path):
    service, provider = _service(tmp_path)
    client = provider(service.settings.homologacao)
    client.responses['baixar_pdf'] = FocusResponse(404, {'mensagem': 'DANFE indisponível'})

    with pytest.raises(FiscalProviderError):
        service.preview(_body())
    assert client.call_names()[-1] == 'excluir'


def test_danfe_returns_pdf_bytes(tmp_path):
    service, provider = _service(tmp_path, NFE_AMBIENTE='PRODUCAO')
    assert service.danfe('99') == b'%PDF-1.4 danfe'
    assert provider.clients['PRODUCAO'].calls == [('baixar_pdf', '99')]
