from conftest import criar_cliente, criar_produto, venda_payload
from gestao.integrations.focus_nfe_client import FocusResponse


def _venda(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=5)
    return services['venda_service'].registrar_venda(venda_payload(cliente, [(produto, 1)]))


def _focus_client(services, focus):
    return focus(services['nfe_service'].settings.selected)


def test_sale_unknown_to_provider_is_not_a_failure(services, focus):
    venda = _venda(services)
    resumo = services['nfe_sync_service'].run_sync()
    assert resumo == {'verificadas': 1, 'atualizadas': 0, 'falhas': 0}
    assert _focus_client(services, focus).calls == [('consultar', str(venda['id']))]
    assert services['venda_service'].get(venda['id'])['nfe'] is None


def test_processing_note_becomes_authorized(services, focus):
    venda = _venda(services)
    services['venda_service'].registrar_nfe(venda['id'], {'status': 'processando'})
    _focus_client(services, focus).responses['consultar'] = FocusResponse(200, {
        'status': 'autorizado', 'chave_nfe': 'NFe3524', 'protocolo_autorizacao': '135240000',
        'caminho_xml_nota_fiscal': '/arquivos/nfe.xml', 'mensagem_sefaz': 'Autorizado o uso da NF-e',
    })

    resumo = services['nfe_sync_service'].run_sync()

    assert resumo == {'verificadas': 1, 'atualizadas': 1, 'falhas': 0}
    nfe = services['venda_service'].get(venda['id'])['nfe']
    assert nfe['status'] == 'autorizada'
    assert nfe['situacao'] == 'autorizado'
    assert nfe['chave'] == 'NFe3524'
    assert nfe['protocolo'] == '135240000'
    assert nfe['url_danfe'] == f"/pdf/{venda['id']}"

    assert services['nfe_sync_service'].run_sync() == {'verificadas': 0, 'atualizadas': 0, 'falhas': 0}


def test_note_found_for_sale_without_record_is_stored(services, focus):
    venda = _venda(services)
    _focus_client(services, focus).responses['consultar'] = FocusResponse(200, {'status': 'autorizado'})
    assert services['nfe_sync_service'].run_sync()['atualizadas'] == 1
    assert services['venda_service'].get(venda['id'])['nfe']['status'] == 'autorizada'


def test_unchanged_note_is_not_rewritten(services, focus):
    venda = _venda(services)
    services['venda_service'].registrar_nfe(venda['id'], {'status': 'processando'})
    _focus_client(services, focus).responses['consultar'] = FocusResponse(200, {'status': 'processando_autorizacao'})

    assert services['nfe_sync_service'].run_sync()['atualizadas'] == 1
    assert services['nfe_sync_service'].run_sync() == {'verificadas': 1, 'atualizadas': 0, 'falhas': 0}


def test_provider_failure_is_counted_and_cycle_continues(services, focus):
    _venda(services)
    _venda(services)
    _focus_client(services, focus).responses['consultar'] = FocusResponse(500, {'mensagem': 'Indisponível'})

    resumo = services['nfe_sync_service'].run_sync()

    assert resumo == {'verificadas': 2, 'atualizadas': 0, 'falhas': 2}


def test_cancelled_note_leaves_the_cycle(services, focus):
    venda = _venda(services)
    services['venda_service'].registrar_nfe(venda['id'], {'status': 'erro'})
    services['venda_service'].registrar_nfe(venda['id'], {'status': 'cancelada'})
    assert services['nfe_sync_service'].run_sync()['verificadas'] == 0
