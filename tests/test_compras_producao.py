from datetime import date, datetime, timezone

import pytest

from conftest import criar_conta_bancaria, criar_fornecedor, criar_funcionario, criar_produto
from gestao.api.errors import BusinessRuleError, NotFoundError, ValidationError
from gestao.services.abate_service import gerar_lote_id
from gestao.services.compra_service import datas_vencimento, dividir_parcelas


def _compra(fornecedor, conta, **extra):
    data = {
        'fornecedor_id': fornecedor['id'],
        'nota_fiscal': '4521',
        'data': '2024-01-31',
        'itens': [{'produto_id': 1, 'produto_nome': 'Boi gordo', 'quantidade': 10, 'custo_unitario': 100}],
        'valor_total': 1000,
        'conta_bancaria_id': conta['id'],
        'condicao_pagamento': 'A_VISTA',
    }
    data.update(extra)
    return data


def _abate(fornecedor, **extra):
    data = {
        'data': '2024-05-10T08:00:00Z',
        'fornecedor_id': fornecedor['id'],
        'numero_animais': 12,
        'custo_por_animal': 2500.5,
        'condenado': 1,
    }
    data.update(extra)
    return data


def test_installments_keep_rounding_difference_in_last():
    assert dividir_parcelas(1000, 3) == [333.33, 333.33, 333.34]
    assert dividir_parcelas(100, 1) == [100.0]
    assert sum(dividir_parcelas(999.99, 7)) == pytest.approx(999.99)


def test_installment_due_dates_follow_month_end():
    assert datas_vencimento(date(2024, 1, 31), 4) == [
        date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]
    assert datas_vencimento(date(2024, 12, 15), 2) == [date(2024, 12, 15), date(2025, 1, 15)]


def test_lote_id_uses_epoch_milliseconds():
    assert gerar_lote_id(datetime(2024, 5, 10, 8, tzinfo=timezone.utc)) == 'LOTE-1715328000000'
    assert gerar_lote_id(datetime(2024, 5, 10, 8)) == 'LOTE-1715328000000'


def test_cash_purchase_creates_no_payables(services):
    compra = services['compra_service'].add(_compra(criar_fornecedor(services), criar_conta_bancaria(services)))
    assert compra['status'] == 'ativo'
    assert compra['itens'][0]['produto_nome'] == 'Boi gordo'
    assert services['conta_pagar_service'].list() == []


def test_credit_purchase_splits_payables_monthly(services):
    payload = _compra(criar_fornecedor(services), criar_conta_bancaria(services),
                      condicao_pagamento='A_PRAZO', numero_parcelas=3, data_primeiro_vencimento='2024-01-31')
    compra = services['compra_service'].add(payload)

    parcelas = services['conta_pagar_service'].list()
    assert [p['valor'] for p in parcelas] == [333.33, 333.33, 333.34]
    assert [p['data_vencimento'] for p in parcelas] == ['2024-01-31', '2024-02-29', '2024-03-31']
    assert [p['descricao'] for p in parcelas] == [f"Compra NF 4521 - parcela {i}/3" for i in (1, 2, 3)]
    assert {p['compra_id'] for p in parcelas} == {compra['id']}
    assert {p['status'] for p in parcelas} == {'Pendente'}


def test_credit_purchase_requires_installment_data(services):
    payload = _compra(criar_fornecedor(services), criar_conta_bancaria(services), condicao_pagamento='A_PRAZO')
    with pytest.raises(ValidationError):
        services['compra_service'].add(payload)


def test_purchase_with_unknown_supplier_is_not_found(services):
    payload = _compra({'id': 404}, criar_conta_bancaria(services))
    with pytest.raises(NotFoundError):
        services['compra_service'].add(payload)
    assert services['compra_service'].list() == []


def test_abate_creates_payable_for_the_lot(services):
    fornecedor = criar_fornecedor(services)
    abate = services['abate_service'].lancar_abate(_abate(fornecedor))

    assert abate['lote_id'] == 'LOTE-1715328000000'
    assert abate['status'] == 'Aguardando Processamento'
    assert abate['custo_total'] == 30006.0

    [conta] = services['conta_pagar_service'].list()
    assert conta['abate_id'] == abate['id']
    assert conta['valor'] == 30006.0
    assert conta['descricao'] == 'Referente ao abate do LOTE-1715328000000'
    assert conta['data_vencimento'] == '2024-05-10'


def test_abate_update_recomputes_total(services):
    abate = services['abate_service'].lancar_abate(_abate(criar_fornecedor(services)))
    atualizado = services['abate_service'].update(abate['id'], {'numero_animais': 10})
    assert atualizado['custo_total'] == 25005.0


def test_cancelled_abate_is_hidden_from_default_list(services):
    abates = services['abate_service']
    abate = abates.lancar_abate(_abate(criar_fornecedor(services)))
    abates.set_status(abate['id'], 'Cancelado')
    assert abates.list() == []
    assert len(abates.list(include_inactive=True)) == 1


def _producao(abate, responsavel, produtos, **extra):
    data = {
        'data': '2024-05-11T09:00:00Z',
        'responsavel_id': responsavel['id'],
        'abate_id': abate['id'],
        'produtos': [
            {'produto_id': p['id'], 'produto_nome': p['nome'], 'quantidade': qtd, 'perda': 0.5}
            for p, qtd in produtos
        ],
    }
    data.update(extra)
    return data


def test_production_moves_stock_and_finalizes_abate(services):
    abate = services['abate_service'].lancar_abate(_abate(criar_fornecedor(services)))
    responsavel = criar_funcionario(services)
    picanha = criar_produto(services, 'Picanha')
    costela = criar_produto(services, 'Costela')

    producao = services['producao_service'].registrar_producao(_producao(
        abate, responsavel, [(picanha, 18.5), (costela, 0)],
        lotes_gerados=[{'produto_id': picanha['id'], 'codigo': 'PIC-0511', 'quantidade': 18.5,
                        'data_producao': '2024-05-11', 'data_validade': '2024-06-11'}],
    ))

    assert producao['lote'] == abate['lote_id']
    assert [l['codigo'] for l in producao['lotes_gerados']] == ['PIC-0511']
    assert services['produto_service'].get(picanha['id'])['quantidade'] == 18.5
    assert services['produto_service'].get(costela['id'])['quantidade'] == 0
    assert services['abate_service'].get(abate['id'])['status'] == 'Finalizado'

    [entrada] = services['estoque_service'].historico(picanha['id'])
    assert entrada['tipo'] == 'entrada'
    assert entrada['motivo'] == f"Produção {abate['lote_id']}"
    assert entrada['producao_id'] == producao['id']
    assert services['estoque_service'].historico(costela['id']) == []

    detalhe = services['producao_service'].get(producao['id'])
    assert detalhe['lotes_gerados'][0]['quantidade'] == 18.5


def test_second_production_for_same_abate_is_refused(services):
    abate = services['abate_service'].lancar_abate(_abate(criar_fornecedor(services)))
    responsavel = criar_funcionario(services)
    produto = criar_produto(services, 'Picanha')
    payload = _producao(abate, responsavel, [(produto, 5)], lote='LOTE-MANUAL')

    primeira = services['producao_service'].registrar_producao(payload)
    assert primeira['lote'] == 'LOTE-MANUAL'

    with pytest.raises(BusinessRuleError) as exc:
        services['producao_service'].registrar_producao(payload)
    assert exc.value.status_code == 409
    assert exc.value.message == 'Este abate já foi finalizado ou cancelado.'
    assert services['produto_service'].get(produto['id'])['quantidade'] == 5
    assert len(services['producao_service'].list()) == 1


def test_production_failure_rolls_back(services):
    abate = services['abate_service'].lancar_abate(_abate(criar_fornecedor(services)))
    responsavel = criar_funcionario(services)
    produto = criar_produto(services, 'Picanha')
    fantasma = {'id': 999, 'nome': 'Fantasma'}

    with pytest.raises(NotFoundError):
        services['producao_service'].registrar_producao(_producao(abate, responsavel, [(produto, 5), (fantasma, 1)]))

    assert services['abate_service'].get(abate['id'])['status'] == 'Aguardando Processamento'
    assert services['produto_service'].get(produto['id'])['quantidade'] == 0
    assert services['producao_service'].list() == []


def test_production_items_cannot_be_edited(services):
    abate = services['abate_service'].lancar_abate(_abate(criar_fornecedor(services)))
    producao = services['producao_service'].registrar_producao(
        _producao(abate, criar_funcionario(services), [(criar_produto(services), 1)]))

    with pytest.raises(ValidationError):
        services['producao_service'].update(producao['id'], {'produtos': []})
    atualizada = services['producao_service'].update(producao['id'], {'descricao': 'Desossa completa'})
    assert atualizada['descricao'] == 'Desossa completa'
