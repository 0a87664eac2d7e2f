import pytest

from conftest import criar_cliente, criar_conta_bancaria, criar_fornecedor, criar_produto, venda_payload
from gestao.api.errors import BusinessRuleError, NotFoundError, ValidationError


def _abate_com_conta(services, custo=500.0):
    fornecedor = criar_fornecedor(services)
    services['abate_service'].lancar_abate({
        'data': '2024-05-10T08:00:00Z', 'fornecedor_id': fornecedor['id'],
        'numero_animais': 1, 'custo_por_animal': custo,
    })
    [conta] = services['conta_pagar_service'].list()
    return conta


def _venda_a_prazo(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=10)
    venda = services['venda_service'].registrar_venda(
        venda_payload(cliente, [(produto, 4)], condicao='A_PRAZO', data_vencimento='2024-06-30'))
    [conta] = services['conta_receber_service'].list()
    return venda, conta


def test_paying_debits_bank_account(services):
    titulo = _abate_com_conta(services)
    banco = criar_conta_bancaria(services, saldo_inicial=1000)

    pago = services['conta_pagar_service'].pagar_conta(titulo['id'], {'conta_bancaria_id': banco['id'], 'data': '2024-05-20'})

    assert pago['status'] == 'Paga'
    assert pago['data_pagamento'] == '2024-05-20'
    assert pago['conta_bancaria_id'] == banco['id']
    assert services['conta_bancaria_service'].get(banco['id'])['saldo_atual'] == 500.0


def test_paying_twice_is_refused_without_touching_balance(services):
    titulo = _abate_com_conta(services)
    banco = criar_conta_bancaria(services, saldo_inicial=1000)
    contas = services['conta_pagar_service']
    contas.pagar_conta(titulo['id'], {'conta_bancaria_id': banco['id']})

    with pytest.raises(BusinessRuleError) as exc:
        contas.pagar_conta(titulo['id'], {'conta_bancaria_id': banco['id']})
    assert exc.value.status_code == 409
    assert services['conta_bancaria_service'].get(banco['id'])['saldo_atual'] == 500.0


def test_paying_may_leave_negative_balance(services):
    titulo = _abate_com_conta(services, custo=1500.0)
    banco = criar_conta_bancaria(services, saldo_inicial=1000)
    services['conta_pagar_service'].pagar_conta(titulo['id'], {'conta_bancaria_id': banco['id']})
    assert services['conta_bancaria_service'].get(banco['id'])['saldo_atual'] == -500.0


def test_paying_with_inactive_or_unknown_account_fails(services):
    titulo = _abate_com_conta(services)
    banco = criar_conta_bancaria(services)
    services['conta_bancaria_service'].set_status(banco['id'], 'inativa')
    contas = services['conta_pagar_service']

    with pytest.raises(BusinessRuleError):
        contas.pagar_conta(titulo['id'], {'conta_bancaria_id': banco['id']})
    with pytest.raises(NotFoundError):
        contas.pagar_conta(titulo['id'], {'conta_bancaria_id': 999})
    with pytest.raises(ValidationError):
        contas.pagar_conta(titulo['id'], {})
    assert contas.list()[0]['status'] == 'Pendente'


def test_receiving_credits_account_and_pays_the_sale(services):
    venda, titulo = _venda_a_prazo(services)
    banco = criar_conta_bancaria(services, saldo_inicial=0)

    recebido = services['conta_receber_service'].receber_conta(titulo['id'], {'conta_bancaria_id': banco['id']})

    assert recebido['status'] == 'Recebida'
    assert recebido['data_recebimento']
    assert services['conta_bancaria_service'].get(banco['id'])['saldo_atual'] == 100.0
    assert services['venda_service'].get(venda['id'])['status'] == 'Paga'

    with pytest.raises(BusinessRuleError):
        services['conta_receber_service'].receber_conta(titulo['id'], {'conta_bancaria_id': banco['id']})
    assert services['conta_bancaria_service'].get(banco['id'])['saldo_atual'] == 100.0


def test_list_filters_by_status(services):
    _venda_a_prazo(services)
    receber = services['conta_receber_service']
    assert len(receber.list(status='Pendente')) == 1
    assert receber.list(status='Recebida') == []


def test_manual_status_change(services):
    titulo = _abate_com_conta(services)
    contas = services['conta_pagar_service']
    assert contas.set_status(titulo['id'], 'Paga')['status'] == 'Paga'
    with pytest.raises(ValidationError):
        contas.set_status(titulo['id'], 'Recebida')
