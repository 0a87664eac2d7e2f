import pytest

from conftest import criar_cliente, criar_produto, venda_payload
from gestao.api.errors import BusinessRuleError, InsufficientStockError, NotFoundError, ValidationError


def test_cash_sale_lowers_stock_and_is_paid(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=10)

    venda = services['venda_service'].registrar_venda(venda_payload(cliente, [(produto, 4)]))

    assert venda['status'] == 'Paga'
    assert venda['cliente_nome'] == cliente['nome_razao_social']
    assert venda['produtos'][0]['quantidade'] == 4
    assert services['produto_service'].get(produto['id'])['quantidade'] == 6

    saida = services['estoque_service'].historico(produto['id'])[0]
    assert saida['tipo'] == 'saida'
    assert saida['venda_id'] == venda['id']
    assert saida['motivo'] == f"Venda para {cliente['nome_razao_social']} (Ref: {venda['id']})"
    assert services['conta_receber_service'].list() == []


def test_credit_sale_creates_receivable(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=10)
    payload = venda_payload(cliente, [(produto, 2)], condicao='A_PRAZO',
                            data_vencimento='2024-07-15', valor_final=48.0)

    venda = services['venda_service'].registrar_venda(payload)

    assert venda['status'] == 'Pendente'
    [conta] = services['conta_receber_service'].list()
    assert conta['venda_id'] == venda['id']
    assert conta['valor'] == 48.0
    assert conta['status'] == 'Pendente'
    assert conta['data_vencimento'] == '2024-07-15'


def test_credit_sale_requires_due_date(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=10)
    with pytest.raises(ValidationError) as exc:
        services['venda_service'].registrar_venda(venda_payload(cliente, [(produto, 1)], condicao='A_PRAZO'))
    assert exc.value.message == 'A data de vencimento é obrigatória para vendas a prazo.'


def test_insufficient_stock_on_any_item_writes_nothing(services):
    cliente = criar_cliente(services)
    picanha = criar_produto(services, 'Picanha', quantidade=10)
    costela = criar_produto(services, 'Costela', quantidade=1)

    with pytest.raises(InsufficientStockError) as exc:
        services['venda_service'].registrar_venda(venda_payload(cliente, [(picanha, 3), (costela, 2)]))

    assert exc.value.status_code == 409
    assert exc.value.message.startswith('Estoque insuficiente para "Costela". Disponível: 1')
    assert services['venda_service'].list() == []
    assert services['produto_service'].get(picanha['id'])['quantidade'] == 10
    assert services['produto_service'].get(costela['id'])['quantidade'] == 1
    assert len(services['estoque_service'].historico()) == 2


def test_repeated_product_lines_are_checked_together(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=5)

    with pytest.raises(InsufficientStockError):
        services['venda_service'].registrar_venda(venda_payload(cliente, [(produto, 3), (produto, 3)]))
    assert services['produto_service'].get(produto['id'])['quantidade'] == 5


def test_unknown_product_or_client_is_not_found(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=5)
    fantasma = dict(produto, id=999, nome='Fantasma')

    with pytest.raises(NotFoundError) as exc:
        services['venda_service'].registrar_venda(venda_payload(cliente, [(produto, 1), (fantasma, 1)]))
    assert exc.value.message == 'Produto "Fantasma" não encontrado no estoque.'

    with pytest.raises(NotFoundError):
        services['venda_service'].registrar_venda(venda_payload(dict(cliente, id=999), [(produto, 1)]))
    assert services['produto_service'].get(produto['id'])['quantidade'] == 5


def test_sale_republishes_sales_and_products(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=5)
    vendas, produtos = [], []
    with services['venda_service'].subscribe(vendas.append), services['produto_service'].subscribe(produtos.append):
        services['venda_service'].registrar_venda(venda_payload(cliente, [(produto, 1)]))
    assert len(vendas[-1]) == 1
    assert produtos[-1][0]['quantidade'] == 4


def test_set_status(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=5)
    venda = services['venda_service'].registrar_venda(venda_payload(cliente, [(produto, 1)]))
    assert services['venda_service'].set_status(venda['id'], 'Pendente')['status'] == 'Pendente'
    with pytest.raises(ValidationError):
        services['venda_service'].set_status(venda['id'], 'Cancelada')


def test_nfe_sub_record_follows_state_machine(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=5)
    vendas = services['venda_service']
    venda = vendas.registrar_venda(venda_payload(cliente, [(produto, 1)]))

    with pytest.raises(BusinessRuleError):
        vendas.registrar_nfe(venda['id'], {'status': 'autorizada'})

    vendas.registrar_nfe(venda['id'], {'status': 'processando_autorizacao'})
    atualizada = vendas.registrar_nfe(venda['id'], {'status': 'autorizado', 'chave': 'NFe35'})
    assert atualizada['nfe']['status'] == 'autorizada'
    assert atualizada['nfe']['chave'] == 'NFe35'
    assert atualizada['nfe']['id'] == str(venda['id'])

    cancelada = vendas.registrar_nfe(venda['id'], {'status': 'cancelada'})
    assert cancelada['nfe']['status'] == 'cancelada'
    with pytest.raises(BusinessRuleError):
        vendas.registrar_nfe(venda['id'], {'status': 'processando'})


def test_nfe_read_from_provider_may_skip_processing(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=5)
    venda = services['venda_service'].registrar_venda(venda_payload(cliente, [(produto, 1)]))

    atualizada = services['venda_service'].registrar_nfe(venda['id'], {'status': 'autorizada'}, do_provedor=True)
    assert atualizada['nfe']['status'] == 'autorizada'


def test_nfe_requires_status(services):
    with pytest.raises(ValidationError):
        services['venda_service'].registrar_nfe(1, {'chave': 'x'})
    with pytest.raises(NotFoundError):
        services['venda_service'].registrar_nfe(999, {'status': 'processando'})


def test_custom_sale_date_is_kept(services):
    cliente = criar_cliente(services)
    produto = criar_produto(services, quantidade=5)
    venda = services['venda_service'].registrar_venda(
        venda_payload(cliente, [(produto, 1)], data='2024-03-02T10:00:00+00:00'))
    assert venda['data'].startswith('2024-03-02')
