import pytest

from conftest import criar_cliente, criar_conta_bancaria, criar_funcionario, criar_produto, criar_unidade
from gestao.api.errors import NotFoundError, ValidationError
from gestao.services.subscriptions import ChangeFeed


def _nomes(registros, campo='nome'):
    return [r[campo] for r in registros]


def test_list_is_sorted_case_insensitively_with_inactive_last(services):
    categorias = services['categoria_service']
    for nome in ('beta', 'Alfa', 'gama'):
        categorias.add({'nome': nome})
    alfa = next(c for c in categorias.list() if c['nome'] == 'Alfa')
    categorias.set_status(alfa['id'], 'inativo')

    assert _nomes(categorias.list()) == ['beta', 'gama']
    assert _nomes(categorias.list(include_inactive=True)) == ['beta', 'gama', 'Alfa']


def test_add_sets_active_status_and_creation_date(services):
    unidade = criar_unidade(services)
    assert unidade['status'] == 'ativo'
    assert unidade['created_at']
    assert services['unidade_service'].get(unidade['id'])['sigla'] == 'KG'


def test_invalid_payload_reports_field_errors(services):
    with pytest.raises(ValidationError) as exc:
        services['cargo_service'].add({'nome': 'ab'})
    assert exc.value.status_code == 400
    assert exc.value.payload[0]['campo'] == 'nome'


def test_invalid_status_is_rejected(services):
    unidade = criar_unidade(services)
    with pytest.raises(ValidationError):
        services['unidade_service'].set_status(unidade['id'], 'arquivado')


def test_unknown_record_is_not_found(services):
    with pytest.raises(NotFoundError):
        services['unidade_service'].update(999, {'nome': 'Litro'})


def test_update_applies_only_sent_fields(services):
    unidade = criar_unidade(services)
    atualizada = services['unidade_service'].update(unidade['id'], {'sigla': 'kg2'})
    assert atualizada['sigla'] == 'kg2'
    assert atualizada['nome'] == 'Quilograma'


def test_cliente_document_is_stored_masked(services):
    cliente = criar_cliente(services)
    assert cliente['cpf_cnpj'] == '529.982.247-25'
    assert cliente['endereco']['cidade'] == 'São Paulo'

    atualizado = services['cliente_service'].update(cliente['id'], {'cpf_cnpj': '11222333000181', 'tipo_pessoa': 'juridica'})
    assert atualizado['cpf_cnpj'] == '11.222.333/0001-81'


def test_cliente_with_invalid_cpf_is_rejected(services):
    with pytest.raises(ValidationError) as exc:
        criar_cliente(services, cpf_cnpj='12345678900')
    assert exc.value.message == 'CPF/CNPJ inválido.'


def test_cliente_cep_is_stored_masked(services):
    cliente = criar_cliente(services)
    assert cliente['endereco']['cep'] == '01001-000'

    with pytest.raises(ValidationError) as exc:
        criar_cliente(services, endereco={**cliente['endereco'], 'cep': '0100100'})
    assert exc.value.payload[0]['campo'].endswith('cep')


def test_cliente_email_is_optional_but_must_be_valid(services):
    sem_email = criar_cliente(services, email='')
    assert sem_email['email'] is None

    with pytest.raises(ValidationError) as exc:
        criar_cliente(services, email='compras-sem-arroba')
    assert exc.value.payload[0]['campo'] == 'email'


def test_produto_starts_without_stock_and_ignores_quantity(services):
    produto = criar_produto(services)
    assert produto['quantidade'] == 0
    assert produto['unidade_sigla'] == 'KG'

    atualizado = services['produto_service'].update(produto['id'], {'preco_venda': 30, 'quantidade': 500})
    assert atualizado['preco_venda'] == 30
    assert atualizado['quantidade'] == 0


def test_produto_rules_by_type(services):
    with pytest.raises(ValidationError) as exc:
        criar_produto(services, ncm='123')
    assert exc.value.message == 'NCM é obrigatório e deve ter 8 dígitos.'

    with pytest.raises(ValidationError) as exc:
        services['produto_service'].add({'tipo_produto': 'USO_INTERNO', 'nome': 'Bandeja', 'custo_unitario': 1})
    assert exc.value.message == 'Selecione uma categoria.'


def test_produto_with_missing_unit_reference_is_rejected(services):
    with pytest.raises(ValidationError) as exc:
        criar_produto(services, unidade_id=4242)
    assert exc.value.payload[0]['campo'] == 'unidade_id'


def test_conta_bancaria_uses_feminine_status_and_initial_balance(services):
    conta = criar_conta_bancaria(services, saldo_inicial=250.5)
    assert conta['status'] == 'ativa'
    assert conta['saldo_atual'] == 250.5

    contas = services['conta_bancaria_service']
    with pytest.raises(ValidationError):
        contas.set_status(conta['id'], 'inativo')
    assert contas.set_status(conta['id'], 'inativa')['status'] == 'inativa'

    atualizada = contas.update(conta['id'], {'nome_conta': 'Caixa Central', 'saldo_inicial': 9999})
    assert atualizada['nome_conta'] == 'Caixa Central'
    assert atualizada['saldo_inicial'] == 250.5


def test_funcionario_includes_role_name(services):
    funcionario = criar_funcionario(services)
    assert funcionario['cargo_nome'] == 'Açougueiro'
    assert funcionario['cpf'] == '529.982.247-25'
    assert funcionario['cnpj'] == '11.222.333/0001-81'


def test_meta_requires_existing_product(services):
    with pytest.raises(ValidationError):
        services['meta_service'].add({'produto_id': 77, 'meta_por_animal': 2.5})
    produto = criar_produto(services)
    meta = services['meta_service'].add({'produto_id': produto['id'], 'meta_por_animal': 2.5})
    assert meta['produto_nome'] == produto['nome']


def test_subscription_receives_snapshot_and_changes_until_unsubscribed(services):
    unidades = services['unidade_service']
    recebidos = []

    subscription = unidades.subscribe(recebidos.append)
    assert recebidos == [[]]
    assert unidades.feed.subscriber_count == 1

    criar_unidade(services, 'Litro', 'L')
    assert _nomes(recebidos[-1]) == ['Litro']

    subscription.unsubscribe()
    subscription.unsubscribe()
    assert unidades.feed.subscriber_count == 0

    criar_unidade(services, 'Caixa', 'CX')
    assert len(recebidos) == 2


def test_subscription_including_inactive_sees_deactivated_records(services):
    unidades = services['unidade_service']
    unidade = criar_unidade(services)
    so_ativos, todos = [], []

    with unidades.subscribe(so_ativos.append), unidades.subscribe(todos.append, include_inactive=True):
        unidades.set_status(unidade['id'], 'inativo')

    assert so_ativos[-1] == []
    assert [u['status'] for u in todos[-1]] == ['inativo']
    assert unidades.feed.subscriber_count == 0


def test_failing_subscriber_does_not_break_writes(services):
    def quebra(_snapshot):
        raise RuntimeError('boom')

    unidades = services['unidade_service']
    with unidades.subscribe(quebra):
        unidade = criar_unidade(services)
    assert unidade['id']


def test_subscription_is_dropped_when_initial_load_fails():
    def carga_quebrada(_include_inactive):
        raise RuntimeError('banco indisponível')

    feed = ChangeFeed('unidades', carga_quebrada)
    recebidos = []
    with pytest.raises(RuntimeError):
        feed.subscribe(recebidos.append)
    assert feed.subscriber_count == 0
    assert recebidos == []
