import pytest

from conftest import criar_produto
from gestao.api.errors import InsufficientStockError, NotFoundError, ValidationError


def test_entries_and_exits_update_quantity_and_history(services):
    estoque = services['estoque_service']
    produto = criar_produto(services)

    estoque.registrar_movimentacao({'produto_id': produto['id'], 'quantidade': 10, 'tipo': 'entrada', 'motivo': 'Produção'})
    resultado = estoque.registrar_movimentacao({'produto_id': produto['id'], 'quantidade': 3, 'tipo': 'saida', 'motivo': 'Perda'})

    assert resultado['produto']['quantidade'] == 7
    assert resultado['movimentacao']['tipo'] == 'saida'
    assert resultado['movimentacao']['produto_nome'] == produto['nome']

    historico = estoque.historico(produto['id'])
    assert [(m['tipo'], m['quantidade']) for m in historico] == [('saida', 3), ('entrada', 10)]
    assert len(estoque.historico(produto['id'], limit=1)) == 1


def test_exit_beyond_stock_changes_nothing(services):
    estoque = services['estoque_service']
    produto = criar_produto(services, quantidade=2)

    with pytest.raises(InsufficientStockError) as exc:
        estoque.registrar_movimentacao({'produto_id': produto['id'], 'quantidade': 5, 'tipo': 'saida', 'motivo': 'Ajuste'})

    assert exc.value.status_code == 409
    assert exc.value.payload == {'produto': produto['nome'], 'disponivel': 2, 'solicitado': 5}
    assert services['produto_service'].get(produto['id'])['quantidade'] == 2
    assert len(estoque.historico(produto['id'])) == 1


def test_exit_of_whole_stock_is_allowed(services):
    estoque = services['estoque_service']
    produto = criar_produto(services, quantidade=4)
    resultado = estoque.registrar_movimentacao({'produto_id': produto['id'], 'quantidade': 4, 'tipo': 'saida', 'motivo': 'Venda balcão'})
    assert resultado['produto']['quantidade'] == 0


def test_movement_validation(services):
    estoque = services['estoque_service']
    produto = criar_produto(services)
    with pytest.raises(ValidationError):
        estoque.registrar_movimentacao({'produto_id': produto['id'], 'quantidade': 0, 'tipo': 'entrada', 'motivo': 'x'})
    with pytest.raises(ValidationError):
        estoque.registrar_movimentacao({'produto_id': produto['id'], 'quantidade': 1, 'tipo': 'ajuste', 'motivo': 'x'})
    with pytest.raises(NotFoundError):
        estoque.registrar_movimentacao({'produto_id': 999, 'quantidade': 1, 'tipo': 'entrada', 'motivo': 'x'})


def test_movement_republishes_product_feed(services):
    recebidos = []
    produto = criar_produto(services)
    with services['produto_service'].subscribe(recebidos.append):
        services['estoque_service'].registrar_movimentacao(
            {'produto_id': produto['id'], 'quantidade': 6, 'tipo': 'entrada', 'motivo': 'Produção'})
    assert recebidos[-1][0]['quantidade'] == 6


def test_stock_summary(services):
    criar_produto(services, 'Picanha', quantidade=10, custo_unitario=40)
    criar_produto(services, 'Costela', custo_unitario=20)
    resumo = services['estoque_service'].resumo()
    assert resumo['total_produtos'] == 2
    assert resumo['quantidade_total'] == 10
    assert resumo['valor_custo_total'] == 400.0
    assert len(resumo['sem_estoque']) == 1
