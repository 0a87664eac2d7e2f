# alembic/versions/4f1c2a9e7b3d_initial_schema.py
"""Initial schema: cadastros, estoque, vendas, financeiro, produção, usuários e empresa

Revision ID: 4f1c2a9e7b3d
Revises:
Create Date: 2026-10-19 10:12:41.518204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4f1c2a9e7b3d'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(15, 2, asdecimal=False)
QTY = sa.Numeric(15, 4, asdecimal=False)
TS = sa.DateTime(timezone=True)


def _status_index(table: str) -> None:
    op.create_index(f'ix_{table}_status', table, ['status'], unique=False)


def upgrade() -> None:
    # --- Tabelas sem dependências ---
    for table, extra in (
        ('unidades', [sa.Column('sigla', sa.String(length=10), nullable=False)]),
        ('categorias', []),
        ('cargos', []),
    ):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('nome', sa.String(length=120), nullable=False),
            *extra,
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('created_at', TS, nullable=False),
            sa.PrimaryKeyConstraint('id', name=op.f(f'pk_{table}')),
        )
        _status_index(table)

    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.Text(), nullable=False),
        sa.Column('descricao', sa.Text(), nullable=True),
        sa.Column('permissoes', sa.JSON(), nullable=False),
        sa.Column('created_at', TS, nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_roles')),
        sa.UniqueConstraint('nome', name=op.f('uq_roles_nome')),
    )

    op.create_table(
        'clientes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nome_razao_social', sa.Text(), nullable=False),
        sa.Column('tipo_pessoa', sa.String(length=10), nullable=False),
        sa.Column('cpf_cnpj', sa.String(length=20), nullable=False),
        sa.Column('inscricao_estadual', sa.String(length=30), nullable=True),
        sa.Column('telefone', sa.String(length=30), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('endereco', sa.JSON(), nullable=True),
        sa.Column('registrado_por', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', TS, nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_clientes')),
    )
    op.create_index('ix_clientes_cpf_cnpj', 'clientes', ['cpf_cnpj'], unique=False)
    _status_index('clientes')

    op.create_table(
        'fornecedores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nome_razao_social', sa.Text(), nullable=False),
        sa.Column('nome_fantasia', sa.Text(), nullable=True),
        sa.Column('tipo_pessoa', sa.String(length=10), nullable=False),
        sa.Column('cpf_cnpj', sa.String(length=20), nullable=False),
        sa.Column('inscricao_estadual', sa.String(length=30), nullable=True),
        sa.Column('telefone', sa.String(length=30), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('endereco', sa.JSON(), nullable=True),
        sa.Column('dados_bancarios', sa.JSON(), nullable=True),
        sa.Column('registrado_por', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', TS, nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_fornecedores')),
    )
    op.create_index('ix_fornecedores_cpf_cnpj', 'fornecedores', ['cpf_cnpj'], unique=False)
    _status_index('fornecedores')

    op.create_table(
        'contas_bancarias',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nome_conta', sa.Text(), nullable=False),
        sa.Column('banco', sa.String(length=80), nullable=False),
        sa.Column('agencia', sa.String(length=20), nullable=True),
        sa.Column('conta', sa.String(length=30), nullable=True),
        sa.Column('tipo', sa.String(length=30), nullable=False),
        sa.Column('saldo_inicial', MONEY, nullable=False),
        sa.Column('saldo_atual', MONEY, nullable=False),
        sa.Column('registrado_por', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', TS, nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_contas_bancarias')),
    )
    _status_index('contas_bancarias')

    op.create_table(
        'company_info',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('dados', sa.JSON(), nullable=False),
        sa.Column('updated_at', TS, nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_company_info')),
    )

    # --- Cadastros dependentes ---
    op.create_table(
        'produtos',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tipo_produto', sa.String(length=20), nullable=False),
        sa.Column('nome', sa.Text(), nullable=False),
        sa.Column('codigo', sa.String(length=60), nullable=True),
        sa.Column('sku', sa.String(length=60), nullable=True),
        sa.Column('unidade_id', sa.Integer(), nullable=True),
        sa.Column('categoria_id', sa.Integer(), nullable=True),
        sa.Column('preco_venda', MONEY, nullable=True),
        sa.Column('custo_unitario', QTY, nullable=False),
        sa.Column('quantidade', QTY, nullable=False),
        sa.Column('ncm', sa.String(length=8), nullable=True),
        sa.Column('cfop', sa.String(length=4), nullable=True),
        sa.Column('cest', sa.String(length=10), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', TS, nullable=False),
        sa.ForeignKeyConstraint(['categoria_id'], ['categorias.id'], name=op.f('fk_produtos_categoria_id_categorias')),
        sa.ForeignKeyConstraint(['unidade_id'], ['unidades.id'], name=op.f('fk_produtos_unidade_id_unidades')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_produtos')),
    )
    op.create_index('ix_produtos_tipo_produto', 'produtos', ['tipo_produto'], unique=False)
    _status_index('produtos')

    op.create_table(
        'funcionarios',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('razao_social', sa.Text(), nullable=False),
        sa.Column('cnpj', sa.String(length=20), nullable=False),
        sa.Column('nome_completo', sa.Text(), nullable=False),
        sa.Column('cpf', sa.String(length=20), nullable=False),
        sa.Column('contato', sa.String(length=30), nullable=False),
        sa.Column('cargo_id', sa.Integer(), nullable=False),
        sa.Column('banco', sa.String(length=80), nullable=False),
        sa.Column('agencia', sa.String(length=20), nullable=False),
        sa.Column('conta', sa.String(length=30), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', TS, nullable=False),
        sa.ForeignKeyConstraint(['cargo_id'], ['cargos.id'], name=op.f('fk_funcionarios_cargo_id_cargos')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_funcionarios')),
    )
    op.create_index('ix_funcionarios_cargo_id', 'funcionarios', ['cargo_id'], unique=False)
    _status_index('funcionarios')

    op.create_table(
        'metas',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('produto_id', sa.Integer(), nullable=False),
        sa.Column('meta_por_animal', QTY, nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', TS, nullable=False),
        sa.ForeignKeyConstraint(['produto_id'], ['produtos.id'], name=op.f('fk_metas_produto_id_produtos')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_metas')),
    )
    op.create_index('ix_metas_produto_id', 'metas', ['produto_id'], unique=False)
    _status_index('metas')

    op.create_table(
        'usuarios',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role_id', sa.Integer(), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('dashboard_layout', sa.JSON(), nullable=True),
        sa.Column('created_at', TS, nullable=False),
        sa.Column('last_login', TS, nullable=True),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], name=op.f('fk_usuarios_role_id_roles')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_usuarios')),
    )
    op.create_index('ix_usuarios_email', 'usuarios', ['email'], unique=True)
    op.create_index('ix_usuarios_role_id', 'usuarios', ['role_id'], unique=False)

    # --- Transações ---
    op.create_table(
        'compras',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('fornecedor_id', sa.Integer(), nullable=False),
        sa.Column('nota_fiscal', sa.String(length=60), nullable=False),
        sa.Column('data', sa.Date(), nullable=False),
        sa.Column('itens', sa.JSON(), nullable=False),
        sa.Column('valor_total', MONEY, nullable=False),
        sa.Column('conta_bancaria_id', sa.Integer(), nullable=False),
        sa.Column('condicao_pagamento', sa.String(length=10), nullable=False),
        sa.Column('numero_parcelas', sa.Integer(), nullable=True),
        sa.Column('data_primeiro_vencimento', sa.Date(), nullable=True),
        sa.Column('registrado_por', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', TS, nullable=False),
        sa.ForeignKeyConstraint(['conta_bancaria_id'], ['contas_bancarias.id'], name=op.f('fk_compras_conta_bancaria_id_contas_bancarias')),
        sa.ForeignKeyConstraint(['fornecedor_id'], ['fornecedores.id'], name=op.f('fk_compras_fornecedor_id_fornecedores')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_compras')),
    )
    op.create_index('ix_compras_fornecedor_id', 'compras', ['fornecedor_id'], unique=False)
    op.create_index('ix_compras_data', 'compras', ['data'], unique=False)
    _status_index('compras')

    op.create_table(
        'abates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lote_id', sa.String(length=40), nullable=False),
        sa.Column('data', TS, nullable=False),
        sa.Column('fornecedor_id', sa.Integer(), nullable=False),
        sa.Column('responsavel_id', sa.Integer(), nullable=True),
        sa.Column('compra_id', sa.Integer(), nullable=True),
        sa.Column('numero_animais', sa.Integer(), nullable=False),
        sa.Column('custo_por_animal', MONEY, nullable=False),
        sa.Column('custo_total', MONEY, nullable=False),
        sa.Column('condenado', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('registrado_por', sa.JSON(), nullable=True),
        sa.Column('created_at', TS, nullable=False),
        sa.ForeignKeyConstraint(['compra_id'], ['compras.id'], name=op.f('fk_abates_compra_id_compras')),
        sa.ForeignKeyConstraint(['fornecedor_id'], ['fornecedores.id'], name=op.f('fk_abates_fornecedor_id_fornecedores')),
        sa.ForeignKeyConstraint(['responsavel_id'], ['funcionarios.id'], name=op.f('fk_abates_responsavel_id_funcionarios')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_abates')),
    )
    op.create_index('ix_abates_lote_id', 'abates', ['lote_id'], unique=False)
    op.create_index('ix_abates_data', 'abates', ['data'], unique=False)
    _status_index('abates')

    op.create_table(
        'vendas',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cliente_id', sa.Integer(), nullable=False),
        sa.Column('cliente_nome', sa.Text(), nullable=True),
        sa.Column('data', TS, nullable=False),
        sa.Column('valor_total', MONEY, nullable=False),
        sa.Column('condicao_pagamento', sa.String(length=10), nullable=False),
        sa.Column('metodo_pagamento', sa.String(length=40), nullable=False),
        sa.Column('conta_bancaria_id', sa.Integer(), nullable=True),
        sa.Column('numero_parcelas', sa.Integer(), nullable=True),
        sa.Column('taxa_cartao', sa.Numeric(7, 2, asdecimal=False), nullable=True),
        sa.Column('valor_final', MONEY, nullable=True),
        sa.Column('data_vencimento', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('registrado_por', sa.JSON(), nullable=True),
        sa.Column('nfe', sa.JSON(), nullable=True),
        sa.Column('created_at', TS, nullable=False),
        sa.ForeignKeyConstraint(['cliente_id'], ['clientes.id'], name=op.f('fk_vendas_cliente_id_clientes')),
        sa.ForeignKeyConstraint(['conta_bancaria_id'], ['contas_bancarias.id'], name=op.f('fk_vendas_conta_bancaria_id_contas_bancarias')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_vendas')),
    )
    op.create_index('ix_vendas_cliente_id', 'vendas', ['cliente_id'], unique=False)
    op.create_index('ix_vendas_data', 'vendas', ['data'], unique=False)
    _status_index('vendas')

    op.create_table(
        'producoes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('data', TS, nullable=False),
        sa.Column('responsavel_id', sa.Integer(), nullable=False),
        sa.Column('abate_id', sa.Integer(), nullable=False),
        sa.Column('lote', sa.String(length=40), nullable=True),
        sa.Column('descricao', sa.Text(), nullable=True),
        sa.Column('produtos', sa.JSON(), nullable=False),
        sa.Column('registrado_por', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', TS, nullable=False),
        sa.ForeignKeyConstraint(['abate_id'], ['abates.id'], name=op.f('fk_producoes_abate_id_abates')),
        sa.ForeignKeyConstraint(['responsavel_id'], ['funcionarios.id'], name=op.f('fk_producoes_responsavel_id_funcionarios')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_producoes')),
    )
    op.create_index('ix_producoes_data', 'producoes', ['data'], unique=False)
    op.create_index('ix_producoes_abate_id', 'producoes', ['abate_id'], unique=False)
    _status_index('producoes')

    op.create_table(
        'itens_venda',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('venda_id', sa.Integer(), nullable=False),
        sa.Column('produto_id', sa.Integer(), nullable=False),
        sa.Column('produto_nome', sa.Text(), nullable=False),
        sa.Column('quantidade', QTY, nullable=False),
        sa.Column('preco_unitario', MONEY, nullable=False),
        sa.Column('custo_unitario', QTY, nullable=False),
        sa.ForeignKeyConstraint(['produto_id'], ['produtos.id'], name=op.f('fk_itens_venda_produto_id_produtos')),
        sa.ForeignKeyConstraint(['venda_id'], ['vendas.id'], name=op.f('fk_itens_venda_venda_id_vendas'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_itens_venda')),
    )
    op.create_index('ix_itens_venda_venda_id', 'itens_venda', ['venda_id'], unique=False)

    op.create_table(
        'contas_a_pagar',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('abate_id', sa.Integer(), nullable=True),
        sa.Column('compra_id', sa.Integer(), nullable=True),
        sa.Column('fornecedor_id', sa.Integer(), nullable=True),
        sa.Column('descricao', sa.Text(), nullable=False),
        sa.Column('valor', MONEY, nullable=False),
        sa.Column('parcela', sa.String(length=20), nullable=True),
        sa.Column('data_emissao', sa.Date(), nullable=False),
        sa.Column('data_vencimento', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('data_pagamento', sa.Date(), nullable=True),
        sa.Column('conta_bancaria_id', sa.Integer(), nullable=True),
        sa.Column('created_at', TS, nullable=False),
        sa.ForeignKeyConstraint(['abate_id'], ['abates.id'], name=op.f('fk_contas_a_pagar_abate_id_abates')),
        sa.ForeignKeyConstraint(['compra_id'], ['compras.id'], name=op.f('fk_contas_a_pagar_compra_id_compras')),
        sa.ForeignKeyConstraint(['conta_bancaria_id'], ['contas_bancarias.id'], name=op.f('fk_contas_a_pagar_conta_bancaria_id_contas_bancarias')),
        sa.ForeignKeyConstraint(['fornecedor_id'], ['fornecedores.id'], name=op.f('fk_contas_a_pagar_fornecedor_id_fornecedores')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_contas_a_pagar')),
    )
    op.create_index('ix_contas_a_pagar_abate_id', 'contas_a_pagar', ['abate_id'], unique=False)
    op.create_index('ix_contas_a_pagar_compra_id', 'contas_a_pagar', ['compra_id'], unique=False)
    op.create_index('ix_contas_a_pagar_data_vencimento', 'contas_a_pagar', ['data_vencimento'], unique=False)
    _status_index('contas_a_pagar')

    op.create_table(
        'contas_a_receber',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('venda_id', sa.Integer(), nullable=False),
        sa.Column('cliente_id', sa.Integer(), nullable=False),
        sa.Column('cliente_nome', sa.Text(), nullable=True),
        sa.Column('valor', MONEY, nullable=False),
        sa.Column('data_emissao', sa.Date(), nullable=False),
        sa.Column('data_vencimento', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('data_recebimento', sa.Date(), nullable=True),
        sa.Column('conta_bancaria_id', sa.Integer(), nullable=True),
        sa.Column('created_at', TS, nullable=False),
        sa.ForeignKeyConstraint(['cliente_id'], ['clientes.id'], name=op.f('fk_contas_a_receber_cliente_id_clientes')),
        sa.ForeignKeyConstraint(['conta_bancaria_id'], ['contas_bancarias.id'], name=op.f('fk_contas_a_receber_conta_bancaria_id_contas_bancarias')),
        sa.ForeignKeyConstraint(['venda_id'], ['vendas.id'], name=op.f('fk_contas_a_receber_venda_id_vendas')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_contas_a_receber')),
    )
    op.create_index('ix_contas_a_receber_venda_id', 'contas_a_receber', ['venda_id'], unique=False)
    op.create_index('ix_contas_a_receber_data_vencimento', 'contas_a_receber', ['data_vencimento'], unique=False)
    _status_index('contas_a_receber')

    op.create_table(
        'lotes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('producao_id', sa.Integer(), nullable=False),
        sa.Column('produto_id', sa.Integer(), nullable=False),
        sa.Column('codigo', sa.String(length=60), nullable=False),
        sa.Column('quantidade', QTY, nullable=False),
        sa.Column('data_producao', sa.Date(), nullable=False),
        sa.Column('data_validade', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(['producao_id'], ['producoes.id'], name=op.f('fk_lotes_producao_id_producoes')),
        sa.ForeignKeyConstraint(['produto_id'], ['produtos.id'], name=op.f('fk_lotes_produto_id_produtos')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_lotes')),
    )
    op.create_index('ix_lotes_producao_id', 'lotes', ['producao_id'], unique=False)
    op.create_index('ix_lotes_produto_id', 'lotes', ['produto_id'], unique=False)

    op.create_table(
        'movimentacoes_estoque',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('produto_id', sa.Integer(), nullable=False),
        sa.Column('produto_nome', sa.Text(), nullable=False),
        sa.Column('quantidade', QTY, nullable=False),
        sa.Column('tipo', sa.String(length=10), nullable=False),
        sa.Column('motivo', sa.Text(), nullable=True),
        sa.Column('venda_id', sa.Integer(), nullable=True),
        sa.Column('producao_id', sa.Integer(), nullable=True),
        sa.Column('registrado_por', sa.JSON(), nullable=True),
        sa.Column('data', TS, nullable=False),
        sa.ForeignKeyConstraint(['producao_id'], ['producoes.id'], name=op.f('fk_movimentacoes_estoque_producao_id_producoes')),
        sa.ForeignKeyConstraint(['produto_id'], ['produtos.id'], name=op.f('fk_movimentacoes_estoque_produto_id_produtos')),
        sa.ForeignKeyConstraint(['venda_id'], ['vendas.id'], name=op.f('fk_movimentacoes_estoque_venda_id_vendas')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_movimentacoes_estoque')),
    )
    op.create_index('ix_movimentacoes_estoque_produto_id', 'movimentacoes_estoque', ['produto_id'], unique=False)
    op.create_index('ix_movimentacoes_estoque_venda_id', 'movimentacoes_estoque', ['venda_id'], unique=False)
    op.create_index('ix_movimentacoes_estoque_producao_id', 'movimentacoes_estoque', ['producao_id'], unique=False)
    op.create_index('ix_movimentacoes_estoque_data', 'movimentacoes_estoque', ['data'], unique=False)


def downgrade() -> None:
    # Ordem inversa das dependências; os índices caem junto com as tabelas.
    for table in (
        'movimentacoes_estoque', 'lotes', 'contas_a_receber', 'contas_a_pagar', 'itens_venda',
        'producoes', 'vendas', 'abates', 'compras', 'usuarios', 'metas', 'funcionarios',
        'produtos', 'company_info', 'contas_bancarias', 'fornecedores', 'clientes', 'roles',
        'cargos', 'categorias', 'unidades',
    ):
        op.drop_table(table)
