# gestao/api/routes/cadastros.py
# Cadastros básicos: todos seguem o mesmo contrato de recurso.

from .resources import make_resource_blueprint

CADASTRO_BLUEPRINTS = [
    (make_resource_blueprint('produtos', 'produto_service', 'produtos'), '/api/produtos'),
    (make_resource_blueprint('clientes', 'cliente_service', 'clientes'), '/api/clientes'),
    (make_resource_blueprint('fornecedores', 'fornecedor_service', 'fornecedores'), '/api/fornecedores'),
    (make_resource_blueprint('contas_bancarias', 'conta_bancaria_service', 'contas bancárias'), '/api/contas-bancarias'),
    (make_resource_blueprint('funcionarios', 'funcionario_service', 'funcionários'), '/api/funcionarios'),
    (make_resource_blueprint('cargos', 'cargo_service', 'cargos'), '/api/cargos'),
    (make_resource_blueprint('metas', 'meta_service', 'metas'), '/api/metas'),
    (make_resource_blueprint('categorias', 'categoria_service', 'categorias'), '/api/categorias'),
    (make_resource_blueprint('unidades', 'unidade_service', 'unidades'), '/api/unidades'),
]
