# gestao/api/routes/operacoes.py
# Compras, abates e produções: mesmo contrato de recurso, criação pela operação de negócio.

from .resources import make_resource_blueprint

OPERACAO_BLUEPRINTS = [
    (make_resource_blueprint('compras', 'compra_service', 'compras'), '/api/compras'),
    (make_resource_blueprint('abates', 'abate_service', 'abates', create='lancar_abate'), '/api/abates'),
    (make_resource_blueprint('producao', 'producao_service', 'produção', create='registrar_producao'), '/api/producao'),
]
