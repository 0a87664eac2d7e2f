# gestao/api/routes/estoque.py

from flask import Blueprint, jsonify, request

from gestao.api.decorators import get_service, login_required
from gestao.services.estoque_service import EstoqueService
from .resources import json_body

estoque_bp = Blueprint('estoque', __name__)


def _get_estoque_service() -> EstoqueService:
    return get_service('estoque_service', 'estoque')


@estoque_bp.route('/movimentacoes', methods=['GET'])
@login_required
def historico_movimentacoes():
    """Histórico de movimentações (mais recentes primeiro). Filtros: ?produto_id=&limite=."""
    produto_id = request.args.get('produto_id', type=int)
    limite = request.args.get('limite', type=int)
    return jsonify(_get_estoque_service().historico(produto_id, limite)), 200


@estoque_bp.route('/movimentacoes', methods=['POST'])
@login_required
def registrar_movimentacao():
    """
    Entrada ou saída manual de estoque.
    ---
    tags: [Estoque]
    responses:
      201:
        description: Movimentação registrada; retorna a movimentação e o produto atualizado
      409:
        description: Saída maior que o saldo disponível
    """
    result = _get_estoque_service().registrar_movimentacao(json_body(), request.current_user)
    return jsonify(result), 201


@estoque_bp.route('/resumo', methods=['GET'])
@login_required
def resumo_estoque():
    return jsonify(_get_estoque_service().resumo()), 200
