# gestao/api/routes/vendas.py

from flask import Blueprint, jsonify, request

from gestao.api.decorators import get_service, login_required
from gestao.api.streaming import sse_response
from gestao.services.venda_service import VendaService
from .resources import json_body

vendas_bp = Blueprint('vendas', __name__)


def _get_venda_service() -> VendaService:
    return get_service('venda_service', 'vendas')


@vendas_bp.route('', methods=['GET'])
@login_required
def list_vendas():
    return jsonify(_get_venda_service().list()), 200


@vendas_bp.route('/<int:venda_id>', methods=['GET'])
@login_required
def get_venda(venda_id: int):
    return jsonify(_get_venda_service().get(venda_id)), 200


@vendas_bp.route('', methods=['POST'])
@login_required
def registrar_venda():
    """
    Registra a venda: valida o estoque de todos os itens, baixa o estoque com
    auditoria e, se a prazo, cria a conta a receber. Tudo ou nada.
    ---
    tags: [Vendas]
    responses:
      201:
        description: Venda registrada
      400:
        description: Payload inválido
      404:
        description: Cliente ou produto inexistente
      409:
        description: Estoque insuficiente
    """
    venda = _get_venda_service().registrar_venda(json_body(), request.current_user)
    return jsonify(venda), 201


@vendas_bp.route('/<int:venda_id>/status', methods=['PATCH'])
@login_required
def set_venda_status(venda_id: int):
    return jsonify(_get_venda_service().set_status(venda_id, json_body().get('status'))), 200


@vendas_bp.route('/<int:venda_id>/nfe', methods=['PUT'])
@login_required
def registrar_nfe(venda_id: int):
    return jsonify(_get_venda_service().registrar_nfe(venda_id, json_body())), 200


@vendas_bp.route('/stream', methods=['GET'])
@login_required
def stream_vendas():
    service = _get_venda_service()
    return sse_response(service.subscribe)
