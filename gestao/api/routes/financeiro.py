# gestao/api/routes/financeiro.py
# Contas a pagar e a receber.

from flask import Blueprint, jsonify, request

from gestao.api.decorators import get_service, login_required
from gestao.services.financeiro_service import ContaAPagarService, ContaAReceberService
from .resources import json_body

financeiro_bp = Blueprint('financeiro', __name__)


def _get_conta_pagar_service() -> ContaAPagarService:
    return get_service('conta_pagar_service', 'contas a pagar')


def _get_conta_receber_service() -> ContaAReceberService:
    return get_service('conta_receber_service', 'contas a receber')


@financeiro_bp.route('/contas-a-pagar', methods=['GET'])
@login_required
def list_contas_a_pagar():
    return jsonify(_get_conta_pagar_service().list(status=request.args.get('status'))), 200


@financeiro_bp.route('/contas-a-pagar/<int:conta_id>/pagar', methods=['POST'])
@login_required
def pagar_conta(conta_id: int):
    """Baixa a conta debitando a conta bancária informada em `conta_bancaria_id`."""
    return jsonify(_get_conta_pagar_service().pagar_conta(conta_id, json_body())), 200


@financeiro_bp.route('/contas-a-pagar/<int:conta_id>/status', methods=['PATCH'])
@login_required
def set_conta_a_pagar_status(conta_id: int):
    return jsonify(_get_conta_pagar_service().set_status(conta_id, json_body().get('status'))), 200


@financeiro_bp.route('/contas-a-receber', methods=['GET'])
@login_required
def list_contas_a_receber():
    return jsonify(_get_conta_receber_service().list(status=request.args.get('status'))), 200


@financeiro_bp.route('/contas-a-receber/<int:conta_id>/receber', methods=['POST'])
@login_required
def receber_conta(conta_id: int):
    """Credita a conta bancária informada e marca a venda de origem como Paga."""
    return jsonify(_get_conta_receber_service().receber_conta(conta_id, json_body())), 200
