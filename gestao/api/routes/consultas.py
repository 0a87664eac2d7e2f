# gestao/api/routes/consultas.py
# Consultas públicas (BrasilAPI) usadas no preenchimento dos cadastros.

from flask import Blueprint, jsonify

from gestao.api.decorators import get_service, login_required
from gestao.integrations.brasil_api_client import BrasilApiClient

consultas_bp = Blueprint('consultas', __name__)


def _get_brasil_api() -> BrasilApiClient:
    return get_service('brasil_api_client', 'consulta pública')


@consultas_bp.route('/cnpj/<cnpj>', methods=['GET'])
@login_required
def consultar_cnpj(cnpj: str):
    return jsonify(_get_brasil_api().fetch_cnpj(cnpj)), 200


@consultas_bp.route('/cep/<cep>', methods=['GET'])
@login_required
def consultar_cep(cep: str):
    return jsonify(_get_brasil_api().fetch_cep(cep)), 200
