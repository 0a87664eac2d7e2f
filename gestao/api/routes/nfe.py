# gestao/api/routes/nfe.py
# Proxy do emissor de NF-e. Erros do provedor saem como {message, detalhes}
# com o status HTTP do provedor.

from flask import Blueprint, Response, jsonify, request

from gestao.api.decorators import get_service, login_required
from gestao.services.nfe_service import NfeService
from gestao.utils.logger import logger

nfe_bp = Blueprint('nfe', __name__)
pdf_bp = Blueprint('pdf', __name__)


def _get_nfe_service() -> NfeService:
    return get_service('nfe_service', 'NF-e')


@nfe_bp.route('/emitir', methods=['POST'])
@login_required
def emitir():
    """
    Emite a NF-e de uma venda. Idempotente pela referência (ID da venda).
    ---
    tags: [NF-e]
    requestBody:
      content:
        application/json:
          schema:
            type: object
            required: [venda, empresa, cliente, todosProdutos, todasUnidades]
    responses:
      200:
        description: Enviada para processamento, ou já existente
      400:
        description: Dados insuficientes ou produto fora das regras fiscais
      500:
        description: Erro de configuração do servidor
    """
    body = request.get_json(silent=True)
    logger.info("Requisição de emissão de NF-e recebida.")
    return jsonify(_get_nfe_service().emitir(body)), 200


@nfe_bp.route('/consultar', methods=['GET'])
@login_required
def consultar():
    return jsonify(_get_nfe_service().consultar(request.args.get('ref'))), 200


@nfe_bp.route('/cancelar', methods=['DELETE'])
@login_required
def cancelar():
    """Cancela uma NF-e autorizada. Exige `ref` e `justificativa` com pelo menos 15 caracteres."""
    body = request.get_json(silent=True)
    return jsonify(_get_nfe_service().cancelar(body)), 200


@nfe_bp.route('/preview', methods=['POST'])
@login_required
def preview():
    """Gera o DANFE de pré-visualização em homologação e devolve o PDF."""
    pdf = _get_nfe_service().preview(request.get_json(silent=True))
    return Response(pdf, status=200, mimetype='application/pdf')


@pdf_bp.route('/<ref>', methods=['GET'])
@login_required
def danfe(ref: str):
    pdf = _get_nfe_service().danfe(ref)
    return Response(
        pdf,
        status=200,
        mimetype='application/pdf',
        headers={'Content-Disposition': f'inline; filename="danfe-{ref}.pdf"'},
    )
