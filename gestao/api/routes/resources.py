# gestao/api/routes/resources.py
# Fábrica de blueprints para recursos com o contrato listar / buscar / criar /
# atualizar / alterar status / stream.

from flask import Blueprint, jsonify, request

from gestao.api.decorators import get_service, login_required
from gestao.api.errors import ValidationError
from gestao.api.streaming import sse_response
from gestao.utils.logger import logger


def flag_arg(name: str) -> bool:
    return request.args.get(name, 'false').lower() in ('1', 'true', 'sim')


def json_body() -> dict:
    """Corpo JSON da requisição; 400 quando ausente, malformado ou não for um objeto."""
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("A requisição deve conter um corpo JSON.")
    if not isinstance(data, dict):
        raise ValidationError("O corpo da requisição deve ser um objeto JSON.")
    return data


def make_resource_blueprint(name: str, service_key: str, label: str, create: str = 'add') -> Blueprint:
    """
    Monta o blueprint de um recurso cujo serviço expõe list / get / subscribe /
    `create` / update / set_status. `create` recebe o usuário logado como autor.
    """
    bp = Blueprint(name, __name__)

    def _service():
        return get_service(service_key, label)

    @bp.route('', methods=['GET'])
    @login_required
    def list_records():
        include_inactive = flag_arg('incluir_inativos')
        logger.debug(f"GET {name} (incluir_inativos={include_inactive})")
        return jsonify(_service().list(include_inactive=include_inactive)), 200

    @bp.route('/<int:record_id>', methods=['GET'])
    @login_required
    def get_record(record_id: int):
        return jsonify(_service().get(record_id)), 200

    @bp.route('', methods=['POST'])
    @login_required
    def create_record():
        creator = getattr(_service(), create)
        created = creator(json_body(), request.current_user)
        logger.info(f"{label}: registro {created.get('id')} criado por {request.current_user.email}.")
        return jsonify(created), 201

    @bp.route('/<int:record_id>', methods=['PATCH'])
    @login_required
    def update_record(record_id: int):
        return jsonify(_service().update(record_id, json_body())), 200

    @bp.route('/<int:record_id>/status', methods=['PATCH'])
    @login_required
    def set_record_status(record_id: int):
        status = json_body().get('status')
        return jsonify(_service().set_status(record_id, status)), 200

    @bp.route('/stream', methods=['GET'])
    @login_required
    def stream_records():
        include_inactive = flag_arg('incluir_inativos')
        service = _service()
        return sse_response(lambda callback: service.subscribe(callback, include_inactive))

    return bp
