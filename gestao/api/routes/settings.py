# gestao/api/routes/settings.py

from flask import Blueprint, jsonify

from gestao.api.decorators import get_service, login_required, admin_required
from gestao.api.errors import NotFoundError
from gestao.services.settings_service import SettingsService
from .resources import json_body

settings_bp = Blueprint('settings', __name__)


def _get_settings_service() -> SettingsService:
    return get_service('settings_service', 'configurações')


@settings_bp.route('/empresa', methods=['GET'])
@login_required
def get_empresa():
    info = _get_settings_service().get_company_info()
    if info is None:
        raise NotFoundError("Os dados da empresa ainda não foram cadastrados.")
    return jsonify(info), 200


@settings_bp.route('/empresa', methods=['PUT'])
@admin_required
def save_empresa():
    return jsonify(_get_settings_service().save_company_info(json_body())), 200
