# gestao/api/routes/usuarios.py
# Usuários e perfis de acesso. Gestão restrita a administradores; o próprio usuário
# lê e grava o layout do seu dashboard.

from flask import Blueprint, jsonify, request

from gestao.api.decorators import get_service, login_required, admin_required
from gestao.api.errors import ForbiddenError
from gestao.services.user_service import UserService, RoleService
from gestao.utils.logger import logger
from .resources import json_body

usuarios_bp = Blueprint('usuarios', __name__)
roles_bp = Blueprint('roles', __name__)


def _get_user_service() -> UserService:
    return get_service('user_service', 'usuários')


def _get_role_service() -> RoleService:
    return get_service('role_service', 'perfis')


# --- Usuários ---

@usuarios_bp.route('', methods=['GET'])
@admin_required
def list_usuarios():
    return jsonify(_get_user_service().list()), 200


@usuarios_bp.route('/<int:user_id>', methods=['GET'])
@admin_required
def get_usuario(user_id: int):
    return jsonify(_get_user_service().get(user_id)), 200


@usuarios_bp.route('', methods=['POST'])
@admin_required
def create_usuario():
    """Cria um usuário (senha obrigatória, mínimo 6 caracteres). (Admin only)"""
    created = _get_user_service().add(json_body())
    logger.info(f"Usuário '{created['email']}' criado por {request.current_user.email}.")
    return jsonify(created), 201


@usuarios_bp.route('/<int:user_id>', methods=['PATCH'])
@admin_required
def update_usuario(user_id: int):
    return jsonify(_get_user_service().update(user_id, json_body())), 200


@usuarios_bp.route('/<int:user_id>/status', methods=['PATCH'])
@admin_required
def set_usuario_status(user_id: int):
    if user_id == request.current_user.id:
        raise ForbiddenError("Você não pode alterar o status do seu próprio usuário.")
    return jsonify(_get_user_service().set_status(user_id, json_body().get('status'))), 200


def _check_self_or_admin(user_id: int):
    user = request.current_user
    if user.id != user_id and not user.is_admin:
        raise ForbiddenError("Você só pode acessar o seu próprio layout.")


@usuarios_bp.route('/<int:user_id>/dashboard-layout', methods=['GET'])
@login_required
def get_dashboard_layout(user_id: int):
    _check_self_or_admin(user_id)
    return jsonify({"layout": _get_user_service().get_dashboard_layout(user_id)}), 200


@usuarios_bp.route('/<int:user_id>/dashboard-layout', methods=['PUT'])
@login_required
def save_dashboard_layout(user_id: int):
    _check_self_or_admin(user_id)
    layout = _get_user_service().save_dashboard_layout(user_id, json_body().get('layout'))
    return jsonify({"layout": layout}), 200


# --- Perfis ---

@roles_bp.route('', methods=['GET'])
@login_required
def list_roles():
    return jsonify(_get_role_service().list()), 200


@roles_bp.route('/<int:role_id>', methods=['GET'])
@login_required
def get_role(role_id: int):
    return jsonify(_get_role_service().get(role_id)), 200


@roles_bp.route('', methods=['POST'])
@admin_required
def create_role():
    return jsonify(_get_role_service().add(json_body())), 201


@roles_bp.route('/<int:role_id>', methods=['PATCH'])
@admin_required
def update_role(role_id: int):
    return jsonify(_get_role_service().update(role_id, json_body())), 200


@roles_bp.route('/<int:role_id>', methods=['DELETE'])
@admin_required
def delete_role(role_id: int):
    _get_role_service().delete(role_id)
    return jsonify({"message": "Perfil excluído com sucesso."}), 200
