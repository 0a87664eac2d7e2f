# gestao/api/routes/auth.py

from flask import Blueprint, request, jsonify

from gestao.api.decorators import get_service, login_required
from gestao.services.auth_service import AuthService
from gestao.utils.logger import logger

auth_bp = Blueprint('auth', __name__)


def _get_auth_service() -> AuthService:
    return get_service('auth_service', 'autenticação')


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Endpoint for user login. Expects JSON payload with 'email' and 'password'.
    Sets a token in the session and returns user info upon success.
    ---
    tags: [Authentication]
    requestBody:
      required: true
      content:
        application/json:
          schema:
            type: object
            properties:
              email:
                type: string
                example: "admin@example.com"
              password:
                type: string
                example: "admin123"
            required: [email, password]
    responses:
      200:
        description: Login successful
      400:
        description: Missing fields or invalid JSON
      401:
        description: Invalid credentials or inactive user
    """
    logger.info("Requisição de login recebida.")
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    token, user_data = _get_auth_service().login(data.get('email'), data.get('password'))
    return jsonify({
        "message": "Login realizado com sucesso.",
        "token": token,
        "user": user_data,
    }), 200


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Clears the session token."""
    _get_auth_service().logout()
    logger.info(f"Usuário '{request.current_user.email}' deslogado.")
    return jsonify({"message": "Logout realizado com sucesso."}), 200


@auth_bp.route('/verify', methods=['GET'])
@login_required
def verify_token():
    """Returns the authenticated user when the token (header or session) is valid."""
    return jsonify({"valid": True, "user": request.current_user.to_dict()}), 200
