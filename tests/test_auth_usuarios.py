import pytest

from conftest import ADMIN_EMAIL, login
from gestao.api.errors import BusinessRuleError, ValidationError


def _criar_operador(services, email='operador@example.com', password='segredo1', **extra):
    return services['user_service'].add({'nome': 'Operador', 'email': email, 'password': password, **extra})


def test_login_returns_token_and_user_without_hash(client):
    response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL.upper(), 'password': 'admin123'})
    body = response.get_json()
    assert response.status_code == 200
    assert body['token']
    assert body['user']['email'] == ADMIN_EMAIL
    assert body['user']['is_admin'] is True
    assert body['user']['role_nome'] == 'Administrador'
    assert 'password_hash' not in body['user']


def test_login_with_wrong_password_is_unauthorized(client):
    response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': 'errada'})
    assert response.status_code == 401
    assert response.get_json() == {'message': 'E-mail ou senha inválidos.'}


def test_login_requires_both_fields(client):
    response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL})
    assert response.status_code == 400


def test_protected_route_requires_token(client):
    assert client.get('/api/produtos', headers={'Authorization': 'Bearer invalido'}).status_code == 401
    fresh = client.application.test_client()
    assert fresh.get('/api/produtos').status_code == 401


def test_verify_and_session_logout(client, auth):
    response = client.get('/api/auth/verify', headers=auth)
    assert response.status_code == 200
    assert response.get_json()['user']['email'] == ADMIN_EMAIL

    # a sessão do cliente de teste guarda o token do login
    assert client.get('/api/auth/verify').status_code == 200
    assert client.post('/api/auth/logout').status_code == 200
    assert client.get('/api/auth/verify').status_code == 401


def test_inactive_user_cannot_log_in(client, services):
    operador = _criar_operador(services)
    services['user_service'].set_status(operador['id'], 'inativo')
    response = client.post('/api/auth/login', json={'email': 'operador@example.com', 'password': 'segredo1'})
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Usuário inativo.'


def test_user_management_is_admin_only(client, services):
    _criar_operador(services)
    headers = login(client, 'operador@example.com', 'segredo1')

    response = client.get('/api/usuarios', headers=headers)
    assert response.status_code == 403
    assert response.get_json()['message'] == 'Acesso restrito a administradores.'
    assert client.get('/api/roles', headers=headers).status_code == 200


def test_admin_creates_user_through_api(client, auth):
    response = client.post('/api/usuarios', headers=auth,
                           json={'nome': 'Caixa', 'email': 'Caixa@Example.com', 'password': 'segredo1'})
    assert response.status_code == 201
    assert response.get_json()['email'] == 'caixa@example.com'

    duplicado = client.post('/api/usuarios', headers=auth,
                            json={'nome': 'Outro', 'email': 'caixa@example.com', 'password': 'segredo1'})
    assert duplicado.status_code == 409

    curta = client.post('/api/usuarios', headers=auth, json={'nome': 'X', 'email': 'x@example.com', 'password': '123'})
    assert curta.status_code == 400

    sem_dominio = client.post('/api/usuarios', headers=auth, json={'nome': 'Y', 'email': 'caixa@', 'password': 'segredo1'})
    assert sem_dominio.status_code == 400
    assert sem_dominio.get_json()['detalhes'][0]['campo'] == 'email'


def test_admin_cannot_deactivate_self(client, auth):
    me = client.get('/api/auth/verify', headers=auth).get_json()['user']
    response = client.patch(f"/api/usuarios/{me['id']}/status", headers=auth, json={'status': 'inativo'})
    assert response.status_code == 403


def test_password_change_only_when_sent(client, services):
    operador = _criar_operador(services)
    users = services['user_service']

    users.update(operador['id'], {'nome': 'Operador Chefe', 'password': ''})
    login(client, 'operador@example.com', 'segredo1')

    users.update(operador['id'], {'password': 'nova-senha'})
    login(client, 'operador@example.com', 'nova-senha')


def test_dashboard_layout_belongs_to_the_user(client, services):
    operador = _criar_operador(services)
    outro = _criar_operador(services, email='outro@example.com')
    headers = login(client, 'operador@example.com', 'segredo1')
    layout = [{'widget': 'vendas', 'x': 0, 'y': 0}]

    saved = client.put(f"/api/usuarios/{operador['id']}/dashboard-layout", headers=headers, json={'layout': layout})
    assert saved.status_code == 200
    assert client.get(f"/api/usuarios/{operador['id']}/dashboard-layout", headers=headers).get_json() == {'layout': layout}
    assert client.get(f"/api/usuarios/{outro['id']}/dashboard-layout", headers=headers).status_code == 403

    with pytest.raises(ValidationError):
        services['user_service'].save_dashboard_layout(operador['id'], {'widget': 'x'})


def test_role_in_use_cannot_be_deleted(services):
    roles = services['role_service']
    admin_role = next(r for r in roles.list() if r['nome'] == 'Administrador')
    with pytest.raises(BusinessRuleError):
        roles.delete(admin_role['id'])

    vendedor = roles.add({'nome': 'Vendedor', 'permissoes': [{'modulo': 'vendas', 'acoes': ['ler', 'criar']}]})
    operador = _criar_operador(services, role_id=vendedor['id'])
    with pytest.raises(BusinessRuleError):
        roles.delete(vendedor['id'])

    services['user_service'].update(operador['id'], {'role_id': None})
    roles.delete(vendedor['id'])
    assert [r['nome'] for r in roles.list()] == ['Administrador']


def test_role_validation(services):
    roles = services['role_service']
    with pytest.raises(ValidationError):
        roles.add({'nome': 'Duplicado', 'permissoes': [{'modulo': 'vendas'}, {'modulo': 'vendas'}]})
    with pytest.raises(ValidationError):
        roles.add({'nome': 'Inexistente', 'permissoes': [{'modulo': 'foguetes'}]})
    roles.add({'nome': 'Estoquista'})
    with pytest.raises(BusinessRuleError):
        roles.add({'nome': 'Estoquista'})


def test_role_delete_through_api(client, auth, services):
    role = services['role_service'].add({'nome': 'Temporário'})
    response = client.delete(f"/api/roles/{role['id']}", headers=auth)
    assert response.status_code == 200
    assert client.get(f"/api/roles/{role['id']}", headers=auth).status_code == 404
