import os
import tempfile

os.environ.setdefault('LOG_DIRECTORY', os.path.join(tempfile.gettempdir(), 'gestao-test-logs'))
os.environ.setdefault('LOG_LEVEL', 'WARNING')

import pytest

from gestao.app import create_app
from gestao.config import Config
from gestao.database import dispose_sqlalchemy_engine
from gestao.integrations.focus_nfe_client import FocusResponse

ADMIN_EMAIL = 'admin@example.com'
ADMIN_PASSWORD = 'admin123'

CPF_VALIDO = '52998224725'
CNPJ_VALIDO = '11222333000181'

ENDERECO = {
    'logradouro': 'Rua das Flores',
    'numero': '100',
    'bairro': 'Centro',
    'cidade': 'São Paulo',
    'uf': 'SP',
    'cep': '01001000',
}


class FakeFocusClient:
    """Substitui o FocusNfeClient: registra as chamadas e devolve respostas configuráveis."""

    def __init__(self, environment):
        self.environment = environment
        self.ambiente = environment.ambiente_codigo
        self.calls = []
        self.responses = {
            'consultar': FocusResponse(404, {'codigo': 'nao_encontrado', 'mensagem': 'Nota fiscal não encontrada'}),
            'emitir': lambda ref, payload: FocusResponse(202, {'referencia': ref, 'status': 'processando_autorizacao'}),
            'cancelar': FocusResponse(200, {'status': 'cancelado', 'mensagem_sefaz': 'Cancelamento homologado'}),
            'excluir': FocusResponse(200, {}),
            'baixar_pdf': FocusResponse(200, content=b'%PDF-1.4 danfe'),
        }

    def _respond(self, name, *args):
        self.calls.append((name,) + args)
        response = self.responses[name]
        return response(*args) if callable(response) else response

    def call_names(self):
        return [call[0] for call in self.calls]

    def consultar(self, ref):
        return self._respond('consultar', ref)

    def emitir(self, ref, payload):
        return self._respond('emitir', ref, payload)

    def cancelar(self, ref, justificativa):
        return self._respond('cancelar', ref, justificativa)

    def excluir(self, ref):
        return self._respond('excluir', ref)

    def baixar_pdf(self, ref):
        return self._respond('baixar_pdf', ref)


class FakeFocusProvider:
    """Client factory: um FakeFocusClient por ambiente."""

    def __init__(self):
        self.clients = {}

    def __call__(self, environment):
        client = self.clients.get(environment.environment_tag)
        if client is None:
            client = self.clients[environment.environment_tag] = FakeFocusClient(environment)
        return client


class FakeBrasilApi:
    def __init__(self):
        self.municipios = {('SP', 'sao paulo'): {'nome': 'São Paulo', 'codigo_ibge': '3550308'}}

    def find_municipio(self, uf, cidade):
        from gestao.integrations.brasil_api_client import normalize_nome
        return self.municipios.get(((uf or '').upper(), normalize_nome(cidade)))

    def fetch_cnpj(self, cnpj):
        return {'cnpj': cnpj, 'razao_social': 'FRIGORIFICO MODELO LTDA'}

    def fetch_cep(self, cep):
        return {'cep': cep, 'city': 'São Paulo', 'state': 'SP'}


def make_config(db_path, **overrides):
    values = dict(
        DATABASE_URL=f"sqlite:///{db_path}",
        SECRET_KEY='test-secret',
        APP_DEBUG=False,
        LOG_LEVEL='WARNING',
        DEFAULT_ADMIN_EMAIL=ADMIN_EMAIL,
        DEFAULT_ADMIN_PASSWORD=ADMIN_PASSWORD,
        NFE_AMBIENTE='HOMOLOGACAO',
        NFE_SYNC_ENABLED=False,
        FOCUS_NFE_URL_PRODUCAO='https://api.focus.test',
        FOCUS_NFE_TOKEN_PRODUCAO='token-producao',
        FOCUS_NFE_URL_HOMOLOGACAO='https://homologacao.focus.test',
        FOCUS_NFE_TOKEN_HOMOLOGACAO='token-homologacao',
    )
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def focus():
    return FakeFocusProvider()


@pytest.fixture
def app(tmp_path, focus):
    dispose_sqlalchemy_engine()
    application = create_app(
        make_config(tmp_path / 'gestao.db'),
        nfe_client_factory=focus,
        brasil_api_client=FakeBrasilApi(),
    )
    application.testing = True
    yield application
    dispose_sqlalchemy_engine()


@pytest.fixture
def services(app):
    return app.config


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
    response = client.post('/api/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.get_json()
    return {'Authorization': f"Bearer {response.get_json()['token']}"}


@pytest.fixture
def auth(client):
    return login(client)


# --- Dados de apoio ---

def criar_unidade(services, nome='Quilograma', sigla='KG'):
    return services['unidade_service'].add({'nome': nome, 'sigla': sigla})


def criar_produto(services, nome='Linguiça Toscana', quantidade=0, unidade_id=None, **extra):
    if unidade_id is None:
        unidade_id = criar_unidade(services)['id']
    produto = services['produto_service'].add({
        'tipo_produto': 'VENDA',
        'nome': nome,
        'codigo': extra.pop('codigo', None),
        'unidade_id': unidade_id,
        'preco_venda': extra.pop('preco_venda', 25.0),
        'custo_unitario': extra.pop('custo_unitario', 12.0),
        'ncm': extra.pop('ncm', '16010000'),
        'cfop': extra.pop('cfop', '5101'),
        **extra,
    })
    if quantidade:
        services['estoque_service'].registrar_movimentacao({
            'produto_id': produto['id'], 'quantidade': quantidade, 'tipo': 'entrada', 'motivo': 'Estoque inicial',
        })
        produto = services['produto_service'].get(produto['id'])
    return produto


def criar_cliente(services, nome='Mercado Bom Preço', **extra):
    data = {
        'nome_razao_social': nome,
        'tipo_pessoa': 'fisica',
        'cpf_cnpj': CPF_VALIDO,
        'email': 'compras@bompreco.com.br',
        'endereco': dict(ENDERECO),
    }
    data.update(extra)
    return services['cliente_service'].add(data)


def criar_fornecedor(services, nome='Fazenda Santa Rita'):
    return services['fornecedor_service'].add({
        'nome_razao_social': nome,
        'tipo_pessoa': 'juridica',
        'cpf_cnpj': CNPJ_VALIDO,
    })


def criar_conta_bancaria(services, nome='Caixa Loja', saldo_inicial=1000.0):
    return services['conta_bancaria_service'].add({
        'nome_conta': nome, 'banco': 'Interno', 'tipo': 'Caixa', 'saldo_inicial': saldo_inicial,
    })


def criar_funcionario(services):
    cargo = services['cargo_service'].add({'nome': 'Açougueiro'})
    return services['funcionario_service'].add({
        'razao_social': 'João Cortes ME',
        'cnpj': CNPJ_VALIDO,
        'nome_completo': 'João da Silva',
        'cpf': CPF_VALIDO,
        'contato': '11987654321',
        'cargo_id': cargo['id'],
        'banco': 'Banco do Brasil',
        'agencia': '1234',
        'conta': '56789-0',
    })


def venda_payload(cliente, itens, condicao='A_VISTA', **extra):
    data = {
        'cliente_id': cliente['id'],
        'produtos': [
            {'produto_id': p['id'], 'produto_nome': p['nome'], 'quantidade': qtd, 'preco_unitario': p['preco_venda']}
            for p, qtd in itens
        ],
        'valor_total': round(sum(p['preco_venda'] * qtd for p, qtd in itens), 2),
        'condicao_pagamento': condicao,
        'metodo_pagamento': 'PIX' if condicao == 'A_VISTA' else 'Boleto/Prazo',
    }
    data.update(extra)
    return data
