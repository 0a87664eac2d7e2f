# gestao/database/cadastro_repositories.py
# Repositórios dos cadastros simples; toda a lógica vem de BaseRepository.

from .base_repository import BaseRepository
from gestao.domain.cadastros import (
    Unidade, Categoria, Cargo, Cliente, Fornecedor, Funcionario, ContaBancaria, Meta,
)
from gestao.domain.produto import Produto


class ProdutoRepository(BaseRepository[Produto]):
    model = Produto


class ClienteRepository(BaseRepository[Cliente]):
    model = Cliente
    natural_key = 'nome_razao_social'


class FornecedorRepository(BaseRepository[Fornecedor]):
    model = Fornecedor
    natural_key = 'nome_razao_social'


class ContaBancariaRepository(BaseRepository[ContaBancaria]):
    model = ContaBancaria
    natural_key = 'nome_conta'
    active_status = 'ativa'
    inactive_status = 'inativa'


class FuncionarioRepository(BaseRepository[Funcionario]):
    model = Funcionario
    natural_key = 'nome_completo'


class CargoRepository(BaseRepository[Cargo]):
    model = Cargo


class MetaRepository(BaseRepository[Meta]):
    model = Meta
    natural_key = 'id'


class CategoriaRepository(BaseRepository[Categoria]):
    model = Categoria


class UnidadeRepository(BaseRepository[Unidade]):
    model = Unidade
