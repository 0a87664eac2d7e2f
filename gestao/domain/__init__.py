# gestao/domain/__init__.py
# Importa todos os modelos ORM para que o metadata (create_all/Alembic) conheça todas as tabelas.

from .cadastros import Unidade, Categoria, Cargo, Cliente, Fornecedor, Funcionario, ContaBancaria, Meta
from .produto import Produto
from .estoque import MovimentacaoEstoque
from .venda import Venda, ItemVenda
from .financeiro import ContaAPagar, ContaAReceber
from .compra import Compra
from .producao import Abate, Producao, Lote
from .user import Role, Usuario
from .empresa import CompanyInfo

__all__ = [
    "Unidade", "Categoria", "Cargo", "Cliente", "Fornecedor", "Funcionario",
    "ContaBancaria", "Meta", "Produto", "MovimentacaoEstoque", "Venda", "ItemVenda",
    "ContaAPagar", "ContaAReceber", "Compra", "Abate", "Producao", "Lote",
    "Role", "Usuario", "CompanyInfo",
]
