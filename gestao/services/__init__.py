# gestao/services/__init__.py
# Makes 'services' a package. Exports service classes.

from .auth_service import AuthService
from .cadastro_services import (
    ProdutoService, ClienteService, FornecedorService, ContaBancariaService,
    FuncionarioService, CargoService, MetaService, CategoriaService, UnidadeService,
)
from .estoque_service import EstoqueService
from .venda_service import VendaService
from .financeiro_service import ContaAPagarService, ContaAReceberService
from .compra_service import CompraService
from .abate_service import AbateService
from .producao_service import ProducaoService
from .user_service import UserService, RoleService
from .settings_service import SettingsService
from .nfe_service import NfeService
from .nfe_sync_service import NfeSyncService

# As instâncias são criadas no app factory (gestao/app.py), não aqui.
