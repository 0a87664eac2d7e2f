# gestao/services/cadastro_services.py
# Serviços dos cadastros. Cada um só acrescenta ao CrudService o que a entidade exige.

from typing import Any, Dict, Optional

from gestao.database.cadastro_repositories import (
    ProdutoRepository, ClienteRepository, FornecedorRepository, ContaBancariaRepository,
    FuncionarioRepository, CargoRepository, MetaRepository, CategoriaRepository, UnidadeRepository,
)
from gestao.domain.cadastros import Unidade, Categoria, Cargo
from gestao.domain.produto import Produto
from gestao.domain import schemas
from gestao.services.crud_service import CrudService
from gestao.utils.formatters import format_cpf_cnpj
from gestao.api.errors import ValidationError


def _ensure_exists(db, model, record_id: Optional[int], campo: str) -> None:
    if record_id is not None and db.get(model, record_id) is None:
        raise ValidationError(f"{campo} {record_id} não existe.", payload=[{'campo': campo, 'mensagem': 'Registro não encontrado.'}])


class ProdutoService(CrudService):
    def __init__(self, repository: ProdutoRepository):
        super().__init__(repository, schemas.ProdutoSchema, 'produtos')

    def _build_record(self, validated: Dict[str, Any], user):
        record = super()._build_record(validated, user)
        record.quantidade = 0
        return record

    def _check_references(self, db, values: Dict[str, Any]) -> None:
        _ensure_exists(db, Unidade, values.get('unidade_id'), 'unidade_id')
        _ensure_exists(db, Categoria, values.get('categoria_id'), 'categoria_id')


class _PessoaService(CrudService):
    """Clientes e fornecedores: documento gravado com máscara e carimbo de autoria."""

    def _build_record(self, validated: Dict[str, Any], user):
        validated = dict(validated, cpf_cnpj=format_cpf_cnpj(validated['cpf_cnpj']))
        return super()._build_record(validated, user)

    def _prepare_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        if 'cpf_cnpj' in changes:
            changes = dict(changes, cpf_cnpj=format_cpf_cnpj(changes['cpf_cnpj']))
        return changes


class ClienteService(_PessoaService):
    def __init__(self, repository: ClienteRepository):
        super().__init__(repository, schemas.ClienteSchema, 'clientes', stamp_actor=True)


class FornecedorService(_PessoaService):
    def __init__(self, repository: FornecedorRepository):
        super().__init__(repository, schemas.FornecedorSchema, 'fornecedores', stamp_actor=True)


class ContaBancariaService(CrudService):
    def __init__(self, repository: ContaBancariaRepository):
        super().__init__(repository, schemas.ContaBancariaSchema, 'contas bancárias', stamp_actor=True)

    def _build_record(self, validated: Dict[str, Any], user):
        record = super()._build_record(validated, user)
        record.saldo_atual = validated.get('saldo_inicial') or 0
        return record

    def _prepare_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        # saldo_inicial vale apenas na criação
        changes.pop('saldo_inicial', None)
        return changes


class FuncionarioService(CrudService):
    def __init__(self, repository: FuncionarioRepository):
        super().__init__(repository, schemas.FuncionarioSchema, 'funcionários')

    def _build_record(self, validated: Dict[str, Any], user):
        validated = dict(validated, cnpj=format_cpf_cnpj(validated['cnpj']), cpf=format_cpf_cnpj(validated['cpf']))
        return super()._build_record(validated, user)

    def _prepare_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        for campo in ('cnpj', 'cpf'):
            if campo in changes:
                changes[campo] = format_cpf_cnpj(changes[campo])
        return changes

    def _check_references(self, db, values: Dict[str, Any]) -> None:
        _ensure_exists(db, Cargo, values.get('cargo_id'), 'cargo_id')


class CargoService(CrudService):
    def __init__(self, repository: CargoRepository):
        super().__init__(repository, schemas.CargoSchema, 'cargos')


class MetaService(CrudService):
    def __init__(self, repository: MetaRepository):
        super().__init__(repository, schemas.MetaSchema, 'metas')

    def _check_references(self, db, values: Dict[str, Any]) -> None:
        _ensure_exists(db, Produto, values.get('produto_id'), 'produto_id')


class CategoriaService(CrudService):
    def __init__(self, repository: CategoriaRepository):
        super().__init__(repository, schemas.CategoriaSchema, 'categorias')


class UnidadeService(CrudService):
    def __init__(self, repository: UnidadeRepository):
        super().__init__(repository, schemas.UnidadeSchema, 'unidades')
