# gestao/domain/schemas.py
# Modelos pydantic de entrada para todas as entidades graváveis.

import re
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from gestao.utils.formatters import format_cep, only_digits
from gestao.utils.validators import is_valid_cpf, is_valid_cnpj, is_valid_cpf_or_cnpj
from gestao.domain.produto import TIPO_VENDA, TIPO_USO_INTERNO, TIPO_MATERIA_PRIMA
from gestao.domain.user import MODULOS, ACOES

StatusCadastro = Literal['ativo', 'inativo']
CondicaoPagamento = Literal['A_VISTA', 'A_PRAZO']


class InputModel(BaseModel):
    """Base dos schemas: ignora campos desconhecidos e remove espaços das strings."""
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True)


# --- Estruturas compartilhadas ---

class Endereco(InputModel):
    logradouro: str = Field(min_length=1)
    numero: str = Field(min_length=1)
    complemento: Optional[str] = None
    bairro: str = Field(min_length=1)
    cidade: str = Field(min_length=1)
    uf: str = Field(min_length=2, max_length=2)
    cep: str

    @field_validator('uf')
    @classmethod
    def _uf_upper(cls, v: str) -> str:
        return v.upper()

    @field_validator('cep')
    @classmethod
    def _cep(cls, v: str) -> str:
        if len(only_digits(v)) != 8:
            raise ValueError("CEP deve ter 8 dígitos.")
        return format_cep(v)


class DadosBancarios(InputModel):
    banco: Optional[str] = None
    agencia: Optional[str] = None
    conta: Optional[str] = None
    pix: Optional[str] = None


# --- Cadastros ---

class ClienteSchema(InputModel):
    nome_razao_social: str = Field(min_length=3)
    tipo_pessoa: Literal['fisica', 'juridica']
    cpf_cnpj: str
    inscricao_estadual: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[EmailStr] = None
    endereco: Endereco

    @field_validator('cpf_cnpj')
    @classmethod
    def _documento(cls, v: str) -> str:
        if not is_valid_cpf_or_cnpj(v):
            raise ValueError("CPF/CNPJ inválido.")
        return v

    @field_validator('email', mode='before')
    @classmethod
    def _email_vazio(cls, v):
        return None if v == '' else v


class FornecedorSchema(ClienteSchema):
    nome_fantasia: Optional[str] = None
    endereco: Optional[Endereco] = None
    dados_bancarios: Optional[DadosBancarios] = None


class UnidadeSchema(InputModel):
    nome: str = Field(min_length=1)
    sigla: str = Field(min_length=1, max_length=10)


class CategoriaSchema(InputModel):
    nome: str = Field(min_length=1)


class CargoSchema(InputModel):
    nome: str = Field(min_length=3)


class FuncionarioSchema(InputModel):
    razao_social: str = Field(min_length=3)
    cnpj: str
    nome_completo: str = Field(min_length=3)
    cpf: str
    contato: str = Field(min_length=10)
    cargo_id: int
    banco: str = Field(min_length=1)
    agencia: str = Field(min_length=1)
    conta: str = Field(min_length=1)

    @field_validator('cnpj')
    @classmethod
    def _cnpj(cls, v: str) -> str:
        if not is_valid_cnpj(v):
            raise ValueError("CNPJ inválido.")
        return v

    @field_validator('cpf')
    @classmethod
    def _cpf(cls, v: str) -> str:
        if not is_valid_cpf(v):
            raise ValueError("CPF inválido.")
        return v


class MetaSchema(InputModel):
    produto_id: int
    meta_por_animal: float = Field(gt=0)


class ContaBancariaSchema(InputModel):
    nome_conta: str = Field(min_length=3)
    banco: str = Field(min_length=1)
    agencia: Optional[str] = None
    conta: Optional[str] = None
    tipo: Literal['Conta Corrente', 'Conta Poupança', 'Caixa']
    saldo_inicial: float = 0


class ProdutoSchema(InputModel):
    """
    Produto discriminado por `tipo_produto`; cada tipo exige um conjunto de campos.
    `quantidade` não faz parte do schema: só as transações de estoque a alteram.
    """
    tipo_produto: Literal['VENDA', 'USO_INTERNO', 'MATERIA_PRIMA']
    nome: str = Field(min_length=3)
    codigo: Optional[str] = None
    sku: Optional[str] = None
    unidade_id: Optional[int] = None
    categoria_id: Optional[int] = None
    preco_venda: Optional[float] = None
    custo_unitario: float = Field(default=0, ge=0)
    ncm: Optional[str] = None
    cfop: Optional[str] = None
    cest: Optional[str] = None

    @model_validator(mode='after')
    def _regras_por_tipo(self) -> 'ProdutoSchema':
        if self.tipo_produto == TIPO_VENDA:
            if self.unidade_id is None:
                raise ValueError("Selecione uma unidade.")
            if self.preco_venda is None or self.preco_venda <= 0:
                raise ValueError("O preço de venda deve ser maior que zero.")
            if not self.ncm or not re.fullmatch(r"\d{8}", self.ncm):
                raise ValueError("NCM é obrigatório e deve ter 8 dígitos.")
            if not self.cfop or not re.fullmatch(r"\d{4}", self.cfop):
                raise ValueError("CFOP é obrigatório e deve ter 4 dígitos.")
        elif self.tipo_produto == TIPO_USO_INTERNO:
            if self.categoria_id is None:
                raise ValueError("Selecione uma categoria.")
            if self.custo_unitario <= 0:
                raise ValueError("O custo unitário deve ser maior que zero.")
        elif self.tipo_produto == TIPO_MATERIA_PRIMA:
            if self.unidade_id is None:
                raise ValueError("Selecione uma unidade.")
        return self


# --- Usuários e perfis ---

class PermissaoModulo(InputModel):
    modulo: Literal[MODULOS]  # type: ignore[valid-type]
    acoes: List[Literal[ACOES]] = Field(default_factory=list)  # type: ignore[valid-type]


class RoleSchema(InputModel):
    nome: str = Field(min_length=3)
    descricao: Optional[str] = None
    permissoes: List[PermissaoModulo] = Field(default_factory=list)

    @field_validator('permissoes')
    @classmethod
    def _modulos_unicos(cls, v: List[PermissaoModulo]) -> List[PermissaoModulo]:
        modulos = [p.modulo for p in v]
        if len(modulos) != len(set(modulos)):
            raise ValueError("Cada módulo pode aparecer apenas uma vez nas permissões.")
        return v


class UsuarioSchema(InputModel):
    nome: str = Field(min_length=1)
    email: EmailStr
    role_id: Optional[int] = None
    is_admin: bool = False
    password: Optional[str] = Field(default=None, min_length=6)

    @field_validator('email')
    @classmethod
    def _email_lower(cls, v: str) -> str:
        return v.lower()

    @field_validator('password', mode='before')
    @classmethod
    def _senha_vazia(cls, v):
        return None if v == '' else v


class UsuarioCreateSchema(UsuarioSchema):
    password: str = Field(min_length=6)


# --- Transações ---

class ItemVendaSchema(InputModel):
    produto_id: int
    produto_nome: str = Field(min_length=1)
    quantidade: float = Field(gt=0)
    preco_unitario: float = Field(ge=0)
    custo_unitario: float = Field(default=0, ge=0)


class VendaSchema(InputModel):
    cliente_id: int
    cliente_nome: Optional[str] = None
    data: Optional[datetime] = None
    produtos: List[ItemVendaSchema] = Field(min_length=1)
    valor_total: float = Field(ge=0)
    condicao_pagamento: CondicaoPagamento
    metodo_pagamento: str = Field(min_length=1)
    conta_bancaria_id: Optional[int] = None
    numero_parcelas: Optional[int] = Field(default=None, ge=1)
    taxa_cartao: Optional[float] = Field(default=None, ge=0)
    valor_final: Optional[float] = Field(default=None, ge=0)
    data_vencimento: Optional[date] = None

    @model_validator(mode='after')
    def _vencimento_a_prazo(self) -> 'VendaSchema':
        if self.condicao_pagamento == 'A_PRAZO' and self.data_vencimento is None:
            raise ValueError("A data de vencimento é obrigatória para vendas a prazo.")
        return self


class MovimentacaoSchema(InputModel):
    produto_id: int
    quantidade: float = Field(gt=0)
    tipo: Literal['entrada', 'saida']
    motivo: str = Field(min_length=1)


class ItemCompraSchema(InputModel):
    produto_id: int
    produto_nome: str = Field(min_length=1)
    quantidade: float = Field(gt=0)
    custo_unitario: float = Field(ge=0)


class CompraSchema(InputModel):
    fornecedor_id: int
    nota_fiscal: str = Field(min_length=1)
    data: date
    itens: List[ItemCompraSchema] = Field(min_length=1)
    valor_total: float = Field(ge=0)
    conta_bancaria_id: int
    condicao_pagamento: CondicaoPagamento
    numero_parcelas: Optional[int] = Field(default=None, ge=1)
    data_primeiro_vencimento: Optional[date] = None

    @model_validator(mode='after')
    def _parcelas_a_prazo(self) -> 'CompraSchema':
        if self.condicao_pagamento == 'A_PRAZO':
            if not self.numero_parcelas or not self.data_primeiro_vencimento:
                raise ValueError("Para compras a prazo, o número de parcelas e a data do primeiro vencimento são obrigatórios.")
        return self


class AbateSchema(InputModel):
    data: datetime
    fornecedor_id: int
    numero_animais: int = Field(gt=0)
    custo_por_animal: float = Field(gt=0)
    condenado: int = Field(default=0, ge=0)
    responsavel_id: Optional[int] = None
    compra_id: Optional[int] = None


class ItemProduzidoSchema(InputModel):
    produto_id: int
    produto_nome: str = Field(min_length=1)
    quantidade: float = Field(ge=0)
    perda: float = Field(default=0, ge=0)


class LoteGeradoSchema(InputModel):
    produto_id: int
    codigo: str = Field(min_length=1)
    quantidade: float = Field(gt=0)
    data_producao: date
    data_validade: Optional[date] = None


class ProducaoSchema(InputModel):
    data: datetime
    responsavel_id: int
    abate_id: int
    lote: Optional[str] = None
    descricao: Optional[str] = None
    produtos: List[ItemProduzidoSchema] = Field(min_length=1)
    lotes_gerados: List[LoteGeradoSchema] = Field(default_factory=list)


class PagamentoSchema(InputModel):
    conta_bancaria_id: int
    data: Optional[date] = None


# --- Empresa ---

class ConfiguracaoFiscal(InputModel):
    cfop_padrao: str = "5101"
    cst_padrao: str = Field(default="040", min_length=2)
    aliquota_icms_padrao: float = Field(default=0, ge=0)
    reducao_bc_padrao: float = Field(default=0, ge=0)
    informacoes_complementares: str = ""


class CompanyInfoSchema(InputModel):
    razao_social: str = Field(min_length=3)
    nome_fantasia: str = Field(min_length=3)
    cnpj: str
    inscricao_estadual: str = Field(min_length=1)
    endereco: Endereco
    telefone: str = Field(min_length=10)
    email: EmailStr
    regime_tributario: Literal['1', '3'] = '3'
    configuracao_fiscal: ConfiguracaoFiscal = Field(default_factory=ConfiguracaoFiscal)

    @field_validator('cnpj')
    @classmethod
    def _cnpj(cls, v: str) -> str:
        if not is_valid_cnpj(v):
            raise ValueError("CNPJ inválido.")
        return v
