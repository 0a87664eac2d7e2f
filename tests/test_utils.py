from gestao.utils.formatters import only_digits, format_cpf_cnpj, format_cep
from gestao.utils.validators import is_valid_cpf, is_valid_cnpj, is_valid_cpf_or_cnpj
from gestao.utils.data_conversion import round_money, safe_float


def test_format_cpf_and_cnpj_masks():
    assert format_cpf_cnpj('52998224725') == '529.982.247-25'
    assert format_cpf_cnpj('11222333000181') == '11.222.333/0001-81'
    # já mascarado: mesma saída
    assert format_cpf_cnpj('529.982.247-25') == '529.982.247-25'


def test_format_keeps_unexpected_lengths():
    assert format_cpf_cnpj('12345') == '12345'
    assert format_cpf_cnpj(None) == ''
    assert format_cep('01001000') == '01001-000'


def test_only_digits_strips_mask():
    assert only_digits('11.222.333/0001-81') == '11222333000181'
    assert only_digits(None) == ''


def test_cpf_check_digits():
    assert is_valid_cpf('529.982.247-25')
    assert not is_valid_cpf('529.982.247-24')
    assert not is_valid_cpf('111.111.111-11')
    assert not is_valid_cpf('1234567890')


def test_cnpj_check_digits():
    assert is_valid_cnpj('11.222.333/0001-81')
    assert not is_valid_cnpj('11.222.333/0001-80')
    assert not is_valid_cnpj('00000000000000')


def test_cpf_or_cnpj():
    assert is_valid_cpf_or_cnpj('52998224725')
    assert is_valid_cpf_or_cnpj('11222333000181')
    assert not is_valid_cpf_or_cnpj('123')


def test_money_helpers():
    assert round_money('10.456') == 10.46
    assert round_money('abc') == 0.0
    assert safe_float(None) is None


def test_cpf_cnpj_mask_round_trip():
    documentos = ['52998224725', '00000000191', '12345678909', '11222333000181', '45997418000153', '00000000000000']
    for documento in documentos:
        mascarado = format_cpf_cnpj(documento)
        assert mascarado != documento
        assert only_digits(mascarado) == documento
