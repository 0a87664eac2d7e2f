# gestao/domain/validation.py
# Validação explícita de payloads com resultado etiquetado (sucesso/falha).

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from gestao.api.errors import ValidationError


@dataclass
class ValidationResult:
    ok: bool
    data: Optional[Dict[str, Any]] = None
    errors: List[Dict[str, str]] = field(default_factory=list)

    def unwrap(self) -> Dict[str, Any]:
        """Devolve os dados validados ou levanta ValidationError (400) com os erros por campo."""
        if not self.ok:
            first = self.errors[0]['mensagem'] if self.errors else "Dados inválidos."
            raise ValidationError(first, payload=self.errors)
        return self.data


def _format_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        campo = '.'.join(str(part) for part in err.get('loc', ())) or '__root__'
        mensagem = err.get('msg', 'Valor inválido.')
        if mensagem.startswith('Value error, '):
            mensagem = mensagem[len('Value error, '):]
        errors.append({'campo': campo, 'mensagem': mensagem})
    return errors


def validate_payload(schema: Type[BaseModel], data: Any) -> ValidationResult:
    if not isinstance(data, Mapping):
        return ValidationResult(ok=False, errors=[{'campo': '__root__', 'mensagem': "O corpo da requisição deve ser um objeto JSON."}])
    try:
        model = schema.model_validate(dict(data))
    except PydanticValidationError as e:
        return ValidationResult(ok=False, errors=_format_errors(e))
    return ValidationResult(ok=True, data=model.model_dump())


def validate_partial(schema: Type[BaseModel], current: Mapping[str, Any], patch: Any) -> ValidationResult:
    """
    Valida uma atualização parcial: mescla o registro atual com o patch, valida o
    conjunto e devolve apenas as chaves presentes no patch que pertencem ao schema.
    """
    if not isinstance(patch, Mapping):
        return validate_payload(schema, patch)
    merged = {**dict(current), **dict(patch)}
    result = validate_payload(schema, merged)
    if not result.ok:
        return result
    changed = {k: v for k, v in result.data.items() if k in patch}
    return ValidationResult(ok=True, data=changed)
