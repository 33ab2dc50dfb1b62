"""
Request schemas for the API boundary.

Every resource parses its JSON body through :func:`load`, which turns
pydantic errors into a ``ValidationError`` carrying one message per field.
"""
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from utils.errors import ValidationError

SchemaT = TypeVar('SchemaT', bound='RequestSchema')


class RequestSchema(BaseModel):
    """Accepts both snake_case and camelCase keys; unknown keys are dropped"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )


def field_errors(exc: PydanticValidationError) -> Dict[str, str]:
    errors = {}
    for error in exc.errors():
        field = '.'.join(str(part) for part in error.get('loc', ())) or 'body'
        errors.setdefault(field, error.get('msg', 'Invalid value'))
    return errors


def load(schema: Type[SchemaT], data: Optional[Any]) -> SchemaT:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Validation errors", details=field_errors(e))
