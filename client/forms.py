from typing import Any, Dict, Type

from pydantic import BaseModel, ValidationError


class FormValidator:
    """Collects per-field messages from a pydantic schema for a form."""

    def __init__(self, schema: Type[BaseModel]):
        self.schema = schema
        self.errors: Dict[str, str] = {}

    @staticmethod
    def _field_errors(exc: ValidationError) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        for err in exc.errors():
            if err["loc"]:
                errors.setdefault(str(err["loc"][0]), err["msg"])
        return errors

    def validate(self, data: Dict[str, Any]) -> bool:
        try:
            self.schema.model_validate(data)
        except ValidationError as e:
            self.errors = self._field_errors(e)
            return False
        self.errors = {}
        return True

    def validate_field(self, field: str, value: Any) -> bool:
        if field not in self.schema.model_fields:
            return True
        try:
            self.schema.model_validate({field: value})
        except ValidationError as e:
            # Other fields are absent here, so only this field's errors count
            message = self._field_errors(e).get(field)
            if message:
                self.errors[field] = message
                return False
        self.clear_error(field)
        return True

    def clear_errors(self):
        self.errors = {}

    def clear_error(self, field: str):
        self.errors.pop(field, None)
