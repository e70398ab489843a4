"""
Response envelopes shared by all routers
"""
from pydantic import BaseModel
from typing import Any, Optional


class ApiResponse(BaseModel):
    """Success envelope: {status: "success", data?, message?, total?}"""
    status: str = "success"
    data: Optional[Any] = None
    message: Optional[str] = None
    total: Optional[int] = None


def success_response(data: Any = None, message: Optional[str] = None, total: Optional[int] = None) -> dict:
    envelope = ApiResponse(data=data, message=message, total=total).model_dump(mode="json")
    # Optional envelope keys are omitted when unset; nulls inside data are kept
    return {key: value for key, value in envelope.items() if value is not None}


def parse_input(model_cls, data):
    """
    Coerce caller input into `model_cls`.

    Pydantic failures are re-raised as the service's ValidationError so that
    invalid input never reaches the store.
    """
    from pydantic import ValidationError as PydanticValidationError
    from account_registry.errors import Errors

    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid input")
        raise Errors.validation(message, errors) from e
