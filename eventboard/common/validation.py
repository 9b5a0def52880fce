"""
Schema validation for request bodies and stored records.

validate() looks a schema up by id, runs the candidate through it and
returns either the cleaned data (camelCase keys, JSON-ready values) or a
list of field-level errors suitable for a 400 response body.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from eventboard.events_service.models import EventCreate, EventParticipants, EventPatch, EventRecord
from eventboard.organizations_service.models import (
    OrganizationCreate,
    OrganizationPatch,
    OrganizationRecord,
)
from eventboard.users_service.models import UserCreate, UserPatch, UserRecord

SCHEMAS: Dict[str, Type[BaseModel]] = {
    "user": UserCreate,
    "user_patch": UserPatch,
    "user_record": UserRecord,
    "organization": OrganizationCreate,
    "organization_patch": OrganizationPatch,
    "organization_record": OrganizationRecord,
    "event": EventCreate,
    "event_patch": EventPatch,
    "event_record": EventRecord,
    "event_participants": EventParticipants,
}


@dataclass
class ValidationResult:
    ok: bool
    data: Optional[Dict[str, Any]] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)


def wire_name(part: Any) -> Any:
    # defaulted fields report their attribute name, not the alias
    if isinstance(part, str) and "_" in part:
        return to_camel(part)
    return part


def field_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    """
    Flatten a pydantic ValidationError into [{path, message, code}, ...].

    path uses the wire (camelCase) names, e.g. ["repeatPassword"] or
    ["participants", 0, "id"].
    """
    return [
        {
            "path": [wire_name(part) for part in err["loc"]],
            "message": err["msg"].removeprefix("Value error, "),
            "code": err["type"],
        }
        for err in exc.errors()
    ]


def validate(schema_id: str, candidate: Any, partial: bool = False) -> ValidationResult:
    """
    Validate candidate against the schema registered as schema_id.

    Args:
        schema_id (str): Key in SCHEMAS.
        candidate: Decoded JSON body or stored record.
        partial (bool): Only return fields the candidate actually set.
            Used for PATCH bodies so defaults do not overwrite stored values.

    Returns:
        ValidationResult: ok with data, or not ok with field errors.

    Raises:
        KeyError: Unknown schema id.
    """
    schema = SCHEMAS[schema_id]

    if not isinstance(candidate, dict):
        return ValidationResult(
            ok=False,
            errors=[{"path": [], "message": "Expected a JSON object", "code": "dict_type"}],
        )

    try:
        model = schema.model_validate(candidate)
    except ValidationError as e:
        return ValidationResult(ok=False, errors=field_errors(e))

    data = model.model_dump(mode="json", by_alias=True, exclude_unset=partial)
    return ValidationResult(ok=True, data=data)
