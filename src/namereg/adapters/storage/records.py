"""
Checkpoint record codec - Schema-checked JSON layout for saved state.

Pydantic models define the persisted layout; the "state" field is the
discriminator between the two process variants. Manager records embed
process records as JSON objects.

Layout (version 1):

    {"type": "RegistrationProcess", "version": 1, "name": "d/example",
     "state": "reserved", "value": "...", "rand": "...", "tx": "..."}

    {"type": "RegistrationProcess", "version": 1, "name": "d/example",
     "state": "activated", "value": "...", "rand": "...", "tx": "...",
     "txActivation": "..."}

    {"type": "RegistrationManager", "version": 1, "elements": [...]}

Activated records keep the commit fields (value, rand, tx) next to
txActivation, so a restored process can still be described and
re-saved in full; an activated record without them is rejected.

Any deviation raises RecordFormatError.
"""

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from namereg.domain.exceptions import RecordFormatError
from namereg.domain.records import (
    MANAGER_RECORD_TYPE,
    PROCESS_RECORD_TYPE,
    RECORD_VERSION,
    ActivatedRecord,
    ManagerRecord,
    ProcessRecord,
    ReservedRecord,
)


class _RecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ReservedModel(_RecordModel):
    """Process record in "reserved" state."""

    type: Literal["RegistrationProcess"]
    version: Literal[1]
    name: str
    state: Literal["reserved"]
    value: str
    rand: str
    tx: str


class ActivatedModel(_RecordModel):
    """Process record in "activated" state."""

    type: Literal["RegistrationProcess"]
    version: Literal[1]
    name: str
    state: Literal["activated"]
    value: str
    rand: str
    tx: str
    tx_activation: str = Field(alias="txActivation")


ProcessModel = Annotated[ReservedModel | ActivatedModel, Field(discriminator="state")]


class ManagerModel(_RecordModel):
    """Manager record with embedded process records."""

    type: Literal["RegistrationManager"]
    version: Literal[1]
    elements: list[ProcessModel]


_process_adapter: TypeAdapter[ReservedModel | ActivatedModel] = TypeAdapter(ProcessModel)


def _to_model(record: ProcessRecord) -> ReservedModel | ActivatedModel:
    if isinstance(record, ActivatedRecord):
        return ActivatedModel(
            type=PROCESS_RECORD_TYPE,
            version=RECORD_VERSION,
            name=record.name,
            state="activated",
            value=record.value,
            rand=record.rand,
            tx=record.tx,
            tx_activation=record.tx_activation,
        )
    if isinstance(record, ReservedRecord):
        return ReservedModel(
            type=PROCESS_RECORD_TYPE,
            version=RECORD_VERSION,
            name=record.name,
            state="reserved",
            value=record.value,
            rand=record.rand,
            tx=record.tx,
        )
    raise RecordFormatError(f"Unknown registration record: {type(record).__name__}")


def _from_model(model: ReservedModel | ActivatedModel) -> ProcessRecord:
    if isinstance(model, ActivatedModel):
        return ActivatedRecord(
            name=model.name,
            value=model.value,
            rand=model.rand,
            tx=model.tx,
            tx_activation=model.tx_activation,
        )
    return ReservedRecord(name=model.name, value=model.value, rand=model.rand, tx=model.tx)


def _format_error(kind: str, error: ValidationError) -> RecordFormatError:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return RecordFormatError(
        f"Wrong JSON object found, expected version {RECORD_VERSION} {kind}: "
        f"{location}: {first['msg']}"
    )


def encode_process(record: ProcessRecord) -> dict[str, Any]:
    """Encode a process record as a JSON-ready dict."""
    return _to_model(record).model_dump(by_alias=True)


def decode_process(data: Any) -> ProcessRecord:
    """
    Decode and validate a process record.

    Raises:
        RecordFormatError: On wrong type, version, state tag or fields
    """
    try:
        model = _process_adapter.validate_python(data)
    except ValidationError as e:
        raise _format_error(PROCESS_RECORD_TYPE, e) from e
    return _from_model(model)


def encode_manager(record: ManagerRecord) -> dict[str, Any]:
    """Encode a manager record as a JSON-ready dict."""
    model = ManagerModel(
        type=MANAGER_RECORD_TYPE,
        version=RECORD_VERSION,
        elements=[_to_model(element) for element in record.elements],
    )
    return model.model_dump(by_alias=True)


def decode_manager(data: Any) -> ManagerRecord:
    """
    Decode and validate a manager record, including every element.

    Raises:
        RecordFormatError: If the record or any element is invalid
    """
    try:
        model = ManagerModel.model_validate(data)
    except ValidationError as e:
        raise _format_error(MANAGER_RECORD_TYPE, e) from e
    return ManagerRecord(elements=tuple(_from_model(element) for element in model.elements))


def dumps_manager(record: ManagerRecord) -> str:
    """Serialize a manager record to JSON text."""
    return json.dumps(encode_manager(record), indent=2, ensure_ascii=False)


def loads_manager(text: str) -> ManagerRecord:
    """
    Parse JSON text into a manager record.

    Raises:
        RecordFormatError: If the text is not JSON or not a valid record
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RecordFormatError(f"Checkpoint is not valid JSON: {e}") from e
    return decode_manager(data)
