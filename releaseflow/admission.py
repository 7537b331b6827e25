"""Admission requests, responses and JSON patches between object versions."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from typing import Any


class Operation(str, Enum):
    """The operation an admission request was made for."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CONNECT = "CONNECT"

    def __str__(self) -> str:
        return self.value


@dataclass
class AdmissionRequest:
    """An incoming request to admit a change to an object.

    ``object`` and ``old_object`` hold the raw JSON of the new and the
    previous version of the object.
    """

    kind: str
    operation: Operation
    username: str = ""
    object: bytes = b""
    old_object: bytes = b""

    def __post_init__(self) -> None:
        self.operation = Operation(self.operation)


@dataclass
class PatchOperation:
    """One JSON Patch operation."""

    operation: str
    path: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Return the operation in its JSON Patch form."""
        data: dict[str, Any] = {"op": self.operation, "path": self.path}
        if self.operation != "remove":
            data["value"] = self.value
        return data


@dataclass
class AdmissionResponse:
    """The verdict on an admission request, with any patches to apply."""

    allowed: bool
    code: int = HTTPStatus.OK
    reason: str = ""
    message: str = ""
    patches: list[PatchOperation] = field(default_factory=list)

    @property
    def patch_type(self) -> str | None:
        """Return the patch type when the response carries patches."""
        return "JSONPatch" if self.patches else None


def allowed(reason: str) -> AdmissionResponse:
    """Return a response that admits the request."""
    return AdmissionResponse(allowed=True, code=HTTPStatus.OK, reason=reason)


def errored(code: int, message: str) -> AdmissionResponse:
    """Return a response that rejects the request with an error."""
    return AdmissionResponse(allowed=False, code=code, message=message)


def _escape(key: str) -> str:
    return key.replace("~", "~0").replace("/", "~1")


def _category(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    raise TypeError(f"unsupported JSON value of type {type(value).__name__}")


def _diff_values(old: Any, new: Any, path: str) -> list[PatchOperation]:
    old_kind, new_kind = _category(old), _category(new)
    if old_kind != new_kind:
        return [PatchOperation("replace", path, new)]
    if new_kind == "object":
        return _diff_objects(old, new, path)
    if old != new:
        return [PatchOperation("replace", path, new)]
    return []


def _diff_objects(old: Mapping[str, Any], new: Mapping[str, Any], path: str) -> list[PatchOperation]:
    patches: list[PatchOperation] = []
    for key in sorted(new):
        child = f"{path}/{_escape(key)}"
        if key not in old:
            patches.append(PatchOperation("add", child, new[key]))
        else:
            patches.extend(_diff_values(old[key], new[key], child))
    patches.extend(
        PatchOperation("remove", f"{path}/{_escape(key)}")
        for key in sorted(old)
        if key not in new
    )
    return patches


def _load(document: bytes | str) -> Any:
    try:
        return json.loads(document)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValueError(f"invalid JSON document: {exc}") from exc


def create_patch(original: bytes | str, modified: bytes | str) -> list[PatchOperation]:
    """Return the JSON Patch operations that turn ``original`` into ``modified``.

    Arrays that differ are replaced as a whole.
    """
    return _diff_values(_load(original), _load(modified), "")


def patch_response_from_raw(raw: bytes | str, patched: bytes | str) -> AdmissionResponse:
    """Return an admitting response that patches ``raw`` into ``patched``."""
    try:
        patches = create_patch(raw, patched)
    except (ValueError, TypeError) as exc:
        return errored(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
    return AdmissionResponse(allowed=True, patches=patches)