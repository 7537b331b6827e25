"""ReleasePlan, ReleasePlanAdmission and ReleaseStrategy resources."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from releaseflow.meta import ObjectMeta


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"{what} must be a mapping, not {type(data).__name__}")
    return data


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string, not {type(value).__name__}")
    return value


class _Resource:
    """Serialization shared by every resource: envelope, metadata, spec and status.

    Subclasses are dataclasses with the fields ``metadata``, ``spec``,
    ``api_version`` and ``kind``, and set ``KIND`` and ``SPEC``.
    """

    KIND: ClassVar[str]
    SPEC: ClassVar[type]

    def _status_dict(self) -> dict[str, Any]:
        return {}

    @classmethod
    def _extra_fields(cls, root: Mapping[str, Any]) -> dict[str, Any]:
        return {}

    def _serialize(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.api_version:
            data["apiVersion"] = self.api_version
        if self.kind:
            data["kind"] = self.kind
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = self.spec.to_dict()
        data["status"] = self._status_dict()
        return data

    @classmethod
    def _deserialize(cls, data: Mapping[str, Any]):
        root = _mapping(data, cls.KIND)
        return cls(
            metadata=ObjectMeta.from_dict(root.get("metadata")),
            spec=cls.SPEC.from_dict(root.get("spec")),
            api_version=_string(root, "apiVersion"),
            kind=_string(root, "kind"),
            **cls._extra_fields(root),
        )


@dataclass
class ReleasePlanSpec:
    """Desired state of a ReleasePlan."""

    display_name: str = ""
    application: str = ""
    target: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "displayName": self.display_name,
            "application": self.application,
            "target": self.target,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ReleasePlanSpec:
        spec = _mapping(data, "spec")
        return cls(
            display_name=_string(spec, "displayName"),
            application=_string(spec, "application"),
            target=_string(spec, "target"),
        )


@dataclass
class ReleasePlan(_Resource):
    """Links an application to the target namespace it is released to."""

    KIND: ClassVar[str] = "ReleasePlan"
    SPEC: ClassVar[type] = ReleasePlanSpec

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: ReleasePlanSpec = field(default_factory=ReleasePlanSpec)
    api_version: str = ""
    kind: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the resource in serialized form."""
        return self._serialize()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReleasePlan:
        """Build the resource from its serialized form."""
        return cls._deserialize(data)


@dataclass
class ReleasePlanAdmissionSpec:
    """Desired state of a ReleasePlanAdmission."""

    display_name: str = ""
    application: str = ""
    origin: str = ""
    environment: str = ""
    release_strategy: str = ""
    extra_data: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "displayName": self.display_name,
            "application": self.application,
            "origin": self.origin,
        }
        if self.environment:
            data["environment"] = self.environment
        data["releaseStrategy"] = self.release_strategy
        if self.extra_data is not None:
            data["extraData"] = copy.deepcopy(self.extra_data)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ReleasePlanAdmissionSpec:
        spec = _mapping(data, "spec")
        return cls(
            display_name=_string(spec, "displayName"),
            application=_string(spec, "application"),
            origin=_string(spec, "origin"),
            environment=_string(spec, "environment"),
            release_strategy=_string(spec, "releaseStrategy"),
            extra_data=copy.deepcopy(spec.get("extraData")),
        )


@dataclass
class ReleasePlanAdmission(_Resource):
    """Accepts release requests coming from an origin namespace."""

    KIND: ClassVar[str] = "ReleasePlanAdmission"
    SPEC: ClassVar[type] = ReleasePlanAdmissionSpec

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: ReleasePlanAdmissionSpec = field(default_factory=ReleasePlanAdmissionSpec)
    api_version: str = ""
    kind: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the resource in serialized form."""
        return self._serialize()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReleasePlanAdmission:
        """Build the resource from its serialized form."""
        return cls._deserialize(data)


@dataclass
class Params:
    """A parameter passed to the release pipeline."""

    name: str
    value: str = ""
    values: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.value:
            data["value"] = self.value
        if self.values:
            data["values"] = list(self.values)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Params:
        param = _mapping(data, "param")
        values = param.get("values") or []
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise TypeError("param 'values' must be a list of strings")
        return cls(name=_string(param, "name"), value=_string(param, "value"), values=list(values))


@dataclass
class ReleaseStrategySpec:
    """Desired state of a ReleaseStrategy."""

    pipeline: str = ""
    policy: str = ""
    bundle: str = ""
    params: list[Params] = field(default_factory=list)
    persistent_volume_claim: str = ""
    service_account: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"pipeline": self.pipeline}
        if self.bundle:
            data["bundle"] = self.bundle
        if self.params:
            data["params"] = [p.to_dict() for p in self.params]
        data["policy"] = self.policy
        if self.persistent_volume_claim:
            data["persistentVolumeClaim"] = self.persistent_volume_claim
        if self.service_account:
            data["serviceAccount"] = self.service_account
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ReleaseStrategySpec:
        spec = _mapping(data, "spec")
        params = spec.get("params") or []
        if not isinstance(params, list):
            raise TypeError("'params' must be a list")
        return cls(
            pipeline=_string(spec, "pipeline"),
            policy=_string(spec, "policy"),
            bundle=_string(spec, "bundle"),
            params=[Params.from_dict(p) for p in params],
            persistent_volume_claim=_string(spec, "persistentVolumeClaim"),
            service_account=_string(spec, "serviceAccount"),
        )


@dataclass
class ReleaseStrategy(_Resource):
    """Describes the pipeline and policy used to release an application."""

    KIND: ClassVar[str] = "ReleaseStrategy"
    SPEC: ClassVar[type] = ReleaseStrategySpec

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: ReleaseStrategySpec = field(default_factory=ReleaseStrategySpec)
    api_version: str = ""
    kind: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the resource in serialized form."""
        return self._serialize()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReleaseStrategy:
        """Build the resource from its serialized form."""
        return cls._deserialize(data)