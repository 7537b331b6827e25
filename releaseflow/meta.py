"""API group identity, well-known label keys and object metadata."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with its version."""

    group: str
    version: str

    def api_version(self) -> str:
        """Return the value used in an object's apiVersion field."""
        return f"{self.group}/{self.version}" if self.group else self.version


GROUP_VERSION = GroupVersion(group="appstudio.redhat.com", version="v1alpha1")


class LabelKeys:
    """Label keys understood by the release webhooks."""

    PREFIX = "release.appstudio.openshift.io"
    AUTHOR = f"{PREFIX}/author"
    AUTOMATED = f"{PREFIX}/automated"
    ATTRIBUTION = f"{PREFIX}/standing-attribution"
    AUTO_RELEASE = f"{PREFIX}/auto-release"
    MAX_LABEL_LENGTH = 63


_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(moment: datetime) -> str:
    """Render a time as an RFC 3339 UTC string with second precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 string into an aware UTC datetime."""
    if not isinstance(text, str):
        raise TypeError(f"timestamp must be a string, not {type(text).__name__}")
    normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    moment = datetime.fromisoformat(normalized)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _string_map(value: Any, what: str) -> dict[str, str] | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be a mapping of strings")
    result = {}
    for key, item in value.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise ValueError(f"{what} must map strings to strings")
        result[key] = item
    return result


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"metadata field {key!r} must be a string")
    return value


_KNOWN_KEYS = frozenset({"name", "generateName", "namespace", "labels", "annotations"})


@dataclass
class ObjectMeta:
    """Name, namespace, labels and annotations of an object.

    Fields not modelled here are kept in ``extra`` so they survive a round trip.
    """

    name: str = ""
    generate_name: str = ""
    namespace: str = ""
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the metadata in serialized form, leaving out empty fields."""
        data: dict[str, Any] = {}
        if self.name:
            data["name"] = self.name
        if self.generate_name:
            data["generateName"] = self.generate_name
        if self.namespace:
            data["namespace"] = self.namespace
        if self.labels:
            data["labels"] = dict(self.labels)
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        data.update(copy.deepcopy(self.extra))
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ObjectMeta:
        """Build metadata from its serialized form."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise TypeError(f"metadata must be a mapping, not {type(data).__name__}")
        return cls(
            name=_string(data, "name"),
            generate_name=_string(data, "generateName"),
            namespace=_string(data, "namespace"),
            labels=_string_map(data.get("labels"), "labels"),
            annotations=_string_map(data.get("annotations"), "annotations"),
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in _KNOWN_KEYS},
        )