"""Admission webhook that records the author of releases and release plans."""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any, Protocol

from releaseflow.admission import (
    AdmissionRequest,
    AdmissionResponse,
    Operation,
    allowed,
    errored,
    patch_response_from_raw,
)
from releaseflow.meta import LabelKeys, ObjectMeta
from releaseflow.release import Release
from releaseflow.resources import ReleasePlan


class _Labelled(Protocol):
    metadata: ObjectMeta

    def to_dict(self) -> dict[str, Any]: ...


def _labels(obj: _Labelled) -> dict[str, str]:
    return obj.metadata.labels or {}


class _DecodeError(Exception):
    pass


def _decode(cls: Any, raw: bytes) -> Any:
    try:
        return cls.from_dict(json.loads(raw))
    except (ValueError, TypeError) as exc:
        raise _DecodeError(f"error decoding object: {exc}") from exc


class AuthorWebhook:
    """Sets and protects the author label of Release and ReleasePlan objects."""

    path = "/mutate-appstudio-redhat-com-v1alpha1-author"

    def handle(self, request: AdmissionRequest) -> AdmissionResponse:
        """Return the admission response for a Release or ReleasePlan request."""
        handlers = {
            Release.KIND: self._handle_release,
            ReleasePlan.KIND: self._handle_release_plan,
        }
        handler = handlers.get(request.kind)
        if handler is None:
            return errored(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                f"webhook tried to handle an unsupported resource: {request.kind}",
            )
        try:
            return handler(request)
        except _DecodeError as exc:
            return errored(HTTPStatus.BAD_REQUEST, str(exc))

    def _handle_release(self, request: AdmissionRequest) -> AdmissionResponse:
        release = _decode(Release, request.object)

        if request.operation is Operation.CREATE:
            if _labels(release).get(LabelKeys.AUTOMATED) != "true":
                self.set_author_label(request.username, release)
            return self.patch_response(request.object, release)

        if request.operation is Operation.UPDATE:
            old_release = _decode(Release, request.old_object)
            if _labels(release).get(LabelKeys.AUTHOR) != _labels(old_release).get(LabelKeys.AUTHOR):
                return errored(HTTPStatus.BAD_REQUEST, "release author label cannnot be updated")

        return allowed("Success")

    def _handle_release_plan(self, request: AdmissionRequest) -> AdmissionResponse:
        release_plan = _decode(ReleasePlan, request.object)
        labels = release_plan.metadata.labels

        # Without attribution there must be no author.
        if labels is not None and labels.get(LabelKeys.ATTRIBUTION) != "true":
            labels.pop(LabelKeys.AUTHOR, None)

        attributed = _labels(release_plan).get(LabelKeys.ATTRIBUTION) == "true"

        if request.operation is Operation.CREATE:
            if attributed:
                self.set_author_label(request.username, release_plan)
        elif request.operation is Operation.UPDATE:
            old_plan = _decode(ReleasePlan, request.old_object)
            if attributed:
                author = _labels(release_plan).get(LabelKeys.AUTHOR, "")
                old_labels = _labels(old_plan)
                if (
                    old_labels.get(LabelKeys.ATTRIBUTION) != "true"
                    or author == self.sanitize_label_value(request.username)
                ):
                    self.set_author_label(request.username, release_plan)
                else:
                    # Keep the previous author when someone else claims authorship.
                    self.set_author_label(old_labels.get(LabelKeys.AUTHOR, ""), release_plan)

        return self.patch_response(request.object, release_plan)

    def patch_response(self, raw: bytes, obj: _Labelled) -> AdmissionResponse:
        """Return a response that patches ``raw`` into the serialized ``obj``."""
        try:
            marshalled = json.dumps(obj.to_dict())
        except (TypeError, ValueError) as exc:
            return errored(HTTPStatus.INTERNAL_SERVER_ERROR, f"error encoding object: {exc}")
        return patch_response_from_raw(raw, marshalled)

    def set_author_label(self, username: str, obj: _Labelled) -> None:
        """Set the author label of ``obj`` to the sanitized ``username``."""
        labels = obj.metadata.labels if obj.metadata.labels is not None else {}
        labels[LabelKeys.AUTHOR] = self.sanitize_label_value(username)
        obj.metadata.labels = labels

    def sanitize_label_value(self, username: str) -> str:
        """Return ``username`` in a form usable as a label value."""
        author = username.replace(":", "_")
        return author[: LabelKeys.MAX_LABEL_LENGTH]