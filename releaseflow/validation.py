"""Defaulting and validating webhooks for Release, ReleasePlan and ReleasePlanAdmission."""

from __future__ import annotations

from typing import Any

from releaseflow.author import AuthorWebhook
from releaseflow.meta import LabelKeys
from releaseflow.release import Release
from releaseflow.resources import ReleasePlan, ReleasePlanAdmission


class ValidationError(ValueError):
    """Raised when a webhook rejects an object."""


def _expect(obj: Any, cls: type) -> Any:
    if not isinstance(obj, cls):
        raise TypeError(f"expected a {cls.__name__}, not {type(obj).__name__}")
    return obj


def _default_auto_release_label(obj: Any, cls: type) -> None:
    resource = _expect(obj, cls)
    if resource.metadata.labels is None:
        resource.metadata.labels = {LabelKeys.AUTO_RELEASE: "true"}


def _validate_auto_release_label(obj: Any, cls: type) -> None:
    resource = _expect(obj, cls)
    labels = resource.metadata.labels or {}
    value = labels.get(LabelKeys.AUTO_RELEASE)
    if value is not None and value not in ("true", "false"):
        raise ValidationError(
            f"'{LabelKeys.AUTO_RELEASE}' label can only be set to true or false"
        )


class ReleaseWebhook:
    """Rejects any change to the spec of an existing Release."""

    validate_path = "/validate-appstudio-redhat-com-v1alpha1-release"

    def validate_create(self, obj: Release) -> None:
        """Accept every new Release."""
        _expect(obj, Release)

    def validate_update(self, old_obj: Release, new_obj: Release) -> None:
        """Raise ValidationError if the spec of the Release was changed."""
        old_release = _expect(old_obj, Release)
        new_release = _expect(new_obj, Release)
        if new_release.spec != old_release.spec:
            raise ValidationError("release resources spec cannot be updated")

    def validate_delete(self, obj: Release) -> None:
        """Accept every deletion."""
        _expect(obj, Release)


class ReleasePlanWebhook:
    """Defaults and validates the auto-release label of ReleasePlans."""

    mutate_path = "/mutate-appstudio-redhat-com-v1alpha1-releaseplan"
    validate_path = "/validate-appstudio-redhat-com-v1alpha1-releaseplan"

    def default(self, obj: ReleasePlan) -> None:
        """Add the auto-release label set to true when the object has no labels."""
        _default_auto_release_label(obj, ReleasePlan)

    def validate_create(self, obj: ReleasePlan) -> None:
        """Raise ValidationError if the auto-release label has an invalid value."""
        _validate_auto_release_label(obj, ReleasePlan)

    def validate_update(self, old_obj: ReleasePlan, new_obj: ReleasePlan) -> None:
        """Raise ValidationError if the new auto-release label has an invalid value."""
        _validate_auto_release_label(new_obj, ReleasePlan)

    def validate_delete(self, obj: ReleasePlan) -> None:
        """Accept every deletion."""
        _expect(obj, ReleasePlan)


class ReleasePlanAdmissionWebhook:
    """Defaults and validates the auto-release label of ReleasePlanAdmissions."""

    mutate_path = "/mutate-appstudio-redhat-com-v1alpha1-releaseplanadmission"
    validate_path = "/validate-appstudio-redhat-com-v1alpha1-releaseplanadmission"

    def default(self, obj: ReleasePlanAdmission) -> None:
        """Add the auto-release label set to true when the object has no labels."""
        _default_auto_release_label(obj, ReleasePlanAdmission)

    def validate_create(self, obj: ReleasePlanAdmission) -> None:
        """Raise ValidationError if the auto-release label has an invalid value."""
        _validate_auto_release_label(obj, ReleasePlanAdmission)

    def validate_update(
        self, old_obj: ReleasePlanAdmission, new_obj: ReleasePlanAdmission
    ) -> None:
        """Raise ValidationError if the new auto-release label has an invalid value."""
        _validate_auto_release_label(new_obj, ReleasePlanAdmission)

    def validate_delete(self, obj: ReleasePlanAdmission) -> None:
        """Accept every deletion."""
        _expect(obj, ReleasePlanAdmission)


def enabled_webhooks() -> list[Any]:
    """Return every webhook that has to be registered."""
    return [
        AuthorWebhook(),
        ReleaseWebhook(),
        ReleasePlanWebhook(),
        ReleasePlanAdmissionWebhook(),
    ]