# releaseflow

Data models and admission logic for release resources: releases, release
plans, release plan admissions and release strategies. Everything is plain
Python with no third-party dependencies.

## Modules

- `releaseflow.meta`: the API group and version (`GroupVersion`, with
  `api_version()`, and the constant `GROUP_VERSION` for
  `appstudio.redhat.com/v1alpha1`), the label keys the webhooks look at
  (`LabelKeys.AUTHOR`, `AUTOMATED`, `ATTRIBUTION`, `AUTO_RELEASE` and
  `MAX_LABEL_LENGTH`), and `ObjectMeta` (name, generate name, namespace,
  labels, annotations). Metadata fields that are not modelled are kept in
  `ObjectMeta.extra` so they survive `from_dict()` / `to_dict()`.
- `releaseflow.conditions`: status conditions. `Condition` plus the enums
  `ConditionType`, `ConditionReason` and `ConditionStatus`, and the helpers
  `find_condition`, `is_condition_true` and `set_condition`. `set_condition`
  adds or updates a condition in place and only moves its transition time
  when the status changes.
- `releaseflow.resources`: `ReleasePlan`, `ReleasePlanAdmission` and
  `ReleaseStrategy` (with `Params`), each with `to_dict()` and
  `from_dict()` using the camel-case field names of the serialized form.
- `releaseflow.release`: the `Release` resource and its phases. Each of
  deployment, processing, post-actions and the release as a whole is
  started with a `mark_*ing(message)` method (which records a start time)
  and ended with a success or failure method (which records a completion
  time), for example `mark_releasing`, `mark_released` and
  `mark_release_failed`. Ending a phase that is not in progress, or starting
  one that has already finished, does nothing. Validation is tracked with
  `mark_validated` and `mark_validation_failed`; a failure after a release
  was valid sets `status.validation.failed_post_validation`. Queries such as
  `is_releasing()`, `is_released()` and `has_release_finished()` read the
  conditions.
- `releaseflow.admission`: `AdmissionRequest`, `AdmissionResponse`,
  `PatchOperation` and `Operation`; the response builders `allowed` and
  `errored`; `create_patch`, which computes JSON Patch operations between
  two JSON documents (object keys are compared one by one, arrays that
  differ are replaced whole), and `patch_response_from_raw`.
- `releaseflow.author`: `AuthorWebhook`. On a new `Release` it sets the
  author label to the requesting user unless the automated label is
  `"true"`, and it rejects updates that change the author label. On a
  `ReleasePlan` the author label is only kept when the attribution label is
  `"true"`; the requesting user becomes the author unless attribution was
  already on and someone else is named, in which case the previous author
  is kept. User names have `:` replaced by `_` and are cut to 63
  characters. Requests for other kinds are answered with an error.
- `releaseflow.validation`: `ReleaseWebhook` rejects changes to a release's
  spec; `ReleasePlanWebhook` and `ReleasePlanAdmissionWebhook` add the
  auto-release label set to `"true"` to objects without labels and reject
  any value other than `"true"` or `"false"`. Rejections raise
  `ValidationError`; passing the wrong kind of object raises `TypeError`.
  `enabled_webhooks()` returns one instance of each webhook, the author
  webhook included.

## Example

```python
from releaseflow.release import Release, ReleaseSpec

release = Release(spec=ReleaseSpec(snapshot="my-snapshot", release_plan="my-plan"))
release.mark_releasing("starting")
assert release.is_releasing()
release.mark_released()
assert release.is_released()
assert release.status.completion_time is not None
```

```python
import json

from releaseflow.admission import AdmissionRequest, Operation
from releaseflow.author import AuthorWebhook
from releaseflow.release import Release

raw = json.dumps(Release(kind="Release").to_dict()).encode()
response = AuthorWebhook().handle(
    AdmissionRequest(kind="Release", operation=Operation.CREATE, username="admin", object=raw)
)
assert response.allowed
print([p.to_dict() for p in response.patches])
```

## What this package does not do

It holds the models and the decision logic only. It does not serve the
webhooks over HTTPS, talk to a cluster, store or watch resources, run
reconcilers, or record metrics; a caller supplies the objects and requests
and applies the results. There is no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```