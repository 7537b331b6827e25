import pytest

from releaseflow.meta import GROUP_VERSION, ObjectMeta
from releaseflow.resources import (
    Params,
    ReleasePlan,
    ReleasePlanAdmission,
    ReleasePlanAdmissionSpec,
    ReleasePlanSpec,
    ReleaseStrategy,
    ReleaseStrategySpec,
)


def _release_plan():
    return ReleasePlan(
        api_version=GROUP_VERSION.api_version(),
        kind=ReleasePlan.KIND,
        metadata=ObjectMeta(name="releaseplan", namespace="default", labels={"foo": "bar"}),
        spec=ReleasePlanSpec(display_name="Test release plan", application="application", target="default"),
    )


def test_release_plan_round_trip():
    plan = _release_plan()
    assert ReleasePlan.from_dict(plan.to_dict()) == plan


def test_release_plan_serialized_shape():
    data = _release_plan().to_dict()
    assert data["apiVersion"] == "appstudio.redhat.com/v1alpha1"
    assert data["kind"] == "ReleasePlan"
    assert data["spec"] == {
        "displayName": "Test release plan",
        "application": "application",
        "target": "default",
    }
    assert data["status"] == {}


def test_zero_release_plan_omits_type_fields_but_keeps_display_name():
    data = ReleasePlan().to_dict()
    assert "apiVersion" not in data
    assert "kind" not in data
    assert data["spec"]["displayName"] == ""


def test_release_plan_admission_round_trip_with_extra_data():
    admission = ReleasePlanAdmission(
        api_version=GROUP_VERSION.api_version(),
        kind=ReleasePlanAdmission.KIND,
        metadata=ObjectMeta(name="releaseplanadmission", namespace="default"),
        spec=ReleasePlanAdmissionSpec(
            display_name="Test release plan",
            application="application",
            origin="default",
            environment="environment",
            release_strategy="strategy",
            extra_data={"nested": {"list": [1, 2]}},
        ),
    )
    restored = ReleasePlanAdmission.from_dict(admission.to_dict())
    assert restored == admission
    assert restored.spec.extra_data is not admission.spec.extra_data


def test_release_plan_admission_omits_empty_optionals():
    spec = ReleasePlanAdmission(spec=ReleasePlanAdmissionSpec(application="application")).to_dict()["spec"]
    assert "environment" not in spec
    assert "extraData" not in spec
    assert spec["releaseStrategy"] == ""


def test_release_strategy_round_trip_with_params():
    strategy = ReleaseStrategy(
        kind=ReleaseStrategy.KIND,
        metadata=ObjectMeta(name="strategy", namespace="default"),
        spec=ReleaseStrategySpec(
            pipeline="release-pipeline",
            policy="policy",
            bundle="quay.io/example/bundle:1",
            params=[Params(name="one", value="1"), Params(name="many", values=["a", "b"])],
            persistent_volume_claim="release-pvc",
            service_account="service-account",
        ),
    )
    data = strategy.to_dict()
    assert data["spec"]["params"][0] == {"name": "one", "value": "1"}
    assert data["spec"]["params"][1] == {"name": "many", "values": ["a", "b"]}
    assert ReleaseStrategy.from_dict(data) == strategy


def test_release_strategy_omits_empty_optionals():
    spec = ReleaseStrategy(spec=ReleaseStrategySpec(pipeline="p", policy="q")).to_dict()["spec"]
    assert set(spec) == {"pipeline", "policy"}


def test_spec_with_wrong_type_rejected():
    with pytest.raises(TypeError):
        ReleasePlan.from_dict({"spec": {"target": 5}})


def test_param_values_must_be_strings():
    with pytest.raises(TypeError):
        Params.from_dict({"name": "x", "values": [1]})


def test_non_mapping_resource_rejected():
    with pytest.raises(TypeError):
        ReleaseStrategy.from_dict("not a resource")


def test_to_dict_is_independent_of_object():
    plan = _release_plan()
    data = plan.to_dict()
    data["metadata"]["labels"]["foo"] = "changed"
    assert plan.metadata.labels == {"foo": "bar"}