from types import SimpleNamespace

from botocore.exceptions import ClientError

from conftest import make_settings
from configdrill.engine import Engine


class _ClientFactory:
    def __init__(self):
        self.calls = 0

    def __call__(self, settings):
        self.calls += 1
        return {"ec2": object()}


class _Sleeper:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def _scenario(rule, provision, inspect=None, **meta):
    values = {"rule": rule, "title": rule.title(), "service": "ec2", "required_env": []}
    values.update(meta)
    module = SimpleNamespace(META=values, provision=provision)
    if inspect is not None:
        module.inspect = inspect
    return module


def _compliant(compliant):
    return lambda **kwargs: {"compliant": compliant, "evidence": {"checked": True}}


def test_missing_required_env_is_misconfigured_without_building_clients():
    factory = _ClientFactory()
    provisioned = []
    scenario = _scenario(
        "acm-certificate-expiration-check",
        lambda **kwargs: provisioned.append(True),
        required_env=["DOMAIN_NAME"],
    )
    scenarios = {"acm-certificate-expiration-check": scenario}
    engine = Engine(make_settings(), client_factory=factory, scenarios=scenarios)

    result = engine.run_scenario("acm-certificate-expiration-check")

    assert result.status == "MISCONFIGURED"
    assert "DOMAIN_NAME" in result.error
    assert factory.calls == 0
    assert provisioned == []
    assert result.resources == []


def test_provision_failure_still_cleans_up_exactly_once():
    released = []

    def provision(*, settings, clients, ledger):
        ledger.track("ec2:security-group", "sg-1", lambda: released.append("sg-1"))
        raise ClientError({"Error": {"Code": "InvalidParameterValue", "Message": "bad"}}, "AuthorizeIngress")

    scenarios = {"restricted-ssh": _scenario("restricted-ssh", provision)}
    engine = Engine(make_settings(), client_factory=_ClientFactory(), scenarios=scenarios)
    result = engine.run_scenario("restricted-ssh")

    assert result.status == "ERROR"
    assert "InvalidParameterValue" in result.error
    assert released == ["sg-1"]
    assert result.resources[0].status == "RELEASED"
    assert result.failed is True


def test_inspection_outcomes():
    scenarios = {
        "non-compliant": _scenario("non-compliant", lambda **kwargs: {}, _compliant(False)),
        "compliant": _scenario("compliant", lambda **kwargs: {}, _compliant(True)),
        "no-inspect": _scenario("no-inspect", lambda **kwargs: {}),
        "broken-inspect": _scenario("broken-inspect", lambda **kwargs: {}, lambda **kwargs: 1 / 0),
    }
    engine = Engine(make_settings(), client_factory=_ClientFactory(), scenarios=scenarios)

    statuses = {rule: engine.run_scenario(rule) for rule in scenarios}

    assert statuses["non-compliant"].status == "NON_COMPLIANT"
    assert statuses["non-compliant"].evidence == {"checked": True}
    assert statuses["compliant"].status == "COMPLIANT"
    assert statuses["no-inspect"].status == "NOT_EVALUATED"
    assert statuses["broken-inspect"].status == "NOT_EVALUATED"
    assert "division" in statuses["broken-inspect"].evidence["error"]


def test_hold_period_prefers_settings_then_meta():
    sleeper = _Sleeper()
    scenario = _scenario("ec2-instance-profile-attached", lambda **kwargs: {}, hold_seconds=30)
    engine = Engine(
        make_settings(hold_seconds=None),
        client_factory=_ClientFactory(),
        scenarios={"ec2-instance-profile-attached": scenario},
        sleep=sleeper,
    )
    engine.run_scenario("ec2-instance-profile-attached")
    assert sleeper.calls == [30.0]

    sleeper.calls.clear()
    engine.settings.hold_seconds = 0
    engine.run_scenario("ec2-instance-profile-attached")
    assert sleeper.calls == []


def test_batch_continues_after_failures_and_summarizes():
    def explode(**kwargs):
        raise RuntimeError("provision failed")

    factory = _ClientFactory()
    scenarios = {
        "first": _scenario("first", explode),
        "second": _scenario("second", lambda **kwargs: {}, _compliant(False)),
        "third": _scenario("third", lambda **kwargs: {}, required_env=["DOMAIN_NAME"]),
    }
    engine = Engine(make_settings(), client_factory=factory, scenarios=scenarios)

    batch = engine.run(["First", "second", "second", "unknown", "third"])

    assert [result.rule for result in batch.results] == ["first", "second", "third"]
    assert [result.status for result in batch.results] == ["ERROR", "NON_COMPLIANT", "MISCONFIGURED"]
    assert batch.summary.total == 3
    assert batch.summary.ERROR == 1
    assert batch.summary.NON_COMPLIANT == 1
    assert batch.summary.MISCONFIGURED == 1
    assert batch.failed is True
    assert factory.calls == 1


def test_keep_mode_retains_resources():
    def provision(*, settings, clients, ledger):
        ledger.track("ec2:volume", "vol-1", lambda: None)
        return {}

    engine = Engine(
        make_settings(keep_resources=True),
        client_factory=_ClientFactory(),
        scenarios={"encrypted-volumes": _scenario("encrypted-volumes", provision)},
    )
    result = engine.run_scenario("encrypted-volumes")
    assert result.resources[0].status == "RETAINED"


def test_cleanup_failures_are_reported():
    def delete_vpc():
        raise RuntimeError("still attached")

    def provision(*, settings, clients, ledger):
        ledger.track("ec2:vpc", "vpc-1", delete_vpc)
        return {}

    engine = Engine(
        make_settings(),
        client_factory=_ClientFactory(),
        scenarios={"vpc-flow-logs-enabled": _scenario("vpc-flow-logs-enabled", provision, _compliant(False))},
    )
    batch = engine.run()
    result = batch.results[0]
    assert result.status == "NON_COMPLIANT"
    assert result.cleanup_failures == ["ec2:vpc vpc-1: still attached"]
    assert batch.summary.cleanup_failures == 1
