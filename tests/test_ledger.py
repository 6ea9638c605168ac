from botocore.exceptions import ClientError

from configdrill.ledger import ResourceLedger


def _client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "Delete")


def test_teardown_releases_in_reverse_order():
    released = []
    ledger = ResourceLedger(scope="restricted-ssh")
    ledger.track("ec2:security-group", "sg-1", lambda: released.append("sg-1"))
    ledger.track("ec2:instance", "i-1", lambda: released.append("i-1"))

    handles = ledger.teardown()

    assert released == ["i-1", "sg-1"]
    assert [handle.status for handle in handles] == ["RELEASED", "RELEASED"]
    assert ledger.failures == []


def test_teardown_runs_only_once():
    calls = {"count": 0}

    def release():
        calls["count"] += 1

    ledger = ResourceLedger()
    ledger.track("s3:bucket", "drill-bucket", release)
    ledger.teardown()
    ledger.teardown()

    assert calls["count"] == 1
    assert ledger.torn_down is True


def test_already_gone_counts_as_success():
    def release():
        raise _client_error("NoSuchEntity")

    ledger = ResourceLedger()
    ledger.track("iam:user", "drill-user", release)
    handles = ledger.teardown()

    assert handles[0].status == "GONE"
    assert ledger.failures == []


def test_failures_are_recorded_and_teardown_continues():
    released = []

    def failing():
        raise _client_error("DependencyViolation")

    def crashing():
        raise RuntimeError("boom")

    ledger = ResourceLedger()
    ledger.track("ec2:vpc", "vpc-1", lambda: released.append("vpc-1"))
    ledger.track("ec2:security-group", "sg-1", failing)
    ledger.track("ec2:subnet", "subnet-1", crashing)

    handles = ledger.teardown()

    assert released == ["vpc-1"]
    assert [handle.status for handle in handles] == ["RELEASED", "FAILED", "FAILED"]
    assert len(ledger.failures) == 2
    assert ledger.failures[0].startswith("ec2:subnet subnet-1")


def test_keep_mode_retains_created_resources_but_restores_modifications():
    released = []
    ledger = ResourceLedger(keep=True)
    ledger.restore("ec2:ebs-encryption-default", "us-east-1", lambda: released.append("restore"))
    ledger.track("ec2:volume", "vol-1", lambda: released.append("vol-1"))

    handles = ledger.teardown()

    assert released == ["restore"]
    assert handles[0].action == "restore"
    assert handles[0].status == "RESTORED"
    assert handles[1].status == "RETAINED"
