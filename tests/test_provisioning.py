import pytest
from botocore.exceptions import ClientError

from conftest import make_settings
from configdrill.engine import Engine
from configdrill.ledger import ResourceLedger
from configdrill.polling import PollTimeoutError
from configdrill.provision import retry_until_accepted
from scenarios import (
    cloud_trail_cloud_watch_logs_enabled,
    guardduty_enabled_centralized,
    lambda_inside_vpc,
    rds_storage_encrypted,
    redshift_cluster_public_access_check,
)
from scenarios import sagemaker_notebook_no_direct_internet_access as internet_notebook
from scenarios.sagemaker_notebook_no_direct_internet_access import create_notebook


def _client_error(code, message=None, operation="Operation"):
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


def _run(module, clients, **overrides):
    engine = Engine(
        make_settings(**overrides),
        client_factory=lambda settings: clients,
        scenarios={module.META["rule"]: module},
    )
    return engine.run_scenario(module.META["rule"])


class _IAM:
    def __init__(self):
        self.attached = {}
        self.deleted_roles = []

    def create_role(self, RoleName, AssumeRolePolicyDocument, Description, Tags):
        self.attached[RoleName] = []
        return {"Role": {"RoleName": RoleName, "Arn": f"arn:aws:iam::123456789012:role/{RoleName}"}}

    def attach_role_policy(self, RoleName, PolicyArn):
        self.attached[RoleName].append(PolicyArn)

    def list_attached_role_policies(self, RoleName):
        return {"AttachedPolicies": [{"PolicyArn": arn} for arn in self.attached[RoleName]]}

    def detach_role_policy(self, RoleName, PolicyArn):
        self.attached[RoleName].remove(PolicyArn)

    def list_role_policies(self, RoleName):
        return {"PolicyNames": []}

    def list_instance_profiles_for_role(self, RoleName):
        return {"InstanceProfiles": []}

    def delete_role(self, RoleName):
        self.deleted_roles.append(RoleName)


class _RDS:
    def __init__(self):
        self.instances = {}
        self.deleted = []

    def create_db_instance(self, DBInstanceIdentifier, **kwargs):
        self.instances[DBInstanceIdentifier] = dict(
            kwargs, DBInstanceIdentifier=DBInstanceIdentifier, DBInstanceStatus="available"
        )

    def describe_db_instances(self, DBInstanceIdentifier):
        if DBInstanceIdentifier not in self.instances:
            raise _client_error("DBInstanceNotFound", operation="DescribeDBInstances")
        return {"DBInstances": [self.instances[DBInstanceIdentifier]]}

    def delete_db_instance(self, DBInstanceIdentifier, SkipFinalSnapshot, DeleteAutomatedBackups):
        assert SkipFinalSnapshot is True
        self.deleted.append(DBInstanceIdentifier)
        del self.instances[DBInstanceIdentifier]


def test_unencrypted_db_instance_is_reported_and_deleted():
    rds = _RDS()

    result = _run(rds_storage_encrypted, {"rds": rds})

    assert result.status == "NON_COMPLIANT"
    assert result.evidence["storage_encrypted"] is False
    assert len(rds.deleted) == 1
    assert rds.deleted[0].startswith("unencrypted-db")
    assert rds.instances == {}
    assert [(handle.kind, handle.status) for handle in result.resources] == [("rds:db", "RELEASED")]


class _S3:
    def __init__(self):
        self.buckets = set()
        self.policies = {}

    def create_bucket(self, Bucket, **kwargs):
        self.buckets.add(Bucket)

    def head_bucket(self, Bucket):
        return {}

    def put_bucket_tagging(self, Bucket, Tagging):
        pass

    def put_bucket_policy(self, Bucket, Policy):
        self.policies[Bucket] = Policy

    def get_paginator(self, name):
        assert name == "list_object_versions"
        return self

    def paginate(self, Bucket):
        return [{"Versions": [{"Key": "AWSLogs/digest", "VersionId": "v1"}]}]

    def delete_objects(self, Bucket, Delete):
        pass

    def delete_bucket(self, Bucket):
        self.buckets.remove(Bucket)


class _CloudTrail:
    def __init__(self):
        self.trails = {}
        self.create_calls = 0
        self.deleted = []

    def create_trail(self, Name, S3BucketName, TagsList):
        self.create_calls += 1
        if self.create_calls == 1:
            raise _client_error("InsufficientS3BucketPolicyException", operation="CreateTrail")
        self.trails[Name] = {"Name": Name, "S3BucketName": S3BucketName, "IsLogging": False}
        return {"Name": Name, "TrailARN": f"arn:aws:cloudtrail:us-east-1:123456789012:trail/{Name}"}

    def start_logging(self, Name):
        self.trails[Name]["IsLogging"] = True

    def stop_logging(self, Name):
        self.trails[Name]["IsLogging"] = False

    def describe_trails(self, trailNameList):
        return {"trailList": [self.trails[name] for name in trailNameList if name in self.trails]}

    def delete_trail(self, Name):
        self.deleted.append(Name)
        del self.trails[Name]


def test_trail_without_cloudwatch_logs_retries_bucket_policy_and_cleans_up():
    s3 = _S3()
    cloudtrail = _CloudTrail()

    result = _run(cloud_trail_cloud_watch_logs_enabled, {"s3": s3, "cloudtrail": cloudtrail})

    assert result.status == "NON_COMPLIANT"
    assert result.evidence["log_group_arn"] is None
    assert cloudtrail.create_calls == 2
    assert len(cloudtrail.deleted) == 1
    assert s3.buckets == set()
    assert [handle.kind for handle in result.resources] == ["s3:bucket", "cloudtrail:trail"]
    assert {handle.status for handle in result.resources} == {"RELEASED"}


class _Lambda:
    def __init__(self):
        self.create_calls = 0
        self.functions = {}
        self.deleted = []

    def create_function(self, FunctionName, Role, Code, **kwargs):
        self.create_calls += 1
        if self.create_calls == 1:
            raise _client_error(
                "InvalidParameterValueException",
                "The role defined for the function cannot be assumed by Lambda.",
                "CreateFunction",
            )
        assert Code["ZipFile"].startswith(b"PK")
        self.functions[FunctionName] = {"FunctionName": FunctionName, "Role": Role}
        arn = f"arn:aws:lambda:us-east-1:123456789012:function:{FunctionName}"
        return {"FunctionName": FunctionName, "FunctionArn": arn}

    def get_function_configuration(self, FunctionName):
        return {"FunctionName": FunctionName, "State": "Active", "VpcConfig": {"SubnetIds": [], "VpcId": ""}}

    def delete_function(self, FunctionName):
        self.deleted.append(FunctionName)


def test_function_outside_vpc_waits_for_role_and_deletes_role_last():
    iam = _IAM()
    lambda_client = _Lambda()

    result = _run(lambda_inside_vpc, {"iam": iam, "lambda": lambda_client})

    assert result.status == "NON_COMPLIANT"
    assert lambda_client.create_calls == 2
    assert lambda_client.deleted == list(lambda_client.functions)
    assert len(iam.deleted_roles) == 1
    assert iam.attached[iam.deleted_roles[0]] == []
    assert [handle.kind for handle in result.resources] == ["iam:role", "lambda:function"]


class _Redshift:
    def __init__(self):
        self.clusters = {}
        self.deleted = []

    def create_cluster(self, ClusterIdentifier, **kwargs):
        self.clusters[ClusterIdentifier] = dict(kwargs, ClusterIdentifier=ClusterIdentifier, ClusterStatus="available")

    def describe_clusters(self, ClusterIdentifier):
        if ClusterIdentifier not in self.clusters:
            raise _client_error("ClusterNotFound", operation="DescribeClusters")
        return {"Clusters": [self.clusters[ClusterIdentifier]]}

    def delete_cluster(self, ClusterIdentifier, SkipFinalClusterSnapshot):
        self.deleted.append(ClusterIdentifier)
        del self.clusters[ClusterIdentifier]


def test_public_redshift_cluster_is_single_node_and_deleted():
    redshift = _Redshift()

    result = _run(redshift_cluster_public_access_check, {"redshift": redshift})

    assert result.status == "NON_COMPLIANT"
    assert result.evidence["publicly_accessible"] is True
    assert len(redshift.deleted) == 1
    assert result.resources[0].kind == "redshift:cluster"
    assert result.resources[0].status == "RELEASED"


class _GuardDuty:
    def __init__(self, detectors=()):
        self.detectors = {detector_id: "ENABLED" for detector_id in detectors}
        self.deleted = []

    def get_paginator(self, name):
        assert name == "list_detectors"
        return self

    def paginate(self):
        return [{"DetectorIds": list(self.detectors)}]

    def update_detector(self, DetectorId, Enable):
        self.detectors[DetectorId] = "ENABLED" if Enable else "DISABLED"

    def create_detector(self, Enable, Tags):
        self.detectors["created"] = "ENABLED" if Enable else "DISABLED"
        return {"DetectorId": "created"}

    def get_detector(self, DetectorId):
        return {"Status": self.detectors[DetectorId]}

    def delete_detector(self, DetectorId):
        self.deleted.append(DetectorId)


def test_existing_detector_is_suspended_then_re_enabled():
    guardduty = _GuardDuty(["abc123"])

    result = _run(guardduty_enabled_centralized, {"guardduty": guardduty})

    assert result.status == "NON_COMPLIANT"
    assert result.evidence["status"] == "DISABLED"
    assert guardduty.detectors == {"abc123": "ENABLED"}
    assert guardduty.deleted == []
    assert result.resources[0].status == "RESTORED"


def test_missing_detector_is_created_disabled_and_deleted():
    guardduty = _GuardDuty()

    result = _run(guardduty_enabled_centralized, {"guardduty": guardduty})

    assert result.status == "NON_COMPLIANT"
    assert guardduty.deleted == ["created"]


class _SageMaker:
    def __init__(self, errors):
        self.errors = list(errors)
        self.calls = 0

    def create_notebook_instance(self, NotebookInstanceName, **kwargs):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        arn = f"arn:aws:sagemaker:us-east-1:123456789012:notebook-instance/{NotebookInstanceName}"
        return {"NotebookInstanceArn": arn}


def test_notebook_creation_retries_only_while_role_propagates(settings):
    sagemaker = _SageMaker(
        [_client_error("ValidationException", "SageMaker could not assume role arn:aws:iam::123456789012:role/x")]
    )
    ledger = ResourceLedger()

    name = create_notebook(
        settings,
        {"iam": _IAM(), "sagemaker": sagemaker},
        ledger,
        rule=internet_notebook.META["rule"],
        prefix="internet-notebook",
    )

    assert sagemaker.calls == 2
    assert [handle.kind for handle in ledger.handles] == ["iam:role", "sagemaker:notebook-instance"]
    assert ledger.handles[-1].identifier == name


def test_notebook_validation_errors_fail_on_first_attempt(settings):
    sagemaker = _SageMaker([_client_error("ValidationException", "Instance type ml.t3.medium is not supported")])
    ledger = ResourceLedger()

    with pytest.raises(ClientError) as excinfo:
        create_notebook(
            settings,
            {"iam": _IAM(), "sagemaker": sagemaker},
            ledger,
            rule=internet_notebook.META["rule"],
            prefix="internet-notebook",
        )

    assert "not supported" in str(excinfo.value)
    assert sagemaker.calls == 1
    assert [handle.kind for handle in ledger.handles] == ["iam:role"]


def test_retry_until_accepted_gives_up_after_max_attempts(settings):
    calls = []

    def always_propagating():
        calls.append(True)
        raise _client_error("InvalidParameterValueException", "role cannot be assumed")

    with pytest.raises(PollTimeoutError) as excinfo:
        retry_until_accepted(always_propagating, settings, label="function demo")

    assert len(calls) == settings.poll_max_attempts
    assert "function demo" in str(excinfo.value)
