import pytest
from botocore.exceptions import ClientError

from configdrill.sweep import find_deleter, parse_arn, sweep


class _Paginator:
    def __init__(self, pages):
        self.pages = pages
        self.kwargs = None

    def paginate(self, **kwargs):
        self.kwargs = kwargs
        return iter(self.pages)


class _TaggingClient:
    def __init__(self, arns):
        self.paginator = _Paginator([{"ResourceTagMappingList": [{"ResourceARN": arn} for arn in arns]}])

    def get_paginator(self, name):
        assert name == "get_resources"
        return self.paginator


class _EC2Client:
    def __init__(self, failures=None):
        self.deleted_groups = []
        self.deleted_volumes = []
        self.failures = failures or {}

    def delete_security_group(self, GroupId):
        if GroupId in self.failures:
            raise ClientError({"Error": {"Code": self.failures[GroupId], "Message": "nope"}}, "DeleteSecurityGroup")
        self.deleted_groups.append(GroupId)

    def delete_volume(self, VolumeId):
        self.deleted_volumes.append(VolumeId)


class _Sleeper:
    def __init__(self):
        self.calls = 0

    def __call__(self, seconds):
        self.calls += 1


ARNS = [
    "arn:aws:ec2:us-east-1:123456789012:security-group/sg-1",
    "arn:aws:ec2:us-east-1:123456789012:volume/vol-1",
    "arn:aws:glue:us-east-1:123456789012:database/drill",
]


@pytest.mark.parametrize(
    "arn, service, resource_type, resource_id",
    [
        ("arn:aws:ec2:us-east-1:123456789012:security-group/sg-1", "ec2", "security-group", "sg-1"),
        ("arn:aws:s3:::drill-bucket", "s3", "", "drill-bucket"),
        ("arn:aws:iam::123456789012:role/service-role/drill-role", "iam", "role", "drill-role"),
        ("arn:aws:logs:us-east-1:123456789012:log-group:/config-drill/x:*", "logs", "log-group", "/config-drill/x:*"),
        ("arn:aws:lambda:us-east-1:123456789012:function:drill-fn", "lambda", "function", "drill-fn"),
        ("arn:aws:sns:us-east-1:123456789012:drill-topic", "sns", "", "drill-topic"),
        ("arn:aws:apigateway:us-east-1::/restapis/abc123", "apigateway", "", "restapis/abc123"),
    ],
)
def test_parse_arn(arn, service, resource_type, resource_id):
    parts = parse_arn(arn)
    assert (parts.service, parts.resource_type, parts.resource_id) == (service, resource_type, resource_id)


def test_parse_arn_rejects_garbage():
    with pytest.raises(ValueError):
        parse_arn("sg-12345")


def test_every_scenario_service_has_a_deleter_for_its_main_resource():
    assert find_deleter(parse_arn("arn:aws:es:us-east-1:123456789012:domain/drill")) is not None
    assert find_deleter(parse_arn("arn:aws:wafv2:us-east-1:123456789012:regional/webacl/n/id")) is not None
    assert find_deleter(parse_arn("arn:aws:glue:us-east-1:123456789012:database/drill")) is None


def test_dry_run_deletes_nothing(settings):
    tagging = _TaggingClient(ARNS)
    ec2 = _EC2Client()
    results = sweep(settings, {"resourcegroupstaggingapi": tagging, "ec2": ec2}, sleep=_Sleeper())

    assert [result.mode for result in results] == ["DRY_RUN", "DRY_RUN", "SKIP"]
    assert ec2.deleted_groups == []
    assert tagging.paginator.kwargs == {"TagFilters": [{"Key": "simulation-mas"}]}


def test_apply_deletes_and_reports_each_resource(settings):
    ec2 = _EC2Client()
    sleeper = _Sleeper()
    results = sweep(
        settings,
        {"resourcegroupstaggingapi": _TaggingClient(ARNS), "ec2": ec2},
        apply_changes=True,
        tag_key="other-tag",
        sleep=sleeper,
    )

    assert [result.mode for result in results] == ["APPLY", "APPLY", "SKIP"]
    assert all(result.deleted for result in results[:2])
    assert ec2.deleted_groups == ["sg-1"]
    assert ec2.deleted_volumes == ["vol-1"]
    assert sleeper.calls == 2


def test_apply_keeps_going_after_failures(settings):
    ec2 = _EC2Client(failures={"sg-1": "DependencyViolation"})
    results = sweep(
        settings,
        {"resourcegroupstaggingapi": _TaggingClient(ARNS[:2]), "ec2": ec2},
        apply_changes=True,
        sleep=_Sleeper(),
    )

    assert results[0].mode == "FAILED"
    assert "DependencyViolation" in results[0].error
    assert results[1].mode == "APPLY"
    assert ec2.deleted_volumes == ["vol-1"]


def test_apply_treats_missing_resources_as_gone(settings):
    ec2 = _EC2Client(failures={"sg-1": "InvalidGroup.NotFound"})
    results = sweep(
        settings,
        {"resourcegroupstaggingapi": _TaggingClient(ARNS[:1]), "ec2": ec2},
        apply_changes=True,
        sleep=_Sleeper(),
    )
    assert results[0].mode == "APPLY"
    assert results[0].deleted is False
    assert results[0].message == "already gone"


class _LoadBalancerClient:
    def __init__(self):
        self.calls = []

    def delete_load_balancer(self, **kwargs):
        self.calls.append(("delete", kwargs))

    def modify_load_balancer_attributes(self, **kwargs):
        self.calls.append(("modify", kwargs))


def test_load_balancer_deleter_handles_classic_and_application_arns(settings):
    elb, elbv2 = _LoadBalancerClient(), _LoadBalancerClient()
    arns = [
        "arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/plain-http-lb",
        "arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/app/drill-alb/50dc6c495c0c9188",
    ]
    results = sweep(
        settings,
        {"resourcegroupstaggingapi": _TaggingClient(arns), "elb": elb, "elbv2": elbv2},
        apply_changes=True,
        sleep=_Sleeper(),
    )

    assert [result.mode for result in results] == ["APPLY", "APPLY"]
    assert elb.calls == [("delete", {"LoadBalancerName": "plain-http-lb"})]
    assert [call for call, _ in elbv2.calls] == ["modify", "delete"]
    assert elbv2.calls[1][1] == {"LoadBalancerArn": arns[1]}


class _NetworkClient:
    def __init__(self):
        self.calls = []

    def describe_internet_gateways(self, InternetGatewayIds):
        return {"InternetGateways": [{"InternetGatewayId": InternetGatewayIds[0], "Attachments": [{"VpcId": "vpc-9"}]}]}

    def detach_internet_gateway(self, InternetGatewayId, VpcId):
        self.calls.append(("detach", InternetGatewayId, VpcId))

    def delete_internet_gateway(self, InternetGatewayId):
        self.calls.append(("delete", InternetGatewayId))


def test_internet_gateway_is_detached_before_delete(settings):
    ec2 = _NetworkClient()
    arn = "arn:aws:ec2:us-east-1:123456789012:internet-gateway/igw-1"
    results = sweep(
        settings,
        {"resourcegroupstaggingapi": _TaggingClient([arn]), "ec2": ec2},
        apply_changes=True,
        sleep=_Sleeper(),
    )

    assert results[0].deleted is True
    assert ec2.calls == [("detach", "igw-1", "vpc-9"), ("delete", "igw-1")]


class _PatchClient:
    def __init__(self):
        self.calls = []

    def get_patch_baseline(self, BaselineId):
        return {"BaselineId": BaselineId, "PatchGroups": ["drill-patch-group"]}

    def deregister_patch_baseline_for_patch_group(self, BaselineId, PatchGroup):
        self.calls.append(("deregister", PatchGroup))

    def delete_patch_baseline(self, BaselineId):
        self.calls.append(("delete", BaselineId))


def test_patch_baseline_is_deregistered_before_delete(settings):
    ssm = _PatchClient()
    arn = "arn:aws:ssm:us-east-1:123456789012:patchbaseline/pb-0123456789abcdef0"
    clients = {"resourcegroupstaggingapi": _TaggingClient([arn]), "ssm": ssm}
    sweep(settings, clients, apply_changes=True, sleep=_Sleeper())

    assert ssm.calls == [("deregister", "drill-patch-group"), ("delete", "pb-0123456789abcdef0")]


@pytest.mark.parametrize(
    "arn",
    [
        "arn:aws:redshift:us-east-1:123456789012:cluster:public-cluster-1",
        "arn:aws:redshift:us-east-1:123456789012:parametergroup:no-ssl-params-1",
        "arn:aws:elasticache:us-east-1:123456789012:replicationgroup:no-backup-redis-1",
        "arn:aws:dms:us-east-1:123456789012:rep:ABCDEFGHIJKLMNOP",
        "arn:aws:guardduty:us-east-1:123456789012:detector/abc123",
        "arn:aws:sagemaker:us-east-1:123456789012:endpoint-config/unencrypted-endpoint-config-1",
        "arn:aws:elasticbeanstalk:us-east-1:123456789012:environment/drill-app-1/basic-health-env-1",
        "arn:aws:rds:us-east-1:123456789012:snapshot:unencrypted-snapshot-1",
        "arn:aws:iam::123456789012:instance-profile/beanstalk-ec2-1",
        "arn:aws:ec2:us-east-1:123456789012:vpn-connection/vpn-1",
    ],
)
def test_drill_resource_types_have_deleters(arn):
    assert find_deleter(parse_arn(arn)) is not None
