"""Provisioning helpers shared by scenarios.

Each ``create_*`` helper creates one resource, tags it for the sweeper and
registers the matching release call in the ledger before returning, so a
failure later in the scenario still cleans it up.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from botocore.exceptions import ClientError

from .clients import resolve_account_id
from .ledger import ALREADY_GONE_CODES, ResourceLedger
from .naming import bucket_name, drill_tags, generate_password, iam_name, tag_list, unique_name
from .policies import assume_role_policy, cloudtrail_bucket_policy, to_json
from .polling import error_code, wait_for_state, wait_until_gone
from .settings import Settings

logger = logging.getLogger(__name__)

Clients = Mapping[str, Any]

_CREATED = "created"
_REJECTED = "rejected"
IAM_PROPAGATION_CODES = {"InvalidParameterValueException", "MalformedPolicyDocument", "InvalidInput"}
INSTANCE_PROFILE_NOT_READY = r"iam instance profile"
DEFAULT_LAMBDA_SOURCE = (
    "def handler(event, context):\n"
    "    return {'statusCode': 200, 'body': 'ok'}\n"
)


def ignore_missing(call: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a cleanup sub-step, treating already-gone errors as success."""
    try:
        return call(*args, **kwargs)
    except ClientError as exc:
        if error_code(exc) in ALREADY_GONE_CODES:
            return None
        raise


def retry_until_accepted(
    call: Callable[[], Any],
    settings: Settings,
    *,
    codes: Iterable[str] = IAM_PROPAGATION_CODES,
    message_pattern: Optional[str] = None,
    label: str = "request",
) -> Any:
    """
    Repeat a create call while it fails with eventual-consistency errors (IAM propagation).

    With ``message_pattern`` only errors whose message matches it are retried;
    any other error from ``codes`` is raised on the first attempt.
    """
    holder: Dict[str, Any] = {}
    pattern = re.compile(message_pattern, re.IGNORECASE) if message_pattern else None

    def _attempt() -> str:
        try:
            holder["response"] = call()
        except ClientError as exc:
            message = exc.response.get("Error", {}).get("Message", "")
            if pattern is not None and error_code(exc) in codes and not pattern.search(message):
                holder["error"] = exc
                return _REJECTED
            raise
        return _CREATED

    wait_for_state(_attempt, target={_CREATED, _REJECTED}, retry_codes=codes, label=label, **settings.poll_kwargs())
    if "error" in holder:
        raise holder["error"]
    return holder["response"]


# --- S3 -------------------------------------------------------------------


def create_bucket(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    object_ownership: Optional[str] = None,
) -> str:
    s3 = clients["s3"]
    name = bucket_name(prefix)
    kwargs: Dict[str, Any] = {"Bucket": name}
    if settings.aws_region != "us-east-1":
        kwargs["CreateBucketConfiguration"] = {"LocationConstraint": settings.aws_region}
    if object_ownership:
        kwargs["ObjectOwnership"] = object_ownership
    s3.create_bucket(**kwargs)
    ledger.track("s3:bucket", name, lambda: delete_bucket(s3, name), arn=f"arn:aws:s3:::{name}")

    wait_for_state(
        lambda: s3.head_bucket(Bucket=name),
        target=_CREATED,
        status_of=lambda _: _CREATED,
        retry_codes={"404", "NoSuchBucket", "NotFound"},
        label=f"bucket {name}",
        **settings.poll_kwargs(),
    )
    s3.put_bucket_tagging(Bucket=name, Tagging={"TagSet": tag_list(drill_tags(settings, rule))})
    return name


def empty_bucket(s3: Any, name: str) -> int:
    """Delete every object version and delete marker; returns the number removed."""
    removed = 0
    paginator = s3.get_paginator("list_object_versions")
    for page in paginator.paginate(Bucket=name):
        entries = page.get("Versions", []) + page.get("DeleteMarkers", [])
        objects = [{"Key": entry["Key"], "VersionId": entry["VersionId"]} for entry in entries]
        if objects:
            s3.delete_objects(Bucket=name, Delete={"Objects": objects, "Quiet": True})
            removed += len(objects)
    return removed


def delete_bucket(s3: Any, name: str) -> None:
    empty_bucket(s3, name)
    s3.delete_bucket(Bucket=name)


def disable_bucket_public_access_block(s3: Any, name: str) -> None:
    s3.put_public_access_block(
        Bucket=name,
        PublicAccessBlockConfiguration={
            "BlockPublicAcls": False,
            "IgnorePublicAcls": False,
            "BlockPublicPolicy": False,
            "RestrictPublicBuckets": False,
        },
    )


# --- EC2 / VPC ------------------------------------------------------------


def ec2_tag_spec(settings: Settings, rule: str, resource_type: str, name: str) -> Dict[str, Any]:
    return {"ResourceType": resource_type, "Tags": tag_list(drill_tags(settings, rule, name))}


def default_vpc_id(settings: Settings, clients: Clients) -> str:
    if settings.vpc_id:
        return settings.vpc_id
    vpcs = clients["ec2"].describe_vpcs(Filters=[{"Name": "isDefault", "Values": ["true"]}]).get("Vpcs", [])
    if not vpcs:
        raise RuntimeError("No default VPC found; set VPC_ID")
    return vpcs[0]["VpcId"]


def vpc_subnet_ids(settings: Settings, clients: Clients, vpc_id: str) -> List[str]:
    if settings.subnet_ids:
        return list(settings.subnet_ids)
    subnets = clients["ec2"].describe_subnets(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}]).get("Subnets", [])
    if not subnets:
        raise RuntimeError(f"No subnets found in {vpc_id}; set SUBNET_IDS")
    # one subnet per availability zone keeps load balancers and RDS subnet groups valid
    by_zone: Dict[str, str] = {}
    for subnet in subnets:
        by_zone.setdefault(subnet["AvailabilityZone"], subnet["SubnetId"])
    return [by_zone[zone] for zone in sorted(by_zone)]


def first_availability_zone(clients: Clients) -> str:
    zones = clients["ec2"].describe_availability_zones(
        Filters=[{"Name": "state", "Values": ["available"]}]
    ).get("AvailabilityZones", [])
    if not zones:
        raise RuntimeError("No available availability zones in region")
    return zones[0]["ZoneName"]


def latest_amazon_linux_ami(settings: Settings, clients: Clients) -> str:
    if settings.ec2_ami_id:
        return settings.ec2_ami_id
    images = clients["ec2"].describe_images(
        Owners=["amazon"],
        Filters=[
            {"Name": "name", "Values": ["amzn2-ami-hvm-*-x86_64-gp2"]},
            {"Name": "state", "Values": ["available"]},
        ],
    ).get("Images", [])
    if not images:
        raise RuntimeError("No Amazon Linux 2 AMI found; set EC2_AMI_ID")
    latest = max(images, key=lambda image: image.get("CreationDate", ""))
    return latest["ImageId"]


def create_security_group(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    description: str,
    vpc_id: Optional[str] = None,
) -> str:
    ec2 = clients["ec2"]
    name = unique_name(prefix, max_length=255)
    kwargs: Dict[str, Any] = {
        "GroupName": name,
        "Description": description,
        "TagSpecifications": [ec2_tag_spec(settings, rule, "security-group", name)],
    }
    if vpc_id:
        kwargs["VpcId"] = vpc_id
    group_id = ec2.create_security_group(**kwargs)["GroupId"]
    ledger.track("ec2:security-group", group_id, lambda: ec2.delete_security_group(GroupId=group_id), note=name)
    return group_id


def world_ingress(ports: Sequence[int], *, protocol: str = "tcp", ipv6: bool = True) -> List[Dict[str, Any]]:
    permissions = []
    for port in ports:
        permission: Dict[str, Any] = {
            "IpProtocol": protocol,
            "FromPort": port,
            "ToPort": port,
            "IpRanges": [{"CidrIp": "0.0.0.0/0", "Description": "open to the internet"}],
        }
        if ipv6:
            permission["Ipv6Ranges"] = [{"CidrIpv6": "::/0", "Description": "open to the internet"}]
        permissions.append(permission)
    return permissions


def create_vpc(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    cidr: str = "10.99.0.0/16",
) -> str:
    ec2 = clients["ec2"]
    name = unique_name(prefix)
    vpc_id = ec2.create_vpc(CidrBlock=cidr, TagSpecifications=[ec2_tag_spec(settings, rule, "vpc", name)])["Vpc"][
        "VpcId"
    ]
    ledger.track("ec2:vpc", vpc_id, lambda: ec2.delete_vpc(VpcId=vpc_id), note=name)
    wait_for_state(
        lambda: ec2.describe_vpcs(VpcIds=[vpc_id]),
        target="available",
        status_of=lambda r: r["Vpcs"][0]["State"],
        retry_codes={"InvalidVpcID.NotFound"},
        label=f"vpc {vpc_id}",
        **settings.poll_kwargs(),
    )
    return vpc_id


def create_subnet(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    vpc_id: str,
    cidr: str = "10.99.1.0/24",
) -> str:
    ec2 = clients["ec2"]
    name = unique_name(prefix)
    subnet_id = ec2.create_subnet(
        VpcId=vpc_id,
        CidrBlock=cidr,
        AvailabilityZone=first_availability_zone(clients),
        TagSpecifications=[ec2_tag_spec(settings, rule, "subnet", name)],
    )["Subnet"]["SubnetId"]
    ledger.track("ec2:subnet", subnet_id, lambda: ec2.delete_subnet(SubnetId=subnet_id), note=name)
    return subnet_id


def run_instance(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    **launch: Any,
) -> Dict[str, Any]:
    """Launch one instance, wait until it is running and return its description."""
    ec2 = clients["ec2"]
    name = unique_name(prefix)
    launch.setdefault("ImageId", latest_amazon_linux_ami(settings, clients))
    launch.setdefault("InstanceType", "t2.micro")
    # a new instance profile is rejected until IAM has propagated it
    response = retry_until_accepted(
        lambda: ec2.run_instances(
            MinCount=1,
            MaxCount=1,
            TagSpecifications=[ec2_tag_spec(settings, rule, "instance", name)],
            **launch,
        ),
        settings,
        codes={"InvalidParameterValue"},
        message_pattern=INSTANCE_PROFILE_NOT_READY,
        label=f"instance {name}",
    )
    instance_id = response["Instances"][0]["InstanceId"]
    ledger.track("ec2:instance", instance_id, lambda: terminate_instance(settings, ec2, instance_id), note=name)

    described = wait_for_state(
        lambda: ec2.describe_instances(InstanceIds=[instance_id]),
        target="running",
        status_of=lambda r: r["Reservations"][0]["Instances"][0]["State"]["Name"],
        failure_states={"shutting-down", "terminated", "stopped"},
        retry_codes={"InvalidInstanceID.NotFound"},
        label=f"instance {instance_id}",
        **settings.poll_kwargs(),
    )
    return described["Reservations"][0]["Instances"][0]


def terminate_instance(settings: Settings, ec2: Any, instance_id: str) -> None:
    ec2.terminate_instances(InstanceIds=[instance_id])
    wait_for_state(
        lambda: ec2.describe_instances(InstanceIds=[instance_id]),
        target="terminated",
        status_of=lambda r: r["Reservations"][0]["Instances"][0]["State"]["Name"],
        label=f"instance {instance_id} termination",
        **settings.poll_kwargs(),
    )


# --- IAM ------------------------------------------------------------------


def create_user(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    extra_tags: Optional[Dict[str, str]] = None,
) -> str:
    iam = clients["iam"]
    name = iam_name(prefix)
    tags = drill_tags(settings, rule)
    tags.update(extra_tags or {})
    iam.create_user(UserName=name, Tags=tag_list(tags))
    ledger.track("iam:user", name, lambda: delete_user(iam, name))
    return name


def delete_user(iam: Any, name: str) -> None:
    """Remove everything attached to a user, then the user itself."""
    ignore_missing(iam.delete_login_profile, UserName=name)
    for key in iam.list_access_keys(UserName=name).get("AccessKeyMetadata", []):
        iam.delete_access_key(UserName=name, AccessKeyId=key["AccessKeyId"])
    for policy_name in iam.list_user_policies(UserName=name).get("PolicyNames", []):
        iam.delete_user_policy(UserName=name, PolicyName=policy_name)
    for policy in iam.list_attached_user_policies(UserName=name).get("AttachedPolicies", []):
        iam.detach_user_policy(UserName=name, PolicyArn=policy["PolicyArn"])
    for group in iam.list_groups_for_user(UserName=name).get("Groups", []):
        iam.remove_user_from_group(UserName=name, GroupName=group["GroupName"])
    iam.delete_user(UserName=name)


def create_role(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    service: str,
    managed_policy_arns: Sequence[str] = (),
    inline_policies: Optional[Mapping[str, Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    iam = clients["iam"]
    name = iam_name(prefix)
    role = iam.create_role(
        RoleName=name,
        AssumeRolePolicyDocument=to_json(assume_role_policy(service)),
        Description=f"config-drill role for {rule}",
        Tags=tag_list(drill_tags(settings, rule)),
    )["Role"]
    ledger.track("iam:role", name, lambda: delete_role(iam, name), arn=role.get("Arn"))
    for policy_arn in managed_policy_arns:
        iam.attach_role_policy(RoleName=name, PolicyArn=policy_arn)
    for policy_name, document in (inline_policies or {}).items():
        iam.put_role_policy(RoleName=name, PolicyName=policy_name, PolicyDocument=to_json(document))
    return role


def delete_role(iam: Any, name: str) -> None:
    for policy in iam.list_attached_role_policies(RoleName=name).get("AttachedPolicies", []):
        iam.detach_role_policy(RoleName=name, PolicyArn=policy["PolicyArn"])
    for policy_name in iam.list_role_policies(RoleName=name).get("PolicyNames", []):
        iam.delete_role_policy(RoleName=name, PolicyName=policy_name)
    for profile in iam.list_instance_profiles_for_role(RoleName=name).get("InstanceProfiles", []):
        iam.remove_role_from_instance_profile(
            InstanceProfileName=profile["InstanceProfileName"], RoleName=name
        )
    iam.delete_role(RoleName=name)


def create_instance_profile(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    managed_policy_arns: Sequence[str] = (),
) -> Dict[str, Any]:
    """EC2 role wrapped in an instance profile; the profile is released before the role."""
    iam = clients["iam"]
    role = create_role(
        settings,
        clients,
        ledger,
        rule=rule,
        prefix=f"{prefix}-role",
        service="ec2.amazonaws.com",
        managed_policy_arns=managed_policy_arns,
    )
    name = iam_name(prefix)
    profile = iam.create_instance_profile(
        InstanceProfileName=name,
        Tags=tag_list(drill_tags(settings, rule)),
    )["InstanceProfile"]
    ledger.track("iam:instance-profile", name, lambda: delete_instance_profile(iam, name), arn=profile.get("Arn"))
    iam.add_role_to_instance_profile(InstanceProfileName=name, RoleName=role["RoleName"])
    return profile


def delete_instance_profile(iam: Any, name: str) -> None:
    for role in iam.get_instance_profile(InstanceProfileName=name)["InstanceProfile"].get("Roles", []):
        iam.remove_role_from_instance_profile(InstanceProfileName=name, RoleName=role["RoleName"])
    iam.delete_instance_profile(InstanceProfileName=name)


def create_managed_policy(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    document: Dict[str, Any],
) -> str:
    iam = clients["iam"]
    name = iam_name(prefix)
    policy = iam.create_policy(
        PolicyName=name,
        PolicyDocument=to_json(document),
        Description=f"config-drill policy for {rule}",
        Tags=tag_list(drill_tags(settings, rule)),
    )["Policy"]
    arn = policy["Arn"]
    ledger.track("iam:policy", name, lambda: delete_managed_policy(iam, arn), arn=arn)
    return arn


def delete_managed_policy(iam: Any, arn: str) -> None:
    entities = iam.list_entities_for_policy(PolicyArn=arn)
    for user in entities.get("PolicyUsers", []):
        iam.detach_user_policy(UserName=user["UserName"], PolicyArn=arn)
    for group in entities.get("PolicyGroups", []):
        iam.detach_group_policy(GroupName=group["GroupName"], PolicyArn=arn)
    for role in entities.get("PolicyRoles", []):
        iam.detach_role_policy(RoleName=role["RoleName"], PolicyArn=arn)
    for version in iam.list_policy_versions(PolicyArn=arn).get("Versions", []):
        if not version.get("IsDefaultVersion"):
            iam.delete_policy_version(PolicyArn=arn, VersionId=version["VersionId"])
    iam.delete_policy(PolicyArn=arn)


def wait_for_policy(settings: Settings, clients: Clients, arn: str) -> Dict[str, Any]:
    return wait_for_state(
        lambda: clients["iam"].get_policy(PolicyArn=arn),
        target=_CREATED,
        status_of=lambda _: _CREATED,
        retry_codes={"NoSuchEntity"},
        label=f"policy {arn}",
        **settings.poll_kwargs(),
    )["Policy"]


def get_policy_document(iam: Any, arn: str) -> Dict[str, Any]:
    """Fetch the default version document of a managed policy."""
    version_id = iam.get_policy(PolicyArn=arn)["Policy"]["DefaultVersionId"]
    version = iam.get_policy_version(PolicyArn=arn, VersionId=version_id)["PolicyVersion"]
    return version["Document"]


def create_group(settings: Settings, clients: Clients, ledger: ResourceLedger, *, prefix: str) -> str:
    iam = clients["iam"]
    name = iam_name(prefix)
    iam.create_group(GroupName=name)
    ledger.track("iam:group", name, lambda: delete_group(iam, name))
    return name


def delete_group(iam: Any, name: str) -> None:
    for user in iam.get_group(GroupName=name).get("Users", []):
        iam.remove_user_from_group(GroupName=name, UserName=user["UserName"])
    for policy in iam.list_attached_group_policies(GroupName=name).get("AttachedPolicies", []):
        iam.detach_group_policy(GroupName=name, PolicyArn=policy["PolicyArn"])
    for policy_name in iam.list_group_policies(GroupName=name).get("PolicyNames", []):
        iam.delete_group_policy(GroupName=name, PolicyName=policy_name)
    iam.delete_group(GroupName=name)


# --- KMS ------------------------------------------------------------------


def create_kms_key(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    description: str,
) -> Dict[str, Any]:
    kms = clients["kms"]
    metadata = kms.create_key(
        Description=description,
        KeyUsage="ENCRYPT_DECRYPT",
        Tags=tag_list(drill_tags(settings, rule), "TagKey", "TagValue"),
    )["KeyMetadata"]
    key_id = metadata["KeyId"]
    ledger.track("kms:key", key_id, lambda: schedule_key_deletion(kms, key_id), arn=metadata.get("Arn"))
    return metadata


def schedule_key_deletion(kms: Any, key_id: str, pending_days: int = 7) -> None:
    """KMS keys cannot be deleted outright; disable and schedule the shortest window."""
    state = kms.describe_key(KeyId=key_id)["KeyMetadata"].get("KeyState")
    if state == "PendingDeletion":
        return
    if state == "Enabled":
        kms.disable_key(KeyId=key_id)
    kms.schedule_key_deletion(KeyId=key_id, PendingWindowInDays=pending_days)


# --- CloudWatch Logs ------------------------------------------------------


def create_log_group(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    name: str,
    retention_days: Optional[int] = None,
) -> str:
    logs = clients["logs"]
    logs.create_log_group(logGroupName=name, tags=drill_tags(settings, rule))
    ledger.track("logs:log-group", name, lambda: logs.delete_log_group(logGroupName=name))
    if retention_days is not None:
        logs.put_retention_policy(logGroupName=name, retentionInDays=retention_days)
    return name


# --- Lambda ---------------------------------------------------------------


def lambda_zip(source: str = DEFAULT_LAMBDA_SOURCE, filename: str = "index.py") -> bytes:
    """Build a deployment package in memory."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(filename, source)
    return buffer.getvalue()


def create_lambda_function(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    source: str = DEFAULT_LAMBDA_SOURCE,
    **extra: Any,
) -> Dict[str, Any]:
    lambda_client = clients["lambda"]
    role = create_role(
        settings,
        clients,
        ledger,
        rule=rule,
        prefix=f"{prefix}-role",
        service="lambda.amazonaws.com",
        managed_policy_arns=["arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"],
    )
    name = unique_name(prefix, max_length=64)
    function = retry_until_accepted(
        lambda: lambda_client.create_function(
            FunctionName=name,
            Runtime="python3.12",
            Role=role["Arn"],
            Handler="index.handler",
            Code={"ZipFile": lambda_zip(source)},
            Description=f"config-drill function for {rule}",
            Timeout=10,
            Tags=drill_tags(settings, rule),
            **extra,
        ),
        settings,
        label=f"function {name}",
    )
    ledger.track(
        "lambda:function",
        name,
        lambda: lambda_client.delete_function(FunctionName=name),
        arn=function.get("FunctionArn"),
    )
    wait_for_state(
        lambda: lambda_client.get_function_configuration(FunctionName=name),
        target="Active",
        status_of=lambda r: r.get("State"),
        failure_states={"Failed"},
        label=f"function {name}",
        **settings.poll_kwargs(),
    )
    return function


# --- DynamoDB -------------------------------------------------------------


def create_table(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    **extra: Any,
) -> Dict[str, Any]:
    dynamodb = clients["dynamodb"]
    name = unique_name(prefix, max_length=255)
    extra.setdefault("BillingMode", "PAY_PER_REQUEST")
    table = dynamodb.create_table(
        TableName=name,
        AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
        KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
        Tags=tag_list(drill_tags(settings, rule)),
        **extra,
    )["TableDescription"]
    ledger.track("dynamodb:table", name, lambda: dynamodb.delete_table(TableName=name), arn=table.get("TableArn"))
    wait_for_state(
        lambda: dynamodb.describe_table(TableName=name),
        target="ACTIVE",
        status_of=lambda r: r["Table"]["TableStatus"],
        label=f"table {name}",
        **settings.poll_kwargs(factor=2),
    )
    return table


# --- CloudTrail -----------------------------------------------------------


def create_trail(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    bucket: str,
    **extra: Any,
) -> Dict[str, Any]:
    cloudtrail = clients["cloudtrail"]
    name = unique_name(prefix)
    trail = retry_until_accepted(
        lambda: cloudtrail.create_trail(
            Name=name,
            S3BucketName=bucket,
            TagsList=tag_list(drill_tags(settings, rule)),
            **extra,
        ),
        settings,
        codes={"InsufficientS3BucketPolicyException"},
        label=f"trail {name}",
    )
    ledger.track("cloudtrail:trail", name, lambda: delete_trail(cloudtrail, name), arn=trail.get("TrailARN"))
    cloudtrail.start_logging(Name=name)
    return trail


def delete_trail(cloudtrail: Any, name: str) -> None:
    ignore_missing(cloudtrail.stop_logging, Name=name)
    cloudtrail.delete_trail(Name=name)


def create_trail_bucket(settings: Settings, clients: Clients, ledger: ResourceLedger, *, rule: str) -> str:
    """Bucket with the delivery policy CloudTrail checks before accepting a trail."""
    bucket = create_bucket(settings, clients, ledger, rule=rule, prefix="cloudtrail-logs")
    account_id = resolve_account_id(settings, clients)
    clients["s3"].put_bucket_policy(Bucket=bucket, Policy=to_json(cloudtrail_bucket_policy(bucket, account_id)))
    return bucket


# --- RDS ------------------------------------------------------------------


def create_db_instance(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    **extra: Any,
) -> Dict[str, Any]:
    """Create a small MySQL instance and wait until it is available."""
    rds = clients["rds"]
    identifier = unique_name(prefix, max_length=63).lower()
    extra.setdefault("DBInstanceClass", "db.t3.micro")
    extra.setdefault("AllocatedStorage", 20)
    rds.create_db_instance(
        DBInstanceIdentifier=identifier,
        Engine="mysql",
        MasterUsername="drilladmin",
        MasterUserPassword=generate_password(16),
        Tags=tag_list(drill_tags(settings, rule)),
        **extra,
    )
    ledger.track("rds:db", identifier, lambda: delete_rds_instance(settings, rds, identifier))
    return wait_for_rds_instance(settings, rds, identifier)


def wait_for_rds_instance(settings: Settings, rds: Any, identifier: str) -> Dict[str, Any]:
    response = wait_for_state(
        lambda: rds.describe_db_instances(DBInstanceIdentifier=identifier),
        target="available",
        status_of=lambda r: r["DBInstances"][0]["DBInstanceStatus"],
        failure_states={"failed", "incompatible-parameters", "incompatible-network", "storage-full"},
        label=f"db instance {identifier}",
        **settings.poll_kwargs(factor=6),
    )
    return response["DBInstances"][0]


def delete_rds_instance(settings: Settings, rds: Any, identifier: str) -> None:
    rds.delete_db_instance(
        DBInstanceIdentifier=identifier,
        SkipFinalSnapshot=True,
        DeleteAutomatedBackups=True,
    )
    wait_until_gone(
        lambda: rds.describe_db_instances(DBInstanceIdentifier=identifier),
        gone_codes={"DBInstanceNotFound", "DBInstanceNotFoundFault"},
        label=f"db instance {identifier}",
        **settings.poll_kwargs(factor=6),
    )


def create_db_snapshot(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    instance_id: str,
) -> Dict[str, Any]:
    """Manual snapshot of ``instance_id``, returned once it is available."""
    rds = clients["rds"]
    identifier = unique_name(prefix, max_length=255).lower()
    rds.create_db_snapshot(
        DBSnapshotIdentifier=identifier,
        DBInstanceIdentifier=instance_id,
        Tags=tag_list(drill_tags(settings, rule)),
    )
    ledger.track("rds:snapshot", identifier, lambda: rds.delete_db_snapshot(DBSnapshotIdentifier=identifier))
    response = wait_for_state(
        lambda: rds.describe_db_snapshots(DBSnapshotIdentifier=identifier),
        target="available",
        status_of=lambda r: r["DBSnapshots"][0]["Status"],
        failure_states={"failed"},
        retry_codes={"DBSnapshotNotFound"},
        label=f"db snapshot {identifier}",
        **settings.poll_kwargs(factor=6),
    )
    return response["DBSnapshots"][0]


# --- Redshift -------------------------------------------------------------

REDSHIFT_NODE_TYPE = "dc2.large"


def create_redshift_cluster(
    settings: Settings,
    clients: Clients,
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    **extra: Any,
) -> Dict[str, Any]:
    """Single-node cluster, private and without a final snapshot on delete, unless ``extra`` says otherwise."""
    redshift = clients["redshift"]
    identifier = unique_name(prefix, max_length=63).lower()
    extra.setdefault("NodeType", REDSHIFT_NODE_TYPE)
    extra.setdefault("PubliclyAccessible", False)
    redshift.create_cluster(
        ClusterIdentifier=identifier,
        ClusterType="single-node",
        MasterUsername="drilladmin",
        MasterUserPassword=generate_password(16),
        Tags=tag_list(drill_tags(settings, rule, identifier)),
        **extra,
    )
    ledger.track("redshift:cluster", identifier, lambda: delete_redshift_cluster(settings, redshift, identifier))
    return wait_for_redshift_cluster(settings, redshift, identifier)


def describe_redshift_cluster(redshift: Any, identifier: str) -> Dict[str, Any]:
    return redshift.describe_clusters(ClusterIdentifier=identifier)["Clusters"][0]


def wait_for_redshift_cluster(settings: Settings, redshift: Any, identifier: str) -> Dict[str, Any]:
    return wait_for_state(
        lambda: describe_redshift_cluster(redshift, identifier),
        target="available",
        status_of=lambda c: c["ClusterStatus"],
        failure_states={"incompatible-parameters", "incompatible-network", "hardware-failure"},
        label=f"redshift cluster {identifier}",
        **settings.poll_kwargs(factor=6),
    )


def delete_redshift_cluster(settings: Settings, redshift: Any, identifier: str) -> None:
    redshift.delete_cluster(ClusterIdentifier=identifier, SkipFinalClusterSnapshot=True)
    wait_until_gone(
        lambda: describe_redshift_cluster(redshift, identifier),
        gone_codes={"ClusterNotFound", "ClusterNotFoundFault"},
        label=f"redshift cluster {identifier}",
        **settings.poll_kwargs(factor=6),
    )
