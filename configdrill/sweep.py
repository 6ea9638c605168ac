"""Delete leftover drill resources found by tag."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from botocore.exceptions import ClientError

from .ledger import ALREADY_GONE_CODES
from .models import SweepResult
from .polling import error_code
from .provision import (
    delete_bucket,
    delete_group,
    delete_instance_profile,
    delete_managed_policy,
    delete_role,
    delete_user,
    schedule_key_deletion,
)
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArnParts:
    arn: str
    partition: str
    service: str
    region: str
    account: str
    resource_type: str
    resource_id: str


def parse_arn(arn: str) -> ArnParts:
    """Split an ARN into its parts; the resource may be ``type/id``, ``type:id`` or ``id``."""
    pieces = arn.split(":", 5)
    if len(pieces) != 6 or pieces[0] != "arn":
        raise ValueError(f"Not an ARN: {arn}")
    _, partition, service, region, account, resource = pieces
    resource_type = ""
    resource_id = resource
    if "/" in resource and (":" not in resource or resource.index("/") < resource.index(":")):
        resource_type, resource_id = resource.split("/", 1)
    elif ":" in resource:
        resource_type, resource_id = resource.split(":", 1)
    if service == "iam":
        # IAM resources may carry a path: role/service-role/name
        resource_id = resource_id.rsplit("/", 1)[-1]
    return ArnParts(arn, partition, service, region, account, resource_type, resource_id)


Deleter = Callable[[ArnParts, Mapping[str, Any], Settings], str]

_REGISTRY: Dict[Tuple[str, str], Deleter] = {}


def register(service: str, resource_type: str = "") -> Callable[[Deleter], Deleter]:
    """Decorator to register a deleter for a service and resource type."""

    def _inner(func: Deleter) -> Deleter:
        _REGISTRY[(service, resource_type)] = func
        return func

    return _inner


def list_deleters() -> Iterable[Tuple[str, str]]:
    return _REGISTRY.keys()


def find_deleter(parts: ArnParts) -> Optional[Deleter]:
    return _REGISTRY.get((parts.service, parts.resource_type)) or _REGISTRY.get((parts.service, "*"))


def tagged_resource_arns(clients: Mapping[str, Any], tag_key: str, tag_value: Optional[str] = None) -> List[str]:
    tag_filter: Dict[str, Any] = {"Key": tag_key}
    if tag_value:
        tag_filter["Values"] = [tag_value]
    paginator = clients["resourcegroupstaggingapi"].get_paginator("get_resources")
    arns: List[str] = []
    for page in paginator.paginate(TagFilters=[tag_filter]):
        arns.extend(item["ResourceARN"] for item in page.get("ResourceTagMappingList", []))
    return arns


def sweep(
    settings: Settings,
    clients: Mapping[str, Any],
    *,
    apply_changes: bool = False,
    tag_key: Optional[str] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> List[SweepResult]:
    """Find every resource tagged with the drill tag and delete it (dry-run unless ``apply_changes``)."""
    key = tag_key or settings.tag_key
    arns = tagged_resource_arns(clients, key)
    logger.info("Found %s resource(s) tagged %s", len(arns), key)
    results: List[SweepResult] = []
    for index, arn in enumerate(arns):
        if apply_changes and index:
            sleep(settings.sweep_delay_seconds)
        results.append(_sweep_one(arn, settings, clients, apply_changes))
    return results


def _sweep_one(arn: str, settings: Settings, clients: Mapping[str, Any], apply_changes: bool) -> SweepResult:
    try:
        parts = parse_arn(arn)
    except ValueError as exc:
        logger.warning("Skipping %s: %s", arn, exc)
        return SweepResult(arn, "", "", "", mode="SKIP", deleted=False, message=str(exc))

    base = {
        "arn": arn,
        "service": parts.service,
        "resource_type": parts.resource_type,
        "resource_id": parts.resource_id,
    }
    deleter = find_deleter(parts)
    if deleter is None:
        message = f"no deleter for {parts.service}:{parts.resource_type or '-'}"
        logger.info("Skipping %s: %s", arn, message)
        return SweepResult(**base, mode="SKIP", deleted=False, message=message)
    if not apply_changes:
        return SweepResult(**base, mode="DRY_RUN", deleted=False, message=f"Would delete {arn}")

    try:
        message = deleter(parts, clients, settings)
    except ClientError as exc:
        if error_code(exc) in ALREADY_GONE_CODES:
            logger.info("%s already gone", arn)
            return SweepResult(**base, mode="APPLY", deleted=False, message="already gone")
        return _failed(base, arn, exc)
    except Exception as exc:  # per-resource failures never stop the sweep
        return _failed(base, arn, exc)
    logger.info("Deleted %s", arn)
    return SweepResult(**base, mode="APPLY", deleted=True, message=message)


def _failed(base: Dict[str, str], arn: str, exc: Exception) -> SweepResult:
    logger.error("Failed to delete %s: %s", arn, exc)
    logger.debug("Sweep failure detail", exc_info=exc)
    return SweepResult(**base, mode="FAILED", deleted=False, message=f"failed: {exc}", error=str(exc))


@register("ec2", "security-group")
def _delete_security_group(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].delete_security_group(GroupId=parts.resource_id)
    return f"Deleted security group {parts.resource_id}"


@register("ec2", "volume")
def _delete_volume(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].delete_volume(VolumeId=parts.resource_id)
    return f"Deleted volume {parts.resource_id}"


@register("ec2", "snapshot")
def _delete_snapshot(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].delete_snapshot(SnapshotId=parts.resource_id)
    return f"Deleted snapshot {parts.resource_id}"


@register("ec2", "instance")
def _terminate_instance(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].terminate_instances(InstanceIds=[parts.resource_id])
    return f"Terminated instance {parts.resource_id}"


@register("ec2", "vpc")
def _delete_vpc(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].delete_vpc(VpcId=parts.resource_id)
    return f"Deleted VPC {parts.resource_id}"


@register("ec2", "launch-template")
def _delete_launch_template(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].delete_launch_template(LaunchTemplateId=parts.resource_id)
    return f"Deleted launch template {parts.resource_id}"


@register("s3")
def _delete_bucket(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    delete_bucket(clients["s3"], parts.resource_id)
    return f"Emptied and deleted bucket {parts.resource_id}"


@register("dynamodb", "table")
def _delete_table(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["dynamodb"].delete_table(TableName=parts.resource_id)
    return f"Deleted table {parts.resource_id}"


@register("iam", "user")
def _delete_user(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    delete_user(clients["iam"], parts.resource_id)
    return f"Deleted IAM user {parts.resource_id}"


@register("iam", "role")
def _delete_role(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    delete_role(clients["iam"], parts.resource_id)
    return f"Deleted IAM role {parts.resource_id}"


@register("iam", "policy")
def _delete_policy(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    delete_managed_policy(clients["iam"], parts.arn)
    return f"Deleted IAM policy {parts.resource_id}"


@register("iam", "group")
def _delete_group(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    delete_group(clients["iam"], parts.resource_id)
    return f"Deleted IAM group {parts.resource_id}"


@register("kms", "key")
def _delete_key(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    schedule_key_deletion(clients["kms"], parts.resource_id)
    return f"Scheduled deletion of KMS key {parts.resource_id}"


@register("lambda", "function")
def _delete_function(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["lambda"].delete_function(FunctionName=parts.resource_id.split(":", 1)[0])
    return f"Deleted function {parts.resource_id}"


@register("logs", "log-group")
def _delete_log_group(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    name = parts.resource_id
    if name.endswith(":*"):
        name = name[:-2]
    clients["logs"].delete_log_group(logGroupName=name)
    return f"Deleted log group {name}"


@register("sns")
def _delete_topic(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["sns"].delete_topic(TopicArn=parts.arn)
    return f"Deleted topic {parts.resource_id}"


@register("secretsmanager", "secret")
def _delete_secret(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["secretsmanager"].delete_secret(SecretId=parts.arn, ForceDeleteWithoutRecovery=True)
    return f"Deleted secret {parts.resource_id}"


@register("ssm", "document")
def _delete_document(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    ssm = clients["ssm"]
    ssm.modify_document_permission(Name=parts.resource_id, PermissionType="Share", AccountIdsToRemove=["All"])
    ssm.delete_document(Name=parts.resource_id)
    return f"Deleted document {parts.resource_id}"


@register("elasticfilesystem", "file-system")
def _delete_file_system(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["efs"].delete_file_system(FileSystemId=parts.resource_id)
    return f"Deleted file system {parts.resource_id}"


@register("rds", "db")
def _delete_db_instance(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["rds"].delete_db_instance(
        DBInstanceIdentifier=parts.resource_id,
        SkipFinalSnapshot=True,
        DeleteAutomatedBackups=True,
    )
    return f"Deleting DB instance {parts.resource_id}"


@register("rds", "subgrp")
def _delete_db_subnet_group(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["rds"].delete_db_subnet_group(DBSubnetGroupName=parts.resource_id)
    return f"Deleted DB subnet group {parts.resource_id}"


@register("es", "domain")
def _delete_domain(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["opensearch"].delete_domain(DomainName=parts.resource_id)
    return f"Deleting domain {parts.resource_id}"


@register("codebuild", "project")
def _delete_project(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["codebuild"].delete_project(name=parts.resource_id)
    return f"Deleted project {parts.resource_id}"


@register("apigateway", "")
def _delete_rest_api(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    # arn:aws:apigateway:region::/restapis/<id>[/stages/<name>]; stages go with their API
    segments = parts.resource_id.strip("/").split("/")
    if len(segments) < 2 or segments[0] != "restapis":
        raise ValueError(f"only REST APIs are swept, got {parts.resource_id}")
    clients["apigateway"].delete_rest_api(restApiId=segments[1])
    return f"Deleted REST API {segments[1]}"


@register("wafv2", "regional")
def _delete_web_acl(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    # resource id: webacl/<name>/<id>
    kind, name, acl_id = parts.resource_id.split("/", 2)
    if kind != "webacl":
        raise ValueError(f"only web ACLs are swept, got {kind}")
    wafv2 = clients["wafv2"]
    lock_token = wafv2.get_web_acl(Name=name, Scope="REGIONAL", Id=acl_id)["LockToken"]
    wafv2.delete_web_acl(Name=name, Scope="REGIONAL", Id=acl_id, LockToken=lock_token)
    return f"Deleted web ACL {name}"


@register("cloudtrail", "trail")
def _delete_trail(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["cloudtrail"].delete_trail(Name=parts.arn)
    return f"Deleted trail {parts.resource_id}"


@register("ecs", "task-definition")
def _deregister_task_definition(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ecs"].deregister_task_definition(taskDefinition=parts.resource_id)
    return f"Deregistered task definition {parts.resource_id}"


@register("sagemaker", "notebook-instance")
def _delete_notebook(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    sagemaker = clients["sagemaker"]
    status = sagemaker.describe_notebook_instance(NotebookInstanceName=parts.resource_id)["NotebookInstanceStatus"]
    if status in {"InService", "Pending"}:
        sagemaker.stop_notebook_instance(NotebookInstanceName=parts.resource_id)
        return f"Stopping notebook {parts.resource_id}; sweep again to delete"
    sagemaker.delete_notebook_instance(NotebookInstanceName=parts.resource_id)
    return f"Deleted notebook {parts.resource_id}"


@register("elasticloadbalancing", "loadbalancer")
def _delete_load_balancer(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    if "/" not in parts.resource_id:
        # classic load balancers: loadbalancer/<name>
        clients["elb"].delete_load_balancer(LoadBalancerName=parts.resource_id)
        return f"Deleted classic load balancer {parts.resource_id}"
    elbv2 = clients["elbv2"]
    elbv2.modify_load_balancer_attributes(
        LoadBalancerArn=parts.arn,
        Attributes=[{"Key": "deletion_protection.enabled", "Value": "false"}],
    )
    elbv2.delete_load_balancer(LoadBalancerArn=parts.arn)
    return f"Deleted load balancer {parts.resource_id}"


@register("elasticloadbalancing", "targetgroup")
def _delete_target_group(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["elbv2"].delete_target_group(TargetGroupArn=parts.arn)
    return f"Deleted target group {parts.resource_id}"


@register("elasticmapreduce", "cluster")
def _terminate_cluster(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["emr"].terminate_job_flows(JobFlowIds=[parts.resource_id])
    return f"Terminating cluster {parts.resource_id}"


@register("acm", "certificate")
def _delete_certificate(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["acm"].delete_certificate(CertificateArn=parts.arn)
    return f"Deleted certificate {parts.resource_id}"


@register("ec2", "subnet")
def _delete_subnet(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].delete_subnet(SubnetId=parts.resource_id)
    return f"Deleted subnet {parts.resource_id}"


@register("ec2", "route-table")
def _delete_route_table(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].delete_route_table(RouteTableId=parts.resource_id)
    return f"Deleted route table {parts.resource_id}"


@register("ec2", "internet-gateway")
def _delete_internet_gateway(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    ec2 = clients["ec2"]
    gateway = ec2.describe_internet_gateways(InternetGatewayIds=[parts.resource_id])["InternetGateways"][0]
    for attachment in gateway.get("Attachments", []):
        ec2.detach_internet_gateway(InternetGatewayId=parts.resource_id, VpcId=attachment["VpcId"])
    ec2.delete_internet_gateway(InternetGatewayId=parts.resource_id)
    return f"Deleted internet gateway {parts.resource_id}"


@register("ec2", "vpn-connection")
def _delete_vpn_connection(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].delete_vpn_connection(VpnConnectionId=parts.resource_id)
    return f"Deleting VPN connection {parts.resource_id}"


@register("ec2", "customer-gateway")
def _delete_customer_gateway(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["ec2"].delete_customer_gateway(CustomerGatewayId=parts.resource_id)
    return f"Deleted customer gateway {parts.resource_id}"


@register("ec2", "vpn-gateway")
def _delete_vpn_gateway(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    ec2 = clients["ec2"]
    gateway = ec2.describe_vpn_gateways(VpnGatewayIds=[parts.resource_id])["VpnGateways"][0]
    for attachment in gateway.get("VpcAttachments", []):
        if attachment.get("State") in {"attaching", "attached"}:
            ec2.detach_vpn_gateway(VpnGatewayId=parts.resource_id, VpcId=attachment["VpcId"])
    ec2.delete_vpn_gateway(VpnGatewayId=parts.resource_id)
    return f"Deleted VPN gateway {parts.resource_id}"


@register("rds", "snapshot")
def _delete_db_snapshot(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["rds"].delete_db_snapshot(DBSnapshotIdentifier=parts.resource_id)
    return f"Deleted DB snapshot {parts.resource_id}"


@register("iam", "instance-profile")
def _delete_instance_profile(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    delete_instance_profile(clients["iam"], parts.resource_id)
    return f"Deleted instance profile {parts.resource_id}"


@register("redshift", "cluster")
def _delete_redshift_cluster(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["redshift"].delete_cluster(ClusterIdentifier=parts.resource_id, SkipFinalClusterSnapshot=True)
    return f"Deleting Redshift cluster {parts.resource_id}"


@register("redshift", "parametergroup")
def _delete_cluster_parameter_group(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["redshift"].delete_cluster_parameter_group(ParameterGroupName=parts.resource_id)
    return f"Deleted cluster parameter group {parts.resource_id}"


@register("elasticache", "replicationgroup")
def _delete_replication_group(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["elasticache"].delete_replication_group(ReplicationGroupId=parts.resource_id)
    return f"Deleting replication group {parts.resource_id}"


@register("dms", "rep")
def _delete_replication_instance(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["dms"].delete_replication_instance(ReplicationInstanceArn=parts.arn)
    return f"Deleting replication instance {parts.resource_id}"


@register("dms", "subgrp")
def _delete_replication_subnet_group(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["dms"].delete_replication_subnet_group(ReplicationSubnetGroupIdentifier=parts.resource_id)
    return f"Deleted replication subnet group {parts.resource_id}"


@register("guardduty", "detector")
def _delete_detector(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["guardduty"].delete_detector(DetectorId=parts.resource_id)
    return f"Deleted detector {parts.resource_id}"


@register("sagemaker", "endpoint-config")
def _delete_endpoint_config(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["sagemaker"].delete_endpoint_config(EndpointConfigName=parts.resource_id)
    return f"Deleted endpoint configuration {parts.resource_id}"


@register("sagemaker", "model")
def _delete_model(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["sagemaker"].delete_model(ModelName=parts.resource_id)
    return f"Deleted model {parts.resource_id}"


@register("elasticbeanstalk", "environment")
def _terminate_environment(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    # resource id: <application>/<environment>
    name = parts.resource_id.rsplit("/", 1)[-1]
    clients["elasticbeanstalk"].terminate_environment(EnvironmentName=name)
    return f"Terminating environment {name}"


@register("elasticbeanstalk", "application")
def _delete_application(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    clients["elasticbeanstalk"].delete_application(ApplicationName=parts.resource_id, TerminateEnvByForce=True)
    return f"Deleted application {parts.resource_id}"


@register("ssm", "patchbaseline")
def _delete_patch_baseline(parts: ArnParts, clients: Mapping[str, Any], settings: Settings) -> str:
    ssm = clients["ssm"]
    for group in ssm.get_patch_baseline(BaselineId=parts.resource_id).get("PatchGroups", []):
        ssm.deregister_patch_baseline_for_patch_group(BaselineId=parts.resource_id, PatchGroup=group)
    ssm.delete_patch_baseline(BaselineId=parts.resource_id)
    return f"Deleted patch baseline {parts.resource_id}"
