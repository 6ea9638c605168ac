"""elb-deletion-protection-enabled - application load balancer without deletion protection."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import wait_for_state, wait_until_gone
from configdrill.provision import default_vpc_id, ignore_missing, vpc_subnet_ids
from configdrill.settings import Settings

META = {
    "rule": "elb-deletion-protection-enabled",
    "title": "Load balancer deletion protection disabled",
    "service": "elbv2",
    "resource_type": "AWS::ElasticLoadBalancingV2::LoadBalancer",
    "required_env": [],
}


def delete_load_balancer(settings: Settings, elbv2: Any, arn: str) -> None:
    ignore_missing(
        elbv2.modify_load_balancer_attributes,
        LoadBalancerArn=arn,
        Attributes=[{"Key": "deletion_protection.enabled", "Value": "false"}],
    )
    elbv2.delete_load_balancer(LoadBalancerArn=arn)
    wait_until_gone(
        lambda: elbv2.describe_load_balancers(LoadBalancerArns=[arn]),
        gone_codes={"LoadBalancerNotFound"},
        label=f"load balancer {arn}",
        **settings.poll_kwargs(),
    )


def create_target_group(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str, **extra: Any
) -> Dict[str, Any]:
    """HTTP:80 instance target group in the default VPC."""
    elbv2 = clients["elbv2"]
    name = unique_name(prefix, max_length=32)
    target_group = elbv2.create_target_group(
        Name=name,
        Protocol="HTTP",
        Port=80,
        VpcId=default_vpc_id(settings, clients),
        TargetType="instance",
        Tags=tag_list(drill_tags(settings, rule, name)),
        **extra,
    )["TargetGroups"][0]
    arn = target_group["TargetGroupArn"]
    ledger.track("elbv2:targetgroup", name, lambda: elbv2.delete_target_group(TargetGroupArn=arn), arn=arn)
    return target_group


def create_load_balancer(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str
) -> Dict[str, Any]:
    """Internet-facing ALB in the default VPC using the VPC default security group."""
    elbv2 = clients["elbv2"]
    vpc_id = default_vpc_id(settings, clients)
    subnets = vpc_subnet_ids(settings, clients, vpc_id)
    if len(subnets) < 2:
        raise RuntimeError("An application load balancer needs subnets in at least two availability zones")
    name = unique_name(prefix, max_length=32)
    balancer = elbv2.create_load_balancer(
        Name=name,
        Subnets=subnets,
        Scheme="internet-facing",
        Type="application",
        IpAddressType="ipv4",
        Tags=tag_list(drill_tags(settings, rule, name)),
    )["LoadBalancers"][0]
    arn = balancer["LoadBalancerArn"]
    ledger.track("elbv2:loadbalancer", name, lambda: delete_load_balancer(settings, elbv2, arn), arn=arn)
    wait_for_state(
        lambda: elbv2.describe_load_balancers(LoadBalancerArns=[arn]),
        target="active",
        status_of=lambda r: r["LoadBalancers"][0]["State"]["Code"],
        failure_states={"failed"},
        label=f"load balancer {name}",
        **settings.poll_kwargs(),
    )
    balancer["VpcId"] = vpc_id
    return balancer


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    balancer = create_load_balancer(settings, clients, ledger, rule=META["rule"], prefix="unprotected-alb")
    return {"load_balancer_arn": balancer["LoadBalancerArn"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    attributes = clients["elbv2"].describe_load_balancer_attributes(LoadBalancerArn=state["load_balancer_arn"])[
        "Attributes"
    ]
    enabled = any(
        item["Key"] == "deletion_protection.enabled" and item["Value"] == "true" for item in attributes
    )
    return {
        "compliant": enabled,
        "evidence": {"load_balancer_arn": state["load_balancer_arn"], "deletion_protection": enabled},
    }
