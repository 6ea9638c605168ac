"""elb-logging-enabled - application load balancer without access logs."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.elb_deletion_protection_enabled import create_load_balancer

META = {
    "rule": "elb-logging-enabled",
    "title": "Load balancer access logging disabled",
    "service": "elbv2",
    "resource_type": "AWS::ElasticLoadBalancingV2::LoadBalancer",
    "required_env": [],
}


def attribute_map(elbv2: Any, arn: str) -> Dict[str, str]:
    attributes = elbv2.describe_load_balancer_attributes(LoadBalancerArn=arn)["Attributes"]
    return {item["Key"]: item["Value"] for item in attributes}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    balancer = create_load_balancer(settings, clients, ledger, rule=META["rule"], prefix="unlogged-alb")
    return {"load_balancer_arn": balancer["LoadBalancerArn"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    attributes = attribute_map(clients["elbv2"], state["load_balancer_arn"])
    enabled = attributes.get("access_logs.s3.enabled") == "true"
    return {
        "compliant": enabled,
        "evidence": {
            "load_balancer_arn": state["load_balancer_arn"],
            "access_logs": enabled,
            "bucket": attributes.get("access_logs.s3.bucket") or None,
        },
    }
