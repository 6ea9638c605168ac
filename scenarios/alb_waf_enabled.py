"""alb-waf-enabled - application load balancer with no web ACL associated."""

from __future__ import annotations

from typing import Any, Dict, Optional

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.elb_deletion_protection_enabled import create_load_balancer

META = {
    "rule": "alb-waf-enabled",
    "title": "ALB not protected by AWS WAF",
    "service": "elbv2",
    "resource_type": "AWS::ElasticLoadBalancingV2::LoadBalancer",
    "required_env": [],
}


def associated_web_acl(wafv2: Any, resource_arn: str) -> Optional[str]:
    acl = wafv2.get_web_acl_for_resource(ResourceArn=resource_arn).get("WebACL") or {}
    return acl.get("ARN")


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    balancer = create_load_balancer(settings, clients, ledger, rule=META["rule"], prefix="unshielded-alb")
    return {"load_balancer_arn": balancer["LoadBalancerArn"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    acl_arn = associated_web_acl(clients["wafv2"], state["load_balancer_arn"])
    return {
        "compliant": bool(acl_arn),
        "evidence": {"load_balancer_arn": state["load_balancer_arn"], "web_acl_arn": acl_arn},
    }
