"""alb-http-to-https-redirection-check - HTTP listener forwarding instead of redirecting."""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.elb_deletion_protection_enabled import create_load_balancer, create_target_group

META = {
    "rule": "alb-http-to-https-redirection-check",
    "title": "ALB HTTP listener does not redirect to HTTPS",
    "service": "elbv2",
    "resource_type": "AWS::ElasticLoadBalancingV2::LoadBalancer",
    "required_env": [],
}


def redirects_to_https(listener: Dict[str, Any]) -> bool:
    return any(
        action.get("Type") == "redirect" and action.get("RedirectConfig", {}).get("Protocol") == "HTTPS"
        for action in listener.get("DefaultActions", [])
    )


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    # the target group is tracked first so it is released after the load balancer
    target_arn = create_target_group(settings, clients, ledger, rule=META["rule"], prefix="http-forward-tg")[
        "TargetGroupArn"
    ]
    balancer = create_load_balancer(settings, clients, ledger, rule=META["rule"], prefix="http-only-alb")
    clients["elbv2"].create_listener(
        LoadBalancerArn=balancer["LoadBalancerArn"],
        Protocol="HTTP",
        Port=80,
        DefaultActions=[{"Type": "forward", "TargetGroupArn": target_arn}],
    )
    return {"load_balancer_arn": balancer["LoadBalancerArn"], "target_group_arn": target_arn}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    listeners: List[Dict[str, Any]] = clients["elbv2"].describe_listeners(
        LoadBalancerArn=state["load_balancer_arn"]
    ).get("Listeners", [])
    offending = [
        listener["ListenerArn"]
        for listener in listeners
        if listener.get("Protocol") == "HTTP" and not redirects_to_https(listener)
    ]
    return {
        "compliant": not offending,
        "evidence": {
            "load_balancer_arn": state["load_balancer_arn"],
            "http_listeners_without_redirect": len(offending),
        },
    }
