"""elbv2-acm-certificate-required - ALB listener serving without an ACM certificate."""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.elb_acm_certificate_required import is_acm_certificate
from scenarios.elb_deletion_protection_enabled import create_load_balancer

META = {
    "rule": "elbv2-acm-certificate-required",
    "title": "ALB listener without an ACM certificate",
    "service": "elbv2",
    "resource_type": "AWS::ElasticLoadBalancingV2::LoadBalancer",
    "required_env": [],
}

FIXED_RESPONSE = {
    "Type": "fixed-response",
    "FixedResponseConfig": {"StatusCode": "200", "ContentType": "text/plain", "MessageBody": "ok"},
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    balancer = create_load_balancer(settings, clients, ledger, rule=META["rule"], prefix="no-cert-alb")
    listener = clients["elbv2"].create_listener(
        LoadBalancerArn=balancer["LoadBalancerArn"],
        Protocol="HTTP",
        Port=80,
        DefaultActions=[FIXED_RESPONSE],
    )["Listeners"][0]
    return {"load_balancer_arn": balancer["LoadBalancerArn"], "listener_arn": listener["ListenerArn"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    listeners: List[Dict[str, Any]] = clients["elbv2"].describe_listeners(
        LoadBalancerArn=state["load_balancer_arn"]
    ).get("Listeners", [])
    without_acm = [
        listener["ListenerArn"]
        for listener in listeners
        if not any(is_acm_certificate(cert.get("CertificateArn", "")) for cert in listener.get("Certificates", []))
    ]
    return {
        "compliant": bool(listeners) and not without_acm,
        "evidence": {"load_balancer_arn": state["load_balancer_arn"], "listeners_without_acm": len(without_acm)},
    }
