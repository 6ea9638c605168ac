"""elb-acm-certificate-required - Classic Load Balancer without an ACM certificate."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.elb_tls_https_listeners_only import create_classic_load_balancer, describe_classic, listeners_of

META = {
    "rule": "elb-acm-certificate-required",
    "title": "Classic Load Balancer does not use an ACM certificate",
    "service": "elb",
    "resource_type": "AWS::ElasticLoadBalancing::LoadBalancer",
    "required_env": [],
}


def is_acm_certificate(certificate_id: str) -> bool:
    return certificate_id.startswith("arn:") and ":acm:" in certificate_id


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    name = create_classic_load_balancer(settings, clients, ledger, rule=META["rule"], prefix="no-acm-clb")
    return {"load_balancer": name}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    listeners = listeners_of(describe_classic(clients["elb"], state["load_balancer"]))
    certificates = [listener["SSLCertificateId"] for listener in listeners if listener.get("SSLCertificateId")]
    uses_acm = any(is_acm_certificate(certificate) for certificate in certificates)
    return {
        "compliant": uses_acm,
        "evidence": {"load_balancer": state["load_balancer"], "certificates": len(certificates), "acm": uses_acm},
    }
