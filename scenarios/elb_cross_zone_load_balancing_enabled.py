"""elb-cross-zone-load-balancing-enabled - Classic Load Balancer confined to each zone."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.elb_tls_https_listeners_only import create_classic_load_balancer

META = {
    "rule": "elb-cross-zone-load-balancing-enabled",
    "title": "Classic Load Balancer cross-zone balancing disabled",
    "service": "elb",
    "resource_type": "AWS::ElasticLoadBalancing::LoadBalancer",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    name = create_classic_load_balancer(settings, clients, ledger, rule=META["rule"], prefix="zonal-clb")
    clients["elb"].modify_load_balancer_attributes(
        LoadBalancerName=name,
        LoadBalancerAttributes={"CrossZoneLoadBalancing": {"Enabled": False}},
    )
    return {"load_balancer": name}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    attributes = clients["elb"].describe_load_balancer_attributes(LoadBalancerName=state["load_balancer"])[
        "LoadBalancerAttributes"
    ]
    enabled = bool(attributes.get("CrossZoneLoadBalancing", {}).get("Enabled"))
    return {"compliant": enabled, "evidence": {"load_balancer": state["load_balancer"], "cross_zone": enabled}}
