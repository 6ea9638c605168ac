"""
elb-tls-https-listeners-only - Classic Load Balancer with a plain HTTP listener.

The Classic Load Balancer helpers here are shared by the other Classic rules.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.provision import default_vpc_id, vpc_subnet_ids
from configdrill.settings import Settings

META = {
    "rule": "elb-tls-https-listeners-only",
    "title": "Classic Load Balancer has a non-TLS listener",
    "service": "elb",
    "resource_type": "AWS::ElasticLoadBalancing::LoadBalancer",
    "required_env": [],
}

SECURE_PROTOCOLS = {"HTTPS", "SSL"}
HTTP_LISTENER = {"Protocol": "HTTP", "LoadBalancerPort": 80, "InstanceProtocol": "HTTP", "InstancePort": 80}


def create_classic_load_balancer(
    settings: Settings,
    clients: Dict[str, Any],
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    listeners: Sequence[Dict[str, Any]] = (HTTP_LISTENER,),
) -> str:
    elb = clients["elb"]
    vpc_id = default_vpc_id(settings, clients)
    name = unique_name(prefix, max_length=32)
    elb.create_load_balancer(
        LoadBalancerName=name,
        Listeners=list(listeners),
        Subnets=vpc_subnet_ids(settings, clients, vpc_id),
        Tags=tag_list(drill_tags(settings, rule, name)),
    )
    ledger.track("elb:loadbalancer", name, lambda: elb.delete_load_balancer(LoadBalancerName=name))
    return name


def describe_classic(elb: Any, name: str) -> Dict[str, Any]:
    return elb.describe_load_balancers(LoadBalancerNames=[name])["LoadBalancerDescriptions"][0]


def listeners_of(description: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [item["Listener"] for item in description.get("ListenerDescriptions", [])]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    name = create_classic_load_balancer(settings, clients, ledger, rule=META["rule"], prefix="plain-http-clb")
    return {"load_balancer": name}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    listeners = listeners_of(describe_classic(clients["elb"], state["load_balancer"]))
    insecure = [listener["Protocol"] for listener in listeners if listener["Protocol"].upper() not in SECURE_PROTOCOLS]
    return {
        "compliant": not insecure,
        "evidence": {"load_balancer": state["load_balancer"], "insecure_listener_protocols": insecure},
    }
