"""opensearch-data-node-fault-tolerance - single data node without zone awareness."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.opensearch_in_vpc_only import create_domain, describe_domain

META = {
    "rule": "opensearch-data-node-fault-tolerance",
    "title": "OpenSearch domain has no data node redundancy",
    "service": "opensearch",
    "resource_type": "AWS::OpenSearch::Domain",
    "required_env": [],
}

MIN_DATA_NODES = 3


def fault_tolerant(cluster: Dict[str, Any]) -> bool:
    return cluster.get("InstanceCount", 0) >= MIN_DATA_NODES and bool(cluster.get("ZoneAwarenessEnabled"))


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    status = create_domain(settings, clients, ledger, rule=META["rule"], prefix="drill-one-node")
    return {"domain": status["DomainName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    cluster = describe_domain(clients["opensearch"], state["domain"]).get("ClusterConfig") or {}
    return {
        "compliant": fault_tolerant(cluster),
        "evidence": {
            "domain": state["domain"],
            "instance_count": cluster.get("InstanceCount"),
            "zone_awareness": bool(cluster.get("ZoneAwarenessEnabled")),
        },
    }
