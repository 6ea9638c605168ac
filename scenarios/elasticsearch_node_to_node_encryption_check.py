"""elasticsearch-node-to-node-encryption-check - Elasticsearch domain with plaintext node traffic."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.elasticsearch_in_vpc_only import create_es_domain
from scenarios.opensearch_in_vpc_only import describe_domain

META = {
    "rule": "elasticsearch-node-to-node-encryption-check",
    "title": "Elasticsearch node-to-node encryption disabled",
    "service": "elasticsearch",
    "resource_type": "AWS::Elasticsearch::Domain",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    status = create_es_domain(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="drill-es-no-n2n",
        NodeToNodeEncryptionOptions={"Enabled": False},
    )
    return {"domain": status["DomainName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    options = describe_domain(clients["opensearch"], state["domain"]).get("NodeToNodeEncryptionOptions") or {}
    enabled = bool(options.get("Enabled"))
    return {"compliant": enabled, "evidence": {"domain": state["domain"], "node_to_node_encryption": enabled}}
