"""elasticsearch-encrypted-at-rest - Elasticsearch domain without encryption at rest."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.elasticsearch_in_vpc_only import create_es_domain
from scenarios.opensearch_in_vpc_only import describe_domain

META = {
    "rule": "elasticsearch-encrypted-at-rest",
    "title": "Elasticsearch encryption at rest disabled",
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
        prefix="drill-es-plain",
        EncryptionAtRestOptions={"Enabled": False},
    )
    return {"domain": status["DomainName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    options = describe_domain(clients["opensearch"], state["domain"]).get("EncryptionAtRestOptions") or {}
    enabled = bool(options.get("Enabled"))
    return {"compliant": enabled, "evidence": {"domain": state["domain"], "encryption_at_rest": enabled}}
