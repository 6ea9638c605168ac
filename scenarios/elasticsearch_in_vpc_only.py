"""
elasticsearch-in-vpc-only - legacy Elasticsearch domain with a public endpoint.

The Elasticsearch rules evaluate domains running the Elasticsearch engine, so
these scenarios create a 7.10 domain through the OpenSearch API.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.opensearch_in_vpc_only import create_domain, describe_domain

META = {
    "rule": "elasticsearch-in-vpc-only",
    "title": "Elasticsearch domain not in a VPC",
    "service": "elasticsearch",
    "resource_type": "AWS::Elasticsearch::Domain",
    "required_env": [],
}

ELASTICSEARCH_VERSION = "Elasticsearch_7.10"


def create_es_domain(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str, **extra: Any
) -> Dict[str, Any]:
    return create_domain(
        settings, clients, ledger, rule=rule, prefix=prefix, EngineVersion=ELASTICSEARCH_VERSION, **extra
    )


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    status = create_es_domain(settings, clients, ledger, rule=META["rule"], prefix="drill-es-public")
    return {"domain": status["DomainName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    vpc_options = describe_domain(clients["opensearch"], state["domain"]).get("VPCOptions") or {}
    in_vpc = bool(vpc_options.get("VPCId"))
    return {"compliant": in_vpc, "evidence": {"domain": state["domain"], "vpc_id": vpc_options.get("VPCId")}}
