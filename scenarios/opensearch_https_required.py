"""opensearch-https-required - domain endpoint accepting plain HTTP."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.opensearch_in_vpc_only import create_domain, describe_domain

META = {
    "rule": "opensearch-https-required",
    "title": "OpenSearch does not enforce HTTPS",
    "service": "opensearch",
    "resource_type": "AWS::OpenSearch::Domain",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    status = create_domain(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="drill-http",
        DomainEndpointOptions={"EnforceHTTPS": False},
    )
    return {"domain": status["DomainName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    options = describe_domain(clients["opensearch"], state["domain"]).get("DomainEndpointOptions") or {}
    enforced = bool(options.get("EnforceHTTPS"))
    return {"compliant": enforced, "evidence": {"domain": state["domain"], "enforce_https": enforced}}
