"""elasticsearch-logs-to-cloudwatch - Elasticsearch domain not publishing error logs."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.elasticsearch_in_vpc_only import create_es_domain
from scenarios.opensearch_in_vpc_only import describe_domain
from scenarios.opensearch_logs_to_cloudwatch import error_logs_enabled

META = {
    "rule": "elasticsearch-logs-to-cloudwatch",
    "title": "Elasticsearch error logs not sent to CloudWatch",
    "service": "elasticsearch",
    "resource_type": "AWS::Elasticsearch::Domain",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    status = create_es_domain(settings, clients, ledger, rule=META["rule"], prefix="drill-es-unlogged")
    return {"domain": status["DomainName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    enabled = error_logs_enabled(describe_domain(clients["opensearch"], state["domain"]))
    return {"compliant": enabled, "evidence": {"domain": state["domain"], "error_logs_published": enabled}}
