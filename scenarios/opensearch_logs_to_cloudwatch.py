"""opensearch-logs-to-cloudwatch - domain not publishing error logs."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.opensearch_in_vpc_only import create_domain, describe_domain

META = {
    "rule": "opensearch-logs-to-cloudwatch",
    "title": "OpenSearch error logs not sent to CloudWatch",
    "service": "opensearch",
    "resource_type": "AWS::OpenSearch::Domain",
    "required_env": [],
}

ERROR_LOG = "ES_APPLICATION_LOGS"


def error_logs_enabled(domain: Dict[str, Any]) -> bool:
    option = (domain.get("LogPublishingOptions") or {}).get(ERROR_LOG) or {}
    return bool(option.get("Enabled") and option.get("CloudWatchLogsLogGroupArn"))


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    status = create_domain(settings, clients, ledger, rule=META["rule"], prefix="drill-unlogged")
    return {"domain": status["DomainName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    enabled = error_logs_enabled(describe_domain(clients["opensearch"], state["domain"]))
    return {"compliant": enabled, "evidence": {"domain": state["domain"], "error_logs_published": enabled}}
