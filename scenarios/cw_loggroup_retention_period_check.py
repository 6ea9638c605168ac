"""cw-loggroup-retention-period-check - log groups kept for less than a year."""

from __future__ import annotations

from typing import Any, Dict, Optional

from configdrill.ledger import ResourceLedger
from configdrill.naming import unique_name
from configdrill.provision import create_log_group
from configdrill.settings import Settings

from scenarios.cloudwatch_log_group_encrypted import describe_log_group

META = {
    "rule": "cw-loggroup-retention-period-check",
    "title": "CloudWatch log group retention below 365 days",
    "service": "logs",
    "resource_type": "AWS::Logs::LogGroup",
    "required_env": [],
}

MIN_RETENTION_DAYS = 365
# None means never expire, which the rule also flags when no retention is set
NON_COMPLIANT_RETENTION = (7, 30, 90, None)


def retention_compliant(days: Optional[int], minimum: int = MIN_RETENTION_DAYS) -> bool:
    return days is not None and days >= minimum


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    groups = []
    for days in NON_COMPLIANT_RETENTION:
        suffix = f"{days}d" if days else "unset"
        groups.append(
            create_log_group(
                settings,
                clients,
                ledger,
                rule=META["rule"],
                name=f"/config-drill/{unique_name(f'retention-{suffix}')}",
                retention_days=days,
            )
        )
    state: Dict[str, Any] = {"log_groups": groups}
    if settings.create_compliant_example:
        state["compliant_log_group"] = create_log_group(
            settings,
            clients,
            ledger,
            rule=META["rule"],
            name=f"/config-drill/{unique_name('retention-compliant')}",
            retention_days=MIN_RETENTION_DAYS,
        )
    return state


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    retention = {
        name: describe_log_group(clients["logs"], name).get("retentionInDays") for name in state["log_groups"]
    }
    return {
        "compliant": all(retention_compliant(days) for days in retention.values()),
        "evidence": {"retention_days": retention},
    }
