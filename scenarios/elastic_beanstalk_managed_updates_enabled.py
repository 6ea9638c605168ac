"""elastic-beanstalk-managed-updates-enabled - environment with managed platform updates switched off."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.beanstalk_enhanced_health_reporting_enabled import (
    create_environment,
    describe_environment,
    option,
    option_value,
)

META = {
    "rule": "elastic-beanstalk-managed-updates-enabled",
    "title": "Elastic Beanstalk managed updates disabled",
    "service": "elasticbeanstalk",
    "resource_type": "AWS::ElasticBeanstalk::Environment",
    "required_env": [],
    "hold_seconds": 30,
}

MANAGED_ACTIONS_NAMESPACE = "aws:elasticbeanstalk:managedactions"


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    environment = create_environment(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="unmanaged-env",
        options=[option(MANAGED_ACTIONS_NAMESPACE, "ManagedActionsEnabled", "false")],
    )
    return {"environment_id": environment["EnvironmentId"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    beanstalk = clients["elasticbeanstalk"]
    environment = describe_environment(beanstalk, state["environment_id"])
    enabled = option_value(beanstalk, environment, MANAGED_ACTIONS_NAMESPACE, "ManagedActionsEnabled")
    return {
        "compliant": enabled.lower() == "true",
        "evidence": {"environment_id": state["environment_id"], "managed_actions_enabled": enabled},
    }
