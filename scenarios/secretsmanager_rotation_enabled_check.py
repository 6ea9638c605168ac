"""secretsmanager-rotation-enabled-check - secret with no rotation schedule."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.secretsmanager_using_cmk import create_secret

META = {
    "rule": "secretsmanager-rotation-enabled-check",
    "title": "Secret rotation disabled",
    "service": "secretsmanager",
    "resource_type": "AWS::SecretsManager::Secret",
    "required_env": [],
}

ROTATION_DAYS = 30


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    secret = create_secret(settings, clients, ledger, rule=META["rule"], prefix="unrotated-secret")
    state: Dict[str, Any] = {"secret_arn": secret["ARN"]}
    if settings.create_compliant_example and settings.rotation_lambda_arn:
        rotated = create_secret(settings, clients, ledger, rule=META["rule"], prefix="rotated-secret")
        clients["secretsmanager"].rotate_secret(
            SecretId=rotated["ARN"],
            RotationLambdaARN=settings.rotation_lambda_arn,
            RotationRules={"AutomaticallyAfterDays": ROTATION_DAYS},
            RotateImmediately=False,
        )
        state["compliant_secret_arn"] = rotated["ARN"]
    return state


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    enabled = bool(clients["secretsmanager"].describe_secret(SecretId=state["secret_arn"]).get("RotationEnabled"))
    return {"compliant": enabled, "evidence": {"secret_arn": state["secret_arn"], "rotation_enabled": enabled}}
