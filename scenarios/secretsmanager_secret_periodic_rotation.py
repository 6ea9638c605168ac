"""
secretsmanager-secret-periodic-rotation - secret that is never rotated.

The rule counts days since the last rotation, or since creation for a
secret that was never rotated. A new secret is COMPLIANT until it passes the
90 day threshold, which requires KEEP_RESOURCES.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.access_keys_rotated import key_age_days
from scenarios.secretsmanager_using_cmk import create_secret

META = {
    "rule": "secretsmanager-secret-periodic-rotation",
    "title": "Secret not rotated recently",
    "service": "secretsmanager",
    "resource_type": "AWS::SecretsManager::Secret",
    "required_env": [],
}

MAX_DAYS_SINCE_ROTATION = 90


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    secret = create_secret(settings, clients, ledger, rule=META["rule"], prefix="never-rotated-secret")
    return {"secret_arn": secret["ARN"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    secret = clients["secretsmanager"].describe_secret(SecretId=state["secret_arn"])
    rotated = secret.get("LastRotatedDate")
    age = key_age_days(rotated or secret.get("CreatedDate"))
    return {
        "compliant": age is not None and age <= MAX_DAYS_SINCE_ROTATION,
        "evidence": {
            "secret_arn": state["secret_arn"],
            "ever_rotated": rotated is not None,
            "days_since_rotation": age,
            "max_days": MAX_DAYS_SINCE_ROTATION,
        },
    }
