"""
secretsmanager-secret-unused - secret that nothing ever reads.

The rule counts days since the secret was last accessed, or since it was
created when it never has been. A new secret is COMPLIANT until it passes the
90 day threshold, which requires KEEP_RESOURCES.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.access_keys_rotated import key_age_days
from scenarios.secretsmanager_using_cmk import create_secret

META = {
    "rule": "secretsmanager-secret-unused",
    "title": "Secret not accessed recently",
    "service": "secretsmanager",
    "resource_type": "AWS::SecretsManager::Secret",
    "required_env": [],
}

MAX_UNUSED_DAYS = 90


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    secret = create_secret(settings, clients, ledger, rule=META["rule"], prefix="unused-secret")
    return {"secret_arn": secret["ARN"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    secret = clients["secretsmanager"].describe_secret(SecretId=state["secret_arn"])
    accessed = secret.get("LastAccessedDate")
    idle_days = key_age_days(accessed or secret.get("CreatedDate"))
    return {
        "compliant": idle_days is not None and idle_days <= MAX_UNUSED_DAYS,
        "evidence": {
            "secret_arn": state["secret_arn"],
            "ever_accessed": accessed is not None,
            "idle_days": idle_days,
            "max_unused_days": MAX_UNUSED_DAYS,
        },
    }
