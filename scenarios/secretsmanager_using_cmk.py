"""secretsmanager-using-cmk - secret encrypted with the aws/secretsmanager key."""

from __future__ import annotations

from typing import Any, Dict, Optional

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, generate_password, tag_list, unique_name
from configdrill.settings import Settings

META = {
    "rule": "secretsmanager-using-cmk",
    "title": "Secret not encrypted with a customer managed key",
    "service": "secretsmanager",
    "resource_type": "AWS::SecretsManager::Secret",
    "required_env": [],
}

DEFAULT_KEY_ALIAS = "alias/aws/secretsmanager"


def create_secret(
    settings: Settings,
    clients: Dict[str, Any],
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    kms_key_id: Optional[str] = None,
) -> Dict[str, Any]:
    secretsmanager = clients["secretsmanager"]
    name = unique_name(prefix, max_length=256)
    kwargs: Dict[str, Any] = {
        "Name": name,
        "Description": f"config-drill secret for {rule}",
        "SecretString": generate_password(24),
        "Tags": tag_list(drill_tags(settings, rule)),
    }
    if kms_key_id:
        kwargs["KmsKeyId"] = kms_key_id
    secret = secretsmanager.create_secret(**kwargs)
    arn = secret["ARN"]
    ledger.track(
        "secretsmanager:secret",
        name,
        lambda: secretsmanager.delete_secret(SecretId=arn, ForceDeleteWithoutRecovery=True),
        arn=arn,
    )
    return secret


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    secret = create_secret(settings, clients, ledger, rule=META["rule"], prefix="default-key-secret")
    return {"secret_arn": secret["ARN"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    key_id = clients["secretsmanager"].describe_secret(SecretId=state["secret_arn"]).get("KmsKeyId")
    return {
        "compliant": bool(key_id) and key_id != DEFAULT_KEY_ALIAS,
        "evidence": {"secret_arn": state["secret_arn"], "kms_key_id": key_id or DEFAULT_KEY_ALIAS},
    }
