"""cmk-backing-key-rotation-enabled - customer managed key with rotation off."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_kms_key
from configdrill.settings import Settings

META = {
    "rule": "cmk-backing-key-rotation-enabled",
    "title": "KMS key rotation disabled",
    "service": "kms",
    "resource_type": "AWS::KMS::Key",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    key = create_kms_key(
        settings, clients, ledger, rule=META["rule"], description="config-drill key without rotation"
    )
    # new keys start with rotation off; make it explicit
    clients["kms"].disable_key_rotation(KeyId=key["KeyId"])
    return {"key_id": key["KeyId"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    enabled = clients["kms"].get_key_rotation_status(KeyId=state["key_id"]).get("KeyRotationEnabled", False)
    return {"compliant": enabled, "evidence": {"key_id": state["key_id"], "rotation_enabled": enabled}}
