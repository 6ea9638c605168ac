"""kms-cmk-not-scheduled-for-deletion - aliased key put into PendingDeletion."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import unique_name
from configdrill.provision import create_kms_key
from configdrill.settings import Settings

META = {
    "rule": "kms-cmk-not-scheduled-for-deletion",
    "title": "KMS key scheduled for deletion",
    "service": "kms",
    "resource_type": "AWS::KMS::Key",
    "required_env": [],
}

PENDING_WINDOW_DAYS = 7


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    kms = clients["kms"]
    key = create_kms_key(settings, clients, ledger, rule=META["rule"], description="config-drill key pending deletion")
    alias = f"alias/{unique_name('drill-pending-deletion', max_length=250)}"
    kms.create_alias(AliasName=alias, TargetKeyId=key["KeyId"])
    ledger.track("kms:alias", alias, lambda: kms.delete_alias(AliasName=alias))
    kms.schedule_key_deletion(KeyId=key["KeyId"], PendingWindowInDays=PENDING_WINDOW_DAYS)
    return {"key_id": key["KeyId"], "alias": alias}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    metadata = clients["kms"].describe_key(KeyId=state["key_id"])["KeyMetadata"]
    key_state = metadata.get("KeyState")
    deletion = metadata.get("DeletionDate")
    return {
        "compliant": key_state != "PendingDeletion",
        "evidence": {
            "key_id": state["key_id"],
            "key_state": key_state,
            "deletion_date": deletion.isoformat() if hasattr(deletion, "isoformat") else deletion,
        },
    }
