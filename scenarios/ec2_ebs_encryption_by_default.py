"""ec2-ebs-encryption-by-default - account-level EBS default encryption switched off."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

META = {
    "rule": "ec2-ebs-encryption-by-default",
    "title": "EBS encryption by default is disabled",
    "service": "ec2",
    "resource_type": "AWS::::Account",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    ec2 = clients["ec2"]
    enabled = ec2.get_ebs_encryption_by_default()["EbsEncryptionByDefault"]
    if enabled:
        ledger.restore(
            "ec2:ebs-encryption-by-default",
            settings.aws_region,
            ec2.enable_ebs_encryption_by_default,
        )
        ec2.disable_ebs_encryption_by_default()
    return {"originally_enabled": enabled}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    enabled = clients["ec2"].get_ebs_encryption_by_default()["EbsEncryptionByDefault"]
    return {
        "compliant": bool(enabled),
        "evidence": {"enabled": enabled, "originally_enabled": state["originally_enabled"]},
    }
