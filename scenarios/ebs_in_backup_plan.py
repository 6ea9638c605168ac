"""ebs-in-backup-plan - volume that no AWS Backup plan selects."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.clients import resolve_account_id
from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.dynamodb_in_backup_plan import backup_plan_verdict
from scenarios.encrypted_volumes import create_volume

META = {
    "rule": "ebs-in-backup-plan",
    "title": "EBS volume not in a backup plan",
    "service": "ec2",
    "resource_type": "AWS::EC2::Volume",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    volume = create_volume(settings, clients, ledger, rule=META["rule"], prefix="unprotected-volume")
    account_id = resolve_account_id(settings, clients)
    arn = f"arn:aws:ec2:{settings.aws_region}:{account_id}:volume/{volume['VolumeId']}"
    return {"volume_id": volume["VolumeId"], "volume_arn": arn}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    return backup_plan_verdict(clients, state["volume_arn"], volume_id=state["volume_id"])
