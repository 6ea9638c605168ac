"""efs-encrypted-check - file system created without encryption at rest."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import wait_for_state, wait_until_gone
from configdrill.settings import Settings

META = {
    "rule": "efs-encrypted-check",
    "title": "EFS file system not encrypted",
    "service": "efs",
    "resource_type": "AWS::EFS::FileSystem",
    "required_env": [],
}


def delete_file_system(settings: Settings, efs: Any, file_system_id: str) -> None:
    efs.delete_file_system(FileSystemId=file_system_id)
    wait_until_gone(
        lambda: efs.describe_file_systems(FileSystemId=file_system_id),
        gone_codes={"FileSystemNotFound"},
        status_of=lambda r: r["FileSystems"][0]["LifeCycleState"],
        gone_states={"deleted"},
        label=f"file system {file_system_id}",
        **settings.poll_kwargs(),
    )


def create_file_system(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str, **extra: Any
) -> Dict[str, Any]:
    efs = clients["efs"]
    name = unique_name(prefix)
    file_system = efs.create_file_system(
        CreationToken=name,
        PerformanceMode="generalPurpose",
        Tags=tag_list(drill_tags(settings, rule, name)),
        **extra,
    )
    file_system_id = file_system["FileSystemId"]
    ledger.track(
        "efs:file-system",
        file_system_id,
        lambda: delete_file_system(settings, efs, file_system_id),
        arn=file_system.get("FileSystemArn"),
        note=name,
    )
    wait_for_state(
        lambda: efs.describe_file_systems(FileSystemId=file_system_id),
        target="available",
        status_of=lambda r: r["FileSystems"][0]["LifeCycleState"],
        failure_states={"error", "deleted"},
        label=f"file system {file_system_id}",
        **settings.poll_kwargs(),
    )
    return file_system


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    file_system = create_file_system(
        settings, clients, ledger, rule=META["rule"], prefix="unencrypted-efs", Encrypted=False
    )
    return {"file_system_id": file_system["FileSystemId"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    file_system = clients["efs"].describe_file_systems(FileSystemId=state["file_system_id"])["FileSystems"][0]
    encrypted = bool(file_system.get("Encrypted"))
    return {"compliant": encrypted, "evidence": {"file_system_id": state["file_system_id"], "encrypted": encrypted}}
