"""ssm-document-not-public - command document shared with every account."""

from __future__ import annotations

import json
from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import wait_for_state
from configdrill.provision import ignore_missing
from configdrill.settings import Settings

META = {
    "rule": "ssm-document-not-public",
    "title": "SSM document shared publicly",
    "service": "ssm",
    "resource_type": "AWS::SSM::Document",
    "required_env": [],
}

DOCUMENT_CONTENT = {
    "schemaVersion": "2.2",
    "description": "config-drill public document",
    "mainSteps": [
        {
            "action": "aws:runShellScript",
            "name": "echo",
            "inputs": {"runCommand": ["echo config-drill"]},
        }
    ],
}


def delete_document(ssm: Any, name: str) -> None:
    ignore_missing(
        ssm.modify_document_permission, Name=name, PermissionType="Share", AccountIdsToRemove=["All"]
    )
    ssm.delete_document(Name=name)


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    ssm = clients["ssm"]
    name = unique_name("public-document")
    ssm.create_document(
        Name=name,
        Content=json.dumps(DOCUMENT_CONTENT),
        DocumentType="Command",
        DocumentFormat="JSON",
        Tags=tag_list(drill_tags(settings, META["rule"])),
    )
    ledger.track("ssm:document", name, lambda: delete_document(ssm, name))
    wait_for_state(
        lambda: ssm.describe_document(Name=name),
        target="Active",
        status_of=lambda r: r["Document"]["Status"],
        failure_states={"Failed"},
        label=f"document {name}",
        **settings.poll_kwargs(),
    )
    ssm.modify_document_permission(Name=name, PermissionType="Share", AccountIdsToAdd=["All"])
    return {"document": name}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    accounts = clients["ssm"].describe_document_permission(Name=state["document"], PermissionType="Share").get(
        "AccountIds", []
    )
    public = any(account.lower() == "all" for account in accounts)
    return {"compliant": not public, "evidence": {"document": state["document"], "shared_with": accounts}}
