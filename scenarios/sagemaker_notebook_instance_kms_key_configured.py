"""sagemaker-notebook-instance-kms-key-configured - notebook volume encrypted with the AWS managed key."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.sagemaker_notebook_no_direct_internet_access import create_notebook

META = {
    "rule": "sagemaker-notebook-instance-kms-key-configured",
    "title": "SageMaker notebook has no customer KMS key",
    "service": "sagemaker",
    "resource_type": "AWS::SageMaker::NotebookInstance",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    name = create_notebook(settings, clients, ledger, rule=META["rule"], prefix="default-key-notebook")
    return {"notebook": name}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    key_id = clients["sagemaker"].describe_notebook_instance(NotebookInstanceName=state["notebook"]).get("KmsKeyId")
    return {"compliant": bool(key_id), "evidence": {"notebook": state["notebook"], "kms_key_id": key_id}}
