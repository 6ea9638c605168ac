"""sagemaker-notebook-no-direct-internet-access - notebook with direct internet access."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import wait_for_state, wait_until_gone
from configdrill.provision import create_role, retry_until_accepted
from configdrill.settings import Settings

META = {
    "rule": "sagemaker-notebook-no-direct-internet-access",
    "title": "SageMaker notebook has direct internet access",
    "service": "sagemaker",
    "resource_type": "AWS::SageMaker::NotebookInstance",
    "required_env": [],
}

SAGEMAKER_POLICY_ARN = "arn:aws:iam::aws:policy/AmazonSageMakerFullAccess"
# the message SageMaker returns while a new execution role is still propagating
ROLE_NOT_READY = r"could not assume role"


def _status(sagemaker: Any, name: str) -> Dict[str, Any]:
    return sagemaker.describe_notebook_instance(NotebookInstanceName=name)


def delete_notebook(settings: Settings, sagemaker: Any, name: str) -> None:
    """A notebook must be stopped before it can be deleted."""
    poll = settings.poll_kwargs(factor=3)
    status = wait_for_state(
        lambda: _status(sagemaker, name),
        target={"InService", "Stopped", "Failed"},
        status_of=lambda r: r["NotebookInstanceStatus"],
        label=f"notebook {name}",
        **poll,
    )["NotebookInstanceStatus"]
    if status == "InService":
        sagemaker.stop_notebook_instance(NotebookInstanceName=name)
        wait_for_state(
            lambda: _status(sagemaker, name),
            target={"Stopped", "Failed"},
            status_of=lambda r: r["NotebookInstanceStatus"],
            label=f"notebook {name} stop",
            **poll,
        )
    sagemaker.delete_notebook_instance(NotebookInstanceName=name)
    wait_until_gone(
        lambda: _status(sagemaker, name),
        gone_codes={"ValidationException"},
        label=f"notebook {name}",
        **poll,
    )


def create_execution_role(settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str) -> str:
    role = create_role(
        settings,
        clients,
        ledger,
        rule=rule,
        prefix="sagemaker-role",
        service="sagemaker.amazonaws.com",
        managed_policy_arns=[SAGEMAKER_POLICY_ARN],
    )
    return role["Arn"]


def create_notebook(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str, **extra: Any
) -> str:
    sagemaker = clients["sagemaker"]
    role_arn = create_execution_role(settings, clients, ledger, rule=rule)
    name = unique_name(prefix, max_length=63)
    notebook = retry_until_accepted(
        lambda: sagemaker.create_notebook_instance(
            NotebookInstanceName=name,
            InstanceType="ml.t3.medium",
            RoleArn=role_arn,
            Tags=tag_list(drill_tags(settings, rule)),
            **extra,
        ),
        settings,
        codes={"ValidationException"},
        message_pattern=ROLE_NOT_READY,
        label=f"notebook {name}",
    )
    ledger.track(
        "sagemaker:notebook-instance",
        name,
        lambda: delete_notebook(settings, sagemaker, name),
        arn=notebook.get("NotebookInstanceArn"),
    )
    return name


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    name = create_notebook(
        settings, clients, ledger, rule=META["rule"], prefix="internet-notebook", DirectInternetAccess="Enabled"
    )
    return {"notebook": name}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    access = _status(clients["sagemaker"], state["notebook"]).get("DirectInternetAccess")
    return {"compliant": access == "Disabled", "evidence": {"notebook": state["notebook"], "direct_internet": access}}
