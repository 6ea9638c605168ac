"""
ec2-managedinstance-association-compliance-status-check - managed instance with a failing association.

The instance gets the SSM core policy through an instance profile, registers
with Systems Manager and is then targeted by a shell-script association whose
commands cannot succeed. Registration and the first association run take a
few minutes.
"""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.naming import unique_name
from configdrill.polling import wait_for_state
from configdrill.provision import create_instance_profile, run_instance
from configdrill.settings import Settings

from scenarios.ec2_instance_managed_by_systems_manager import managed_instance_info

META = {
    "rule": "ec2-managedinstance-association-compliance-status-check",
    "title": "Systems Manager association failing on a managed instance",
    "service": "ssm",
    "resource_type": "AWS::SSM::AssociationCompliance",
    "required_env": [],
    "hold_seconds": 60,
}

SSM_CORE_POLICY_ARN = "arn:aws:iam::aws:policy/AmazonSSMManagedInstanceCore"
FAILING_COMMANDS = ["exit 1"]


def launch_managed_instance(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str, **launch: Any
) -> str:
    """Launch an instance with the SSM core role and wait until Systems Manager reports it online."""
    profile = create_instance_profile(
        settings, clients, ledger, rule=rule, prefix=f"{prefix}-profile", managed_policy_arns=[SSM_CORE_POLICY_ARN]
    )
    instance = run_instance(
        settings,
        clients,
        ledger,
        rule=rule,
        prefix=prefix,
        IamInstanceProfile={"Arn": profile["Arn"]},
        **launch,
    )
    instance_id = instance["InstanceId"]
    wait_for_state(
        lambda: managed_instance_info(clients["ssm"], instance_id),
        target="Online",
        status_of=lambda info: info[0].get("PingStatus") if info else None,
        label=f"ssm registration of {instance_id}",
        **settings.poll_kwargs(factor=4),
    )
    return instance_id


def create_association(
    settings: Settings,
    clients: Dict[str, Any],
    ledger: ResourceLedger,
    *,
    prefix: str,
    instance_id: str,
    **request: Any,
) -> str:
    ssm = clients["ssm"]
    name = unique_name(prefix)
    association_id = ssm.create_association(
        AssociationName=name,
        Targets=[{"Key": "InstanceIds", "Values": [instance_id]}],
        **request,
    )["AssociationDescription"]["AssociationId"]
    ledger.track(
        "ssm:association", association_id, lambda: ssm.delete_association(AssociationId=association_id), note=name
    )
    return association_id


def compliance_statuses(ssm: Any, instance_id: str, compliance_type: str) -> List[str]:
    items = ssm.list_compliance_items(
        ResourceIds=[instance_id],
        ResourceTypes=["ManagedInstance"],
        Filters=[{"Key": "ComplianceType", "Values": [compliance_type], "Type": "EQUAL"}],
    ).get("ComplianceItems", [])
    return [item.get("Status") for item in items]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    instance_id = launch_managed_instance(settings, clients, ledger, rule=META["rule"], prefix="failing-association")
    association_id = create_association(
        settings,
        clients,
        ledger,
        prefix="failing-association",
        instance_id=instance_id,
        Name="AWS-RunShellScript",
        Parameters={"commands": FAILING_COMMANDS},
        ComplianceSeverity="HIGH",
    )
    wait_for_state(
        lambda: clients["ssm"].describe_association(AssociationId=association_id),
        target={"Failed", "Success"},
        status_of=lambda r: r["AssociationDescription"].get("Overview", {}).get("Status"),
        label=f"association {association_id}",
        **settings.poll_kwargs(factor=4),
    )
    return {"instance_id": instance_id, "association_id": association_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    statuses = compliance_statuses(clients["ssm"], state["instance_id"], "Association")
    return {
        "compliant": bool(statuses) and all(status == "COMPLIANT" for status in statuses),
        "evidence": {"instance_id": state["instance_id"], "association_statuses": statuses},
    }
