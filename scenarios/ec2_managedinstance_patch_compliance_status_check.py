"""
ec2-managedinstance-patch-compliance-status-check - managed instance missing approved patches.

A custom baseline approves every security patch on release and is registered
for a dedicated patch group. A scan association then reports the patches the
instance image lacks. An image that happens to be fully patched reports
COMPLIANT.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import wait_for_state
from configdrill.settings import Settings

from scenarios.ec2_managedinstance_association_compliance_status_check import (
    compliance_statuses,
    create_association,
    launch_managed_instance,
)

META = {
    "rule": "ec2-managedinstance-patch-compliance-status-check",
    "title": "Managed instance is missing patches",
    "service": "ssm",
    "resource_type": "AWS::SSM::PatchCompliance",
    "required_env": [],
    "hold_seconds": 60,
}

PATCH_GROUP_TAG = "Patch Group"


def create_patch_baseline(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, patch_group: str
) -> str:
    ssm = clients["ssm"]
    name = unique_name("drill-security-baseline")
    baseline_id = ssm.create_patch_baseline(
        Name=name,
        OperatingSystem="AMAZON_LINUX_2",
        ApprovalRules={
            "PatchRules": [
                {
                    "PatchFilterGroup": {"PatchFilters": [{"Key": "CLASSIFICATION", "Values": ["Security"]}]},
                    "ApproveAfterDays": 0,
                }
            ]
        },
        Description="config-drill baseline approving security patches on release",
        Tags=tag_list(drill_tags(settings, META["rule"])),
    )["BaselineId"]

    def _release() -> None:
        ssm.deregister_patch_baseline_for_patch_group(BaselineId=baseline_id, PatchGroup=patch_group)
        ssm.delete_patch_baseline(BaselineId=baseline_id)

    ledger.track("ssm:patchbaseline", baseline_id, _release, note=name)
    ssm.register_patch_baseline_for_patch_group(BaselineId=baseline_id, PatchGroup=patch_group)
    return baseline_id


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    patch_group = unique_name("drill-patch-group")
    baseline_id = create_patch_baseline(settings, clients, ledger, patch_group=patch_group)
    instance_id = launch_managed_instance(settings, clients, ledger, rule=META["rule"], prefix="unpatched-instance")
    clients["ec2"].create_tags(Resources=[instance_id], Tags=[{"Key": PATCH_GROUP_TAG, "Value": patch_group}])
    association_id = create_association(
        settings,
        clients,
        ledger,
        prefix="patch-scan",
        instance_id=instance_id,
        Name="AWS-RunPatchBaseline",
        Parameters={"Operation": ["Scan"]},
    )
    wait_for_state(
        lambda: clients["ssm"].describe_instance_patch_states(InstanceIds=[instance_id]),
        target=True,
        status_of=lambda r: bool(r.get("InstancePatchStates")),
        label=f"patch scan of {instance_id}",
        **settings.poll_kwargs(factor=4),
    )
    return {"instance_id": instance_id, "baseline_id": baseline_id, "association_id": association_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    statuses = compliance_statuses(clients["ssm"], state["instance_id"], "Patch")
    patch_state = clients["ssm"].describe_instance_patch_states(InstanceIds=[state["instance_id"]])
    missing = sum(item.get("MissingCount", 0) for item in patch_state.get("InstancePatchStates", []))
    return {
        "compliant": bool(statuses) and all(status == "COMPLIANT" for status in statuses),
        "evidence": {"instance_id": state["instance_id"], "missing_patches": missing, "patch_statuses": statuses},
    }
