"""autoscaling-launch-config-public-ip-disabled - launch template assigning public IPs."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, unique_name
from configdrill.polling import wait_until_gone
from configdrill.provision import (
    create_security_group,
    default_vpc_id,
    ec2_tag_spec,
    latest_amazon_linux_ami,
    vpc_subnet_ids,
)
from configdrill.settings import Settings

META = {
    "rule": "autoscaling-launch-config-public-ip-disabled",
    "title": "Auto Scaling launch template assigns public IPs",
    "service": "autoscaling",
    "resource_type": "AWS::AutoScaling::AutoScalingGroup",
    "required_env": [],
}


def delete_group(settings: Settings, autoscaling: Any, name: str) -> None:
    autoscaling.delete_auto_scaling_group(AutoScalingGroupName=name, ForceDelete=True)
    wait_until_gone(
        lambda: autoscaling.describe_auto_scaling_groups(AutoScalingGroupNames=[name]),
        gone_codes=(),
        status_of=lambda r: len(r.get("AutoScalingGroups", [])),
        gone_states={0},
        label=f"auto scaling group {name}",
        **settings.poll_kwargs(),
    )


def create_launch_template(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str, **data: Any
) -> str:
    ec2 = clients["ec2"]
    name = unique_name(prefix)
    data.setdefault("ImageId", latest_amazon_linux_ami(settings, clients))
    data.setdefault("InstanceType", "t2.micro")
    template_id = ec2.create_launch_template(
        LaunchTemplateName=name,
        LaunchTemplateData=data,
        TagSpecifications=[ec2_tag_spec(settings, rule, "launch-template", name)],
    )["LaunchTemplate"]["LaunchTemplateId"]
    ledger.track(
        "ec2:launch-template", template_id, lambda: ec2.delete_launch_template(LaunchTemplateId=template_id), note=name
    )
    return template_id


def create_auto_scaling_group(
    settings: Settings,
    clients: Dict[str, Any],
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    template_id: str,
    vpc_id: str,
    **extra: Any,
) -> str:
    """Empty group (zero capacity) so no instances are launched."""
    autoscaling = clients["autoscaling"]
    name = unique_name(prefix, max_length=255)
    autoscaling.create_auto_scaling_group(
        AutoScalingGroupName=name,
        LaunchTemplate={"LaunchTemplateId": template_id, "Version": "$Latest"},
        MinSize=0,
        MaxSize=0,
        DesiredCapacity=0,
        VPCZoneIdentifier=",".join(vpc_subnet_ids(settings, clients, vpc_id)),
        Tags=[
            {"Key": key, "Value": value, "PropagateAtLaunch": True}
            for key, value in drill_tags(settings, rule, name).items()
        ],
        **extra,
    )
    ledger.track("autoscaling:group", name, lambda: delete_group(settings, autoscaling, name))
    return name


def describe_group(autoscaling: Any, name: str) -> Dict[str, Any]:
    return autoscaling.describe_auto_scaling_groups(AutoScalingGroupNames=[name])["AutoScalingGroups"][0]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    vpc_id = default_vpc_id(settings, clients)
    group_id = create_security_group(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="public-asg-sg",
        description="config-drill auto scaling group",
        vpc_id=vpc_id,
    )
    template_id = create_launch_template(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="public-ip-template",
        NetworkInterfaces=[{"DeviceIndex": 0, "AssociatePublicIpAddress": True, "Groups": [group_id]}],
    )
    group_name = create_auto_scaling_group(
        settings, clients, ledger, rule=META["rule"], prefix="public-ip-asg", template_id=template_id, vpc_id=vpc_id
    )
    return {"auto_scaling_group": group_name, "launch_template_id": template_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    versions = clients["ec2"].describe_launch_template_versions(
        LaunchTemplateId=state["launch_template_id"], Versions=["$Latest"]
    ).get("LaunchTemplateVersions", [])
    interfaces = versions[0]["LaunchTemplateData"].get("NetworkInterfaces", []) if versions else []
    public = any(interface.get("AssociatePublicIpAddress") for interface in interfaces)
    return {
        "compliant": not public,
        "evidence": {"auto_scaling_group": state["auto_scaling_group"], "associate_public_ip": public},
    }
