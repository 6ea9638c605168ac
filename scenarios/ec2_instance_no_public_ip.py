"""ec2-instance-no-public-ip - instance launched with a public IPv4 address."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_security_group, default_vpc_id, run_instance, vpc_subnet_ids
from configdrill.settings import Settings

META = {
    "rule": "ec2-instance-no-public-ip",
    "title": "EC2 instance has a public IP address",
    "service": "ec2",
    "resource_type": "AWS::EC2::Instance",
    "required_env": [],
    "hold_seconds": 30,
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    vpc_id = default_vpc_id(settings, clients)
    subnet_id = vpc_subnet_ids(settings, clients, vpc_id)[0]
    group_id = create_security_group(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="public-ip-instance",
        description="Security group for public IP instance",
        vpc_id=vpc_id,
    )
    instance = run_instance(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="public-ip-instance",
        NetworkInterfaces=[
            {
                "DeviceIndex": 0,
                "SubnetId": subnet_id,
                "Groups": [group_id],
                "AssociatePublicIpAddress": True,
            }
        ],
    )
    return {"instance_id": instance["InstanceId"], "public_ip": instance.get("PublicIpAddress")}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    instance = clients["ec2"].describe_instances(InstanceIds=[state["instance_id"]])["Reservations"][0]["Instances"][0]
    public_ip = instance.get("PublicIpAddress")
    return {"compliant": not public_ip, "evidence": {"instance_id": state["instance_id"], "public_ip": public_ip}}
