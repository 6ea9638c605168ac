"""subnet-auto-assign-public-ip-disabled - default subnets that hand out public IPs.

Each subnet's original MapPublicIpOnLaunch value is captured and restored.
"""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

META = {
    "rule": "subnet-auto-assign-public-ip-disabled",
    "title": "Subnet auto-assigns public IP addresses",
    "service": "ec2",
    "resource_type": "AWS::EC2::Subnet",
    "required_env": [],
}


def _set_map_public_ip(ec2: Any, subnet_id: str, value: bool) -> None:
    ec2.modify_subnet_attribute(SubnetId=subnet_id, MapPublicIpOnLaunch={"Value": value})


def target_subnets(settings: Settings, ec2: Any) -> List[Dict[str, Any]]:
    if settings.subnet_ids:
        return ec2.describe_subnets(SubnetIds=list(settings.subnet_ids))["Subnets"]
    subnets = ec2.describe_subnets(Filters=[{"Name": "default-for-az", "Values": ["true"]}])["Subnets"]
    if not subnets:
        raise RuntimeError("No default subnets found; set SUBNET_IDS")
    return subnets


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    ec2 = clients["ec2"]
    changed: List[str] = []
    subnets = target_subnets(settings, ec2)
    for subnet in subnets:
        subnet_id = subnet["SubnetId"]
        if subnet.get("MapPublicIpOnLaunch"):
            continue
        ledger.restore(
            "ec2:subnet-map-public-ip",
            subnet_id,
            lambda subnet_id=subnet_id: _set_map_public_ip(ec2, subnet_id, False),
        )
        _set_map_public_ip(ec2, subnet_id, True)
        changed.append(subnet_id)
    return {"subnet_ids": [subnet["SubnetId"] for subnet in subnets], "changed": changed}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    subnets = clients["ec2"].describe_subnets(SubnetIds=state["subnet_ids"])["Subnets"]
    public = [subnet["SubnetId"] for subnet in subnets if subnet.get("MapPublicIpOnLaunch")]
    return {"compliant": not public, "evidence": {"auto_assign_public_ip": public, "changed": state["changed"]}}
