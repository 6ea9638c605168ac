"""restricted-ssh - security group with SSH open to the internet.

With CREATE_COMPLIANT_EXAMPLE set, a second group that only admits
ALLOWED_IP on port 22 is created alongside for comparison.
"""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_security_group, default_vpc_id, world_ingress
from configdrill.settings import Settings

META = {
    "rule": "restricted-ssh",
    "title": "Security group allows unrestricted SSH",
    "service": "ec2",
    "resource_type": "AWS::EC2::SecurityGroup",
    "required_env": [],
}

SSH_PORT = 22
OPEN_CIDRS = {"0.0.0.0/0", "::/0"}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    ec2 = clients["ec2"]
    vpc_id = default_vpc_id(settings, clients)
    group_id = create_security_group(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="non-compliant-ssh",
        description="SSH open to the world",
        vpc_id=vpc_id,
    )
    ec2.authorize_security_group_ingress(GroupId=group_id, IpPermissions=world_ingress([SSH_PORT]))
    state: Dict[str, Any] = {"group_id": group_id, "vpc_id": vpc_id}

    if settings.create_compliant_example:
        compliant_id = create_security_group(
            settings,
            clients,
            ledger,
            rule=META["rule"],
            prefix="compliant-ssh",
            description=f"SSH restricted to {settings.allowed_ip}",
            vpc_id=vpc_id,
        )
        ec2.authorize_security_group_ingress(
            GroupId=compliant_id,
            IpPermissions=[
                {
                    "IpProtocol": "tcp",
                    "FromPort": SSH_PORT,
                    "ToPort": SSH_PORT,
                    "IpRanges": [{"CidrIp": settings.allowed_ip, "Description": "restricted SSH"}],
                }
            ],
        )
        state["compliant_group_id"] = compliant_id
    return state


def open_ssh_rules(group: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return ingress entries that expose port 22 to the internet."""
    offenders: List[Dict[str, Any]] = []
    for permission in group.get("IpPermissions", []):
        protocol = permission.get("IpProtocol")
        if protocol not in ("tcp", "-1"):
            continue
        if protocol == "tcp" and not permission.get("FromPort", 0) <= SSH_PORT <= permission.get("ToPort", -1):
            continue
        cidrs = [entry.get("CidrIp") for entry in permission.get("IpRanges", [])]
        cidrs += [entry.get("CidrIpv6") for entry in permission.get("Ipv6Ranges", [])]
        for cidr in cidrs:
            if cidr in OPEN_CIDRS:
                offenders.append({"protocol": protocol, "cidr": cidr})
    return offenders


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    group_ids = [state["group_id"]] + ([state["compliant_group_id"]] if "compliant_group_id" in state else [])
    groups = clients["ec2"].describe_security_groups(GroupIds=group_ids)["SecurityGroups"]
    by_id = {group["GroupId"]: open_ssh_rules(group) for group in groups}
    evidence: Dict[str, Any] = {"group_id": state["group_id"], "open_rules": by_id.get(state["group_id"], [])}
    if "compliant_group_id" in state:
        evidence["compliant_example"] = {
            "group_id": state["compliant_group_id"],
            "open_rules": by_id.get(state["compliant_group_id"], []),
        }
    return {"compliant": not evidence["open_rules"], "evidence": evidence}
