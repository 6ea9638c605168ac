"""restricted-common-ports - security group exposing well-known service ports."""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_security_group, default_vpc_id, world_ingress
from configdrill.settings import Settings

META = {
    "rule": "restricted-common-ports",
    "title": "Security group allows unrestricted access to common ports",
    "service": "ec2",
    "resource_type": "AWS::EC2::SecurityGroup",
    "required_env": [],
}

RESTRICTED_PORTS = {
    20: "FTP Data",
    21: "FTP Control",
    23: "Telnet",
    25: "SMTP",
    53: "DNS",
    135: "RPC",
    139: "NetBIOS",
    445: "CIFS",
    1433: "MSSQL",
    1521: "Oracle DB",
    3306: "MySQL",
    3389: "RDP",
    4333: "mSQL",
    5432: "PostgreSQL",
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    group_id = create_security_group(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="restricted-ports",
        description="Common restricted ports open to the world",
        vpc_id=default_vpc_id(settings, clients),
    )
    clients["ec2"].authorize_security_group_ingress(
        GroupId=group_id,
        IpPermissions=world_ingress(sorted(RESTRICTED_PORTS), ipv6=False),
    )
    return {"group_id": group_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    group = clients["ec2"].describe_security_groups(GroupIds=[state["group_id"]])["SecurityGroups"][0]
    exposed: List[str] = []
    for permission in group.get("IpPermissions", []):
        if not any(entry.get("CidrIp") == "0.0.0.0/0" for entry in permission.get("IpRanges", [])):
            continue
        port = permission.get("FromPort")
        if port in RESTRICTED_PORTS:
            exposed.append(f"{port} ({RESTRICTED_PORTS[port]})")
    return {"compliant": not exposed, "evidence": {"group_id": state["group_id"], "exposed_ports": exposed}}
