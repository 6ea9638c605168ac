"""vpc-sg-open-only-to-authorized-ports - world-open ingress on unauthorized ports."""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_security_group, default_vpc_id
from configdrill.settings import Settings

META = {
    "rule": "vpc-sg-open-only-to-authorized-ports",
    "title": "Security group opens unauthorized ports to the internet",
    "service": "ec2",
    "resource_type": "AWS::EC2::SecurityGroup",
    "required_env": [],
}

AUTHORIZED_TCP_PORTS = {443}
UNAUTHORIZED_RULES = [
    ("tcp", 23, "Telnet"),
    ("tcp", 3389, "RDP"),
    ("udp", 161, "SNMP"),
]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    group_id = create_security_group(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="unauthorized-ports",
        description="Unauthorized ports open to the world",
        vpc_id=default_vpc_id(settings, clients),
    )
    permissions = [
        {
            "IpProtocol": protocol,
            "FromPort": port,
            "ToPort": port,
            "IpRanges": [{"CidrIp": "0.0.0.0/0", "Description": f"Unauthorized {label} access"}],
        }
        for protocol, port, label in UNAUTHORIZED_RULES
    ]
    clients["ec2"].authorize_security_group_ingress(GroupId=group_id, IpPermissions=permissions)
    return {"group_id": group_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    group = clients["ec2"].describe_security_groups(GroupIds=[state["group_id"]])["SecurityGroups"][0]
    violations: List[str] = []
    for permission in group.get("IpPermissions", []):
        if not any(entry.get("CidrIp") == "0.0.0.0/0" for entry in permission.get("IpRanges", [])):
            continue
        protocol = permission.get("IpProtocol")
        port = permission.get("FromPort")
        if protocol == "tcp" and port in AUTHORIZED_TCP_PORTS:
            continue
        violations.append(f"{protocol}/{port}")
    return {"compliant": not violations, "evidence": {"group_id": state["group_id"], "violations": violations}}
