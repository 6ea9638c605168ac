"""vpc-default-security-group-closed - default security group with traffic rules.

Only groups that are currently closed are opened, and exactly the rules
added here are revoked again on teardown.
"""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.provision import default_vpc_id
from configdrill.settings import Settings

META = {
    "rule": "vpc-default-security-group-closed",
    "title": "Default security group allows traffic",
    "service": "ec2",
    "resource_type": "AWS::EC2::SecurityGroup",
    "required_env": [],
}


def default_security_group(ec2: Any, vpc_id: str) -> Dict[str, Any]:
    groups = ec2.describe_security_groups(
        Filters=[
            {"Name": "vpc-id", "Values": [vpc_id]},
            {"Name": "group-name", "Values": ["default"]},
        ]
    )["SecurityGroups"]
    if not groups:
        raise RuntimeError(f"No default security group in {vpc_id}")
    return groups[0]


def _self_ingress(group_id: str) -> List[Dict[str, Any]]:
    return [{"IpProtocol": "-1", "UserIdGroupPairs": [{"GroupId": group_id}]}]


def _open_egress() -> List[Dict[str, Any]]:
    return [{"IpProtocol": "-1", "IpRanges": [{"CidrIp": "0.0.0.0/0"}]}]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    ec2 = clients["ec2"]
    vpc_id = default_vpc_id(settings, clients)
    group = default_security_group(ec2, vpc_id)
    group_id = group["GroupId"]
    added: List[str] = []

    if not group.get("IpPermissions"):
        ledger.restore(
            "ec2:default-sg-ingress",
            group_id,
            lambda: ec2.revoke_security_group_ingress(GroupId=group_id, IpPermissions=_self_ingress(group_id)),
        )
        ec2.authorize_security_group_ingress(GroupId=group_id, IpPermissions=_self_ingress(group_id))
        added.append("ingress")
    if not group.get("IpPermissionsEgress"):
        ledger.restore(
            "ec2:default-sg-egress",
            group_id,
            lambda: ec2.revoke_security_group_egress(GroupId=group_id, IpPermissions=_open_egress()),
        )
        ec2.authorize_security_group_egress(GroupId=group_id, IpPermissions=_open_egress())
        added.append("egress")
    return {"group_id": group_id, "vpc_id": vpc_id, "added_rules": added}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    group = default_security_group(clients["ec2"], state["vpc_id"])
    ingress = len(group.get("IpPermissions", []))
    egress = len(group.get("IpPermissionsEgress", []))
    return {
        "compliant": ingress == 0 and egress == 0,
        "evidence": {"group_id": group["GroupId"], "ingress_rules": ingress, "egress_rules": egress},
    }
