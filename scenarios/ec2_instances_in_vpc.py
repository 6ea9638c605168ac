"""
ec2-instances-in-vpc - instance running outside the approved VPC.

Every instance lives in some VPC now that EC2-Classic is retired, so the
scenario evaluates the rule with its ``vpcId`` parameter set to the default
VPC (or VPC_ID) and launches the instance into a separate, freshly created VPC.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_subnet, create_vpc, default_vpc_id, run_instance
from configdrill.settings import Settings

META = {
    "rule": "ec2-instances-in-vpc",
    "title": "EC2 instance outside the approved VPC",
    "service": "ec2",
    "resource_type": "AWS::EC2::Instance",
    "required_env": [],
    "hold_seconds": 30,
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    approved = default_vpc_id(settings, clients)
    vpc_id = create_vpc(settings, clients, ledger, rule=META["rule"], prefix="unapproved-vpc")
    subnet_id = create_subnet(settings, clients, ledger, rule=META["rule"], prefix="unapproved-subnet", vpc_id=vpc_id)
    instance = run_instance(settings, clients, ledger, rule=META["rule"], prefix="stray-instance", SubnetId=subnet_id)
    return {"instance_id": instance["InstanceId"], "approved_vpc_id": approved, "vpc_id": vpc_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    instance = clients["ec2"].describe_instances(InstanceIds=[state["instance_id"]])["Reservations"][0]["Instances"][0]
    vpc_id = instance.get("VpcId")
    return {
        "compliant": vpc_id == state["approved_vpc_id"],
        "evidence": {
            "instance_id": state["instance_id"],
            "vpc_id": vpc_id,
            "approved_vpc_id": state["approved_vpc_id"],
        },
    }
