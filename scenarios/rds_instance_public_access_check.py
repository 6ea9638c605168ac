"""rds-instance-public-access-check - publicly accessible MySQL instance."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.provision import create_db_instance, create_security_group, default_vpc_id, vpc_subnet_ids
from configdrill.settings import Settings

META = {
    "rule": "rds-instance-public-access-check",
    "title": "RDS instance publicly accessible",
    "service": "rds",
    "resource_type": "AWS::RDS::DBInstance",
    "required_env": [],
    "hold_seconds": 30,
}


def create_db_subnet_group(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, vpc_id: str
) -> str:
    rds = clients["rds"]
    name = unique_name("drill-db-subnets", max_length=255).lower()
    rds.create_db_subnet_group(
        DBSubnetGroupName=name,
        DBSubnetGroupDescription=f"config-drill subnets for {rule}",
        SubnetIds=vpc_subnet_ids(settings, clients, vpc_id),
        Tags=tag_list(drill_tags(settings, rule)),
    )
    ledger.track("rds:subgrp", name, lambda: rds.delete_db_subnet_group(DBSubnetGroupName=name))
    return name


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    vpc_id = default_vpc_id(settings, clients)
    # tracked before the instance so it is released only after the instance is gone
    group_id = create_security_group(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="public-rds-sg",
        description="config-drill public RDS access",
        vpc_id=vpc_id,
    )
    clients["ec2"].authorize_security_group_ingress(
        GroupId=group_id,
        IpPermissions=[
            {"IpProtocol": "tcp", "FromPort": 3306, "ToPort": 3306, "IpRanges": [{"CidrIp": "0.0.0.0/0"}]}
        ],
    )
    extra: Dict[str, Any] = {}
    if settings.vpc_id:
        extra["DBSubnetGroupName"] = create_db_subnet_group(
            settings, clients, ledger, rule=META["rule"], vpc_id=vpc_id
        )
    instance = create_db_instance(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="public-db",
        PubliclyAccessible=True,
        VpcSecurityGroupIds=[group_id],
        BackupRetentionPeriod=0,
        **extra,
    )
    return {"db_instance": instance["DBInstanceIdentifier"], "security_group_id": group_id}


def describe_instance(rds: Any, identifier: str) -> Dict[str, Any]:
    return rds.describe_db_instances(DBInstanceIdentifier=identifier)["DBInstances"][0]


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    public = bool(describe_instance(clients["rds"], state["db_instance"]).get("PubliclyAccessible"))
    return {"compliant": not public, "evidence": {"db_instance": state["db_instance"], "publicly_accessible": public}}
