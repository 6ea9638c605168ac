"""no-unrestricted-route-to-igw - route table sending 0.0.0.0/0 to an internet gateway."""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.naming import unique_name
from configdrill.provision import create_vpc, ec2_tag_spec
from configdrill.settings import Settings

META = {
    "rule": "no-unrestricted-route-to-igw",
    "title": "Route table has an unrestricted route to an internet gateway",
    "service": "ec2",
    "resource_type": "AWS::EC2::RouteTable",
    "required_env": [],
}

OPEN_DESTINATIONS = {"0.0.0.0/0", "::/0"}


def create_internet_gateway(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, vpc_id: str
) -> str:
    ec2 = clients["ec2"]
    name = unique_name("drill-igw")
    gateway_id = ec2.create_internet_gateway(
        TagSpecifications=[ec2_tag_spec(settings, rule, "internet-gateway", name)]
    )["InternetGateway"]["InternetGatewayId"]

    def _release() -> None:
        ec2.detach_internet_gateway(InternetGatewayId=gateway_id, VpcId=vpc_id)
        ec2.delete_internet_gateway(InternetGatewayId=gateway_id)

    ledger.track("ec2:internet-gateway", gateway_id, _release, note=name)
    ec2.attach_internet_gateway(InternetGatewayId=gateway_id, VpcId=vpc_id)
    return gateway_id


def unrestricted_igw_routes(route_table: Dict[str, Any]) -> List[str]:
    routes = []
    for route in route_table.get("Routes", []):
        destination = route.get("DestinationCidrBlock") or route.get("DestinationIpv6CidrBlock")
        if destination in OPEN_DESTINATIONS and route.get("GatewayId", "").startswith("igw-"):
            routes.append(destination)
    return routes


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    ec2 = clients["ec2"]
    vpc_id = create_vpc(settings, clients, ledger, rule=META["rule"], prefix="open-route-vpc")
    gateway_id = create_internet_gateway(settings, clients, ledger, rule=META["rule"], vpc_id=vpc_id)
    name = unique_name("open-route-table")
    route_table_id = ec2.create_route_table(
        VpcId=vpc_id, TagSpecifications=[ec2_tag_spec(settings, META["rule"], "route-table", name)]
    )["RouteTable"]["RouteTableId"]
    ledger.track(
        "ec2:route-table", route_table_id, lambda: ec2.delete_route_table(RouteTableId=route_table_id), note=name
    )
    ec2.create_route(RouteTableId=route_table_id, DestinationCidrBlock="0.0.0.0/0", GatewayId=gateway_id)
    return {"vpc_id": vpc_id, "route_table_id": route_table_id, "internet_gateway_id": gateway_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    table = clients["ec2"].describe_route_tables(RouteTableIds=[state["route_table_id"]])["RouteTables"][0]
    routes = unrestricted_igw_routes(table)
    return {"compliant": not routes, "evidence": {"route_table_id": state["route_table_id"], "open_routes": routes}}
