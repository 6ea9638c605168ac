"""
vpc-vpn-2-tunnels-up - site-to-site VPN whose tunnels never come up.

The customer gateway points at a documentation address, so neither tunnel
can establish. The VPN connection takes several minutes to become available.
"""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.naming import unique_name
from configdrill.polling import wait_for_state
from configdrill.provision import ec2_tag_spec
from configdrill.settings import Settings

META = {
    "rule": "vpc-vpn-2-tunnels-up",
    "title": "VPN connection tunnels down",
    "service": "ec2",
    "resource_type": "AWS::EC2::VPNConnection",
    "required_env": [],
}

CUSTOMER_GATEWAY_IP = "203.0.113.1"
BGP_ASN = 65000


def _vpn_state(ec2: Any, vpn_id: str) -> Dict[str, Any]:
    return ec2.describe_vpn_connections(VpnConnectionIds=[vpn_id])["VpnConnections"][0]


def delete_vpn_connection(settings: Settings, ec2: Any, vpn_id: str) -> None:
    ec2.delete_vpn_connection(VpnConnectionId=vpn_id)
    wait_for_state(
        lambda: _vpn_state(ec2, vpn_id),
        target="deleted",
        status_of=lambda r: r["State"],
        label=f"vpn connection {vpn_id} deletion",
        **settings.poll_kwargs(factor=4),
    )


def tunnels_up(connection: Dict[str, Any]) -> int:
    return sum(1 for tunnel in connection.get("VgwTelemetry", []) if tunnel.get("Status") == "UP")


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    ec2 = clients["ec2"]
    rule = META["rule"]
    customer_name = unique_name("drill-cgw")
    customer_gateway_id = ec2.create_customer_gateway(
        BgpAsn=BGP_ASN,
        PublicIp=CUSTOMER_GATEWAY_IP,
        Type="ipsec.1",
        TagSpecifications=[ec2_tag_spec(settings, rule, "customer-gateway", customer_name)],
    )["CustomerGateway"]["CustomerGatewayId"]
    ledger.track(
        "ec2:customer-gateway",
        customer_gateway_id,
        lambda: ec2.delete_customer_gateway(CustomerGatewayId=customer_gateway_id),
        note=customer_name,
    )

    vpn_gateway_name = unique_name("drill-vgw")
    vpn_gateway_id = ec2.create_vpn_gateway(
        Type="ipsec.1",
        TagSpecifications=[ec2_tag_spec(settings, rule, "vpn-gateway", vpn_gateway_name)],
    )["VpnGateway"]["VpnGatewayId"]
    ledger.track(
        "ec2:vpn-gateway",
        vpn_gateway_id,
        lambda: ec2.delete_vpn_gateway(VpnGatewayId=vpn_gateway_id),
        note=vpn_gateway_name,
    )

    vpn_name = unique_name("drill-vpn")
    vpn_id = ec2.create_vpn_connection(
        CustomerGatewayId=customer_gateway_id,
        VpnGatewayId=vpn_gateway_id,
        Type="ipsec.1",
        Options={"StaticRoutesOnly": True},
        TagSpecifications=[ec2_tag_spec(settings, rule, "vpn-connection", vpn_name)],
    )["VpnConnection"]["VpnConnectionId"]
    ledger.track("ec2:vpn-connection", vpn_id, lambda: delete_vpn_connection(settings, ec2, vpn_id), note=vpn_name)
    wait_for_state(
        lambda: _vpn_state(ec2, vpn_id),
        target="available",
        status_of=lambda r: r["State"],
        failure_states={"deleting", "deleted"},
        label=f"vpn connection {vpn_id}",
        **settings.poll_kwargs(factor=4),
    )
    return {"vpn_connection_id": vpn_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    connection = _vpn_state(clients["ec2"], state["vpn_connection_id"])
    up = tunnels_up(connection)
    statuses: List[str] = [tunnel.get("Status") for tunnel in connection.get("VgwTelemetry", [])]
    return {
        "compliant": up >= 2,
        "evidence": {"vpn_connection_id": state["vpn_connection_id"], "tunnels_up": up, "tunnel_statuses": statuses},
    }
