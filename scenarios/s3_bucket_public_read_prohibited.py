"""s3-bucket-public-read-prohibited - bucket readable by anyone via ACL and policy."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.policies import public_bucket_policy, to_json
from configdrill.provision import create_bucket, disable_bucket_public_access_block
from configdrill.settings import Settings

META = {
    "rule": "s3-bucket-public-read-prohibited",
    "title": "S3 bucket allows public read access",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}

ALL_USERS = "http://acs.amazonaws.com/groups/global/AllUsers"


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    s3 = clients["s3"]
    bucket = create_bucket(
        settings, clients, ledger, rule=META["rule"], prefix="public-read-test", object_ownership="ObjectWriter"
    )
    disable_bucket_public_access_block(s3, bucket)
    s3.put_bucket_acl(Bucket=bucket, ACL="public-read")
    s3.put_bucket_policy(
        Bucket=bucket,
        Policy=to_json(public_bucket_policy(bucket, actions=("s3:GetObject", "s3:ListBucket"))),
    )
    return {"bucket": bucket}


def public_grants(acl: Dict[str, Any]) -> list:
    """Return the permissions granted to the AllUsers group."""
    return [
        grant.get("Permission")
        for grant in acl.get("Grants", [])
        if grant.get("Grantee", {}).get("URI") == ALL_USERS
    ]


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    acl = clients["s3"].get_bucket_acl(Bucket=state["bucket"])
    grants = public_grants(acl)
    return {
        "compliant": not grants,
        "evidence": {"bucket": state["bucket"], "public_grants": grants},
    }
