"""s3-bucket-public-write-prohibited - bucket writable by anyone."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.policies import policy_document, statement, to_json
from configdrill.provision import create_bucket, disable_bucket_public_access_block
from configdrill.settings import Settings

from scenarios.s3_bucket_public_read_prohibited import public_grants

META = {
    "rule": "s3-bucket-public-write-prohibited",
    "title": "S3 bucket allows public write access",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}

WRITE_PERMISSIONS = {"WRITE", "FULL_CONTROL"}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    s3 = clients["s3"]
    bucket = create_bucket(
        settings, clients, ledger, rule=META["rule"], prefix="public-write-test", object_ownership="ObjectWriter"
    )
    disable_bucket_public_access_block(s3, bucket)
    s3.put_bucket_acl(Bucket=bucket, ACL="public-read-write")
    document = policy_document(
        statement(
            ["s3:PutObject", "s3:PutObjectAcl"],
            f"arn:aws:s3:::{bucket}/*",
            principal="*",
            sid="PublicWrite",
        ),
        statement("s3:ListBucket", f"arn:aws:s3:::{bucket}", principal="*", sid="PublicList"),
    )
    s3.put_bucket_policy(Bucket=bucket, Policy=to_json(document))
    return {"bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    grants = public_grants(clients["s3"].get_bucket_acl(Bucket=state["bucket"]))
    writable = sorted(set(grants) & WRITE_PERMISSIONS)
    return {
        "compliant": not writable,
        "evidence": {"bucket": state["bucket"], "public_write_grants": writable},
    }
