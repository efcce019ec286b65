"""Application and network (v2) load balancers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from .common import AwsResource, logger, region_of


def get_all_elbv2_instances(session: Any, region: str, exclude_after: datetime) -> list[str]:
    """Return the ARNs of load balancers created before ``exclude_after``."""
    client = session.client("elbv2")
    result = client.describe_load_balancers()
    return [
        balancer["LoadBalancerArn"]
        for balancer in result.get("LoadBalancers", [])
        if exclude_after > balancer["CreatedTime"]
    ]


def nuke_all_elbv2_instances(session: Any, arns: Sequence[str]) -> list[str]:
    """Delete the load balancers and wait for them to go; return those deleted."""
    client = session.client("elbv2")
    region = region_of(session)

    if not arns:
        logger.info("No V2 Elastic Load Balancers to nuke in region %s", region)
        return []

    logger.info("Deleting all V2 Elastic Load Balancers in region %s", region)
    deleted = []
    for arn in arns:
        try:
            client.delete_load_balancer(LoadBalancerArn=arn)
        except Exception as exc:  # noqa: BLE001 - failures are reported and skipped
            logger.error("[Failed] %s", exc)
        else:
            deleted.append(arn)
            logger.info("Deleted ELBv2: %s", arn)

    if deleted:
        try:
            client.get_waiter("load_balancers_deleted").wait(LoadBalancerArns=deleted)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise

    logger.info("[OK] %d V2 Elastic Load Balancer(s) deleted in %s", len(deleted), region)
    return deleted


@dataclass
class LoadBalancersV2(AwsResource):
    """All v2 load balancers selected for deletion."""

    arns: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "elbv2"

    def resource_identifiers(self) -> list[str]:
        return self.arns

    def max_batch_size(self) -> int:
        # Tentative batch size to keep AWS from throttling.
        return 200

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_elbv2_instances(session, identifiers)