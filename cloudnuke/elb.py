"""Classic Elastic Load Balancers."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Sequence

from .common import AwsResource, error_code, logger, region_of

_WAIT_TRIES = 30
_WAIT_INTERVAL = 1.0


class ElbDeleteError(Exception):
    """A load balancer was still present after waiting for its deletion."""

    def __init__(self) -> None:
        super().__init__("ELB was not deleted")


def wait_until_elb_deleted(
    client: Any, names: Sequence[str], sleep: Callable[[float], Any] = time.sleep
) -> None:
    """Poll until AWS reports the load balancers as not found."""
    for _ in range(_WAIT_TRIES):
        try:
            client.describe_load_balancers(LoadBalancerNames=list(names))
        except Exception as exc:
            if error_code(exc) == "LoadBalancerNotFound":
                return
            raise
        sleep(_WAIT_INTERVAL)
        logger.debug("Waiting for ELB to be deleted")
    raise ElbDeleteError()


def get_all_elb_instances(session: Any, region: str, exclude_after: datetime) -> list[str]:
    """Return the names of load balancers created before ``exclude_after``."""
    client = session.client("elb")
    result = client.describe_load_balancers()
    return [
        balancer["LoadBalancerName"]
        for balancer in result.get("LoadBalancerDescriptions", [])
        if exclude_after > balancer["CreatedTime"]
    ]


def nuke_all_elb_instances(session: Any, names: Sequence[str]) -> list[str]:
    """Delete the load balancers and wait for them to go; return those deleted."""
    client = session.client("elb")
    region = region_of(session)

    if not names:
        logger.info("No Elastic Load Balancers to nuke in region %s", region)
        return []

    logger.info("Deleting all Elastic Load Balancers in region %s", region)
    deleted = []
    for name in names:
        try:
            client.delete_load_balancer(LoadBalancerName=name)
        except Exception as exc:  # noqa: BLE001 - failures are reported and skipped
            logger.error("[Failed] %s", exc)
        else:
            deleted.append(name)
            logger.info("Deleted ELB: %s", name)

    if deleted:
        try:
            wait_until_elb_deleted(client, deleted)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise

    logger.info("[OK] %d Elastic Load Balancer(s) deleted in %s", len(deleted), region)
    return deleted


@dataclass
class LoadBalancers(AwsResource):
    """All classic load balancers selected for deletion."""

    names: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "elb"

    def resource_identifiers(self) -> list[str]:
        return self.names

    def max_batch_size(self) -> int:
        # Tentative batch size to keep AWS from throttling.
        return 200

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_elb_instances(session, identifiers)