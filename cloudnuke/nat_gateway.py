"""NAT gateways."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from .common import AwsResource, FatalError, MultiError, do_with_retry, logger, region_of

NameFilter = Optional[Callable[[str], bool]]

# Deletions run concurrently, one request each; many AWS APIs allow about 100 per second.
_MAX_AT_ONCE = 100
_WAIT_TRIES = 30
_WAIT_INTERVAL = 10.0
_STATE_DELETED = "deleted"


class TooManyNatError(Exception):
    """More NAT gateways were requested at once than is safe to delete."""

    def __init__(self) -> None:
        super().__init__("Too many NAT Gateways requested at once.")


def get_nat_gateway_name(ngw: Mapping[str, Any]) -> str:
    """Return the value of the gateway's Name tag, or an empty string."""
    for tag in ngw.get("Tags") or []:
        if tag.get("Key") == "Name":
            return tag.get("Value") or ""
    return ""


def should_include_nat_gateway(
    ngw: Mapping[str, Any] | None, exclude_after: datetime, name_filter: NameFilter = None
) -> bool:
    """Decide whether a gateway is selected for deletion."""
    if ngw is None:
        return False
    created = ngw.get("CreateTime")
    if created is not None and exclude_after < created:
        return False
    return name_filter is None or name_filter(get_nat_gateway_name(ngw))


def get_all_nat_gateways(
    session: Any, exclude_after: datetime, name_filter: NameFilter = None
) -> list[str]:
    """Return the ids of all gateways selected for deletion, across all pages."""
    client = session.client("ec2")
    paginator = client.get_paginator("describe_nat_gateways")
    return [
        ngw["NatGatewayId"]
        for page in paginator.paginate()
        for ngw in page.get("NatGateways", [])
        if should_include_nat_gateway(ngw, exclude_after, name_filter)
    ]


def are_all_nat_gateways_deleted(client: Any, identifiers: Sequence[str]) -> bool:
    """Return True when AWS no longer knows the gateways or reports them deleted."""
    response = client.describe_nat_gateways(NatGatewayIds=list(identifiers))
    return all(
        ngw is None or ngw.get("State") == _STATE_DELETED
        for ngw in response.get("NatGateways", [])
    )


def nuke_all_nat_gateways(
    session: Any, identifiers: Sequence[str], sleep: Callable[[float], Any] = time.sleep
) -> list[str]:
    """Delete the gateways concurrently and wait until they are gone."""
    region = region_of(session)
    client = session.client("ec2")

    if not identifiers:
        logger.info("No Nat Gateways to nuke in region %s", region)
        return []

    if len(identifiers) > _MAX_AT_ONCE:
        logger.error(
            "Nuking too many NAT gateways at once (100): "
            "halting to avoid hitting AWS API rate limiting"
        )
        raise TooManyNatError()

    logger.info("Deleting Nat Gateways in region %s", region)

    def delete(ngw_id: str) -> BaseException | None:
        try:
            client.delete_nat_gateway(NatGatewayId=ngw_id)
        except Exception as exc:  # noqa: BLE001 - collected and raised together
            return exc
        return None

    with ThreadPoolExecutor(max_workers=len(identifiers)) as pool:
        outcomes = list(pool.map(delete, identifiers))

    errors = [exc for exc in outcomes if exc is not None]
    for exc in errors:
        logger.error("[Failed] %s", exc)
    if errors:
        raise MultiError(errors)

    def check() -> None:
        try:
            deleted = are_all_nat_gateways_deleted(client, identifiers)
        except Exception as exc:
            raise FatalError(exc) from exc
        if not deleted:
            raise RuntimeError("Not all NAT gateways deleted.")

    do_with_retry(
        "Waiting for all NAT gateways to be deleted.",
        _WAIT_TRIES,
        _WAIT_INTERVAL,
        check,
        sleep=sleep,
    )
    for ngw_id in identifiers:
        logger.info("[OK] NAT Gateway %s was deleted in %s", ngw_id, region)
    return list(identifiers)


@dataclass
class NatGateways(AwsResource):
    """All NAT gateways selected for deletion."""

    nat_gateway_ids: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "nat-gateway"

    def resource_identifiers(self) -> list[str]:
        return self.nat_gateway_ids

    def max_batch_size(self) -> int:
        # There is no bulk delete, so this many are deleted in parallel.
        return 10

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_nat_gateways(session, identifiers)