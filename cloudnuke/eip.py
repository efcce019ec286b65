"""Elastic IP addresses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from .common import FIRST_SEEN_TAG_KEY, AwsResource, error_code, logger, region_of

LAYOUT = "%Y-%m-%d %H:%M:%S"


def set_first_seen_tag(
    client: Any, address: Mapping[str, Any], key: str, value: datetime, layout: str
) -> None:
    """Tag an address with the time it was first seen.

    Elastic IPs carry no creation time, so this tag stands in for one.
    """
    client.create_tags(
        Resources=[address["AllocationId"]],
        Tags=[{"Key": key, "Value": value.strftime(layout)}],
    )


def get_first_seen_tag(address: Mapping[str, Any], key: str, layout: str) -> datetime | None:
    """Return the first-seen time stored in an address's tags, or None."""
    for tag in address.get("Tags") or []:
        if tag.get("Key") == key:
            return datetime.strptime(tag["Value"], layout).replace(tzinfo=timezone.utc)
    return None


def get_all_eip_addresses(session: Any, region: str, exclude_after: datetime) -> list[str]:
    """Return the allocation ids of addresses first seen before ``exclude_after``."""
    client = session.client("ec2")
    result = client.describe_addresses()

    allocation_ids = []
    for address in result.get("Addresses", []):
        first_seen = get_first_seen_tag(address, FIRST_SEEN_TAG_KEY, LAYOUT)
        if first_seen is None:
            first_seen = datetime.now(timezone.utc)
            set_first_seen_tag(client, address, FIRST_SEEN_TAG_KEY, first_seen, LAYOUT)
        if exclude_after > first_seen:
            allocation_ids.append(address["AllocationId"])
    return allocation_ids


def nuke_all_eip_addresses(session: Any, allocation_ids: Sequence[str]) -> list[str]:
    """Release every given address; return the ids that were released."""
    client = session.client("ec2")
    region = region_of(session)

    if not allocation_ids:
        logger.info("No Elastic IPs to nuke in region %s", region)
        return []

    logger.info("Deleting all Elastic IPs in region %s", region)
    deleted = []
    for allocation_id in allocation_ids:
        try:
            client.release_address(AllocationId=allocation_id)
        except Exception as exc:  # noqa: BLE001 - failures are reported and skipped
            if error_code(exc) == "AuthFailure":
                logger.warning(
                    "EIP %s can't be deleted, it is still attached to an active resource",
                    allocation_id,
                )
            else:
                logger.error("[Failed] %s", exc)
        else:
            deleted.append(allocation_id)
            logger.info("Deleted Elastic IP: %s", allocation_id)

    logger.info("[OK] %d Elastic IP(s) deleted in %s", len(deleted), region)
    return deleted


@dataclass
class EIPAddresses(AwsResource):
    """All Elastic IP addresses selected for deletion."""

    allocation_ids: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "eip"

    def resource_identifiers(self) -> list[str]:
        return self.allocation_ids

    def max_batch_size(self) -> int:
        # Tentative batch size to keep AWS from throttling.
        return 200

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_eip_addresses(session, identifiers)