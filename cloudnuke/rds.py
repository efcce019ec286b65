"""RDS database instances."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from .common import AwsResource, logger, region_of


class RdsDeleteError(Exception):
    """An RDS database was still present after waiting for its deletion."""

    def __init__(self, name: str) -> None:
        super().__init__("RDS DB Instance:" + name + "was not deleted")
        self.name = name


def get_all_rds_instances(session: Any, exclude_after: datetime) -> list[str]:
    """Return the identifiers of instances created before ``exclude_after``."""
    client = session.client("rds")
    result = client.describe_db_instances()
    return [
        database["DBInstanceIdentifier"]
        for database in result.get("DBInstances", [])
        if database.get("InstanceCreateTime") is not None
        and exclude_after > database["InstanceCreateTime"]
    ]


def nuke_all_rds_instances(session: Any, names: Sequence[str]) -> list[str]:
    """Delete every given instance without a final snapshot and wait for it to go.

    Returns the identifiers that were deleted.
    """
    client = session.client("rds")
    region = region_of(session)

    if not names:
        logger.info("No RDS DB Instance to nuke in region %s", region)
        return []

    logger.info("Deleting all RDS Instances in region %s", region)
    deleted = []
    for name in names:
        try:
            client.delete_db_instance(DBInstanceIdentifier=name, SkipFinalSnapshot=True)
        except Exception as exc:  # noqa: BLE001 - failures are reported and skipped
            logger.error("[Failed] %s: %s", name, exc)
        else:
            deleted.append(name)
            logger.info("Deleted RDS DB Instance: %s", name)

    if deleted:
        waiter = client.get_waiter("db_instance_deleted")
        for name in deleted:
            try:
                waiter.wait(DBInstanceIdentifier=name)
            except Exception as exc:
                logger.error("[Failed] %s", exc)
                raise

    logger.info("[OK] %d RDS DB Instance(s) deleted in %s", len(deleted), region)
    return deleted


@dataclass
class DBInstances(AwsResource):
    """All RDS database instances selected for deletion."""

    instance_names: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "rds"

    def resource_identifiers(self) -> list[str]:
        return self.instance_names

    def max_batch_size(self) -> int:
        # Tentative batch size to keep AWS from throttling.
        return 200

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_rds_instances(session, identifiers)