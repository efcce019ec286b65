"""RDS database clusters."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Sequence

from .common import AwsResource, error_code, logger, region_of
from .rds import RdsDeleteError

# Wait up to 15 minutes: 90 polls, 10 seconds apart.
_WAIT_TRIES = 90
_WAIT_INTERVAL = 10.0
_NOT_FOUND = "DBClusterNotFoundFault"


def wait_until_rds_cluster_deleted(
    client: Any, identifier: str, sleep: Callable[[float], Any] = time.sleep
) -> None:
    """Poll until AWS reports the cluster as not found."""
    for _ in range(_WAIT_TRIES):
        try:
            client.describe_db_clusters(DBClusterIdentifier=identifier)
        except Exception as exc:
            if error_code(exc) == _NOT_FOUND:
                return
            raise
        sleep(_WAIT_INTERVAL)
        logger.debug("Waiting for RDS Cluster to be deleted")
    raise RdsDeleteError(identifier)


def get_all_rds_clusters(session: Any, exclude_after: datetime) -> list[str]:
    """Return the identifiers of clusters created before ``exclude_after``."""
    client = session.client("rds")
    result = client.describe_db_clusters()
    return [
        database["DBClusterIdentifier"]
        for database in result.get("DBClusters", [])
        if exclude_after > database["ClusterCreateTime"]
    ]


def nuke_all_rds_clusters(session: Any, names: Sequence[str]) -> list[str]:
    """Delete every given cluster without a final snapshot and wait for it to go.

    Returns the identifiers that were deleted.
    """
    client = session.client("rds")
    region = region_of(session)

    if not names:
        logger.info("No RDS DB Cluster to nuke in region %s", region)
        return []

    logger.info("Deleting all RDS Clusters in region %s", region)
    deleted = []
    for name in names:
        try:
            client.delete_db_cluster(DBClusterIdentifier=name, SkipFinalSnapshot=True)
        except Exception as exc:  # noqa: BLE001 - failures are reported and skipped
            logger.error("[Failed] %s: %s", name, exc)
        else:
            deleted.append(name)
            logger.info("Deleted RDS DB Cluster: %s", name)

    for name in deleted:
        try:
            wait_until_rds_cluster_deleted(client, name)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise

    logger.info("[OK] %d RDS DB Cluster(s) nuked in %s", len(deleted), region)
    return deleted


@dataclass
class DBClusters(AwsResource):
    """All RDS database clusters selected for deletion."""

    instance_names: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "rds"

    def resource_identifiers(self) -> list[str]:
        return self.instance_names

    def max_batch_size(self) -> int:
        # Tentative batch size to keep AWS from throttling.
        return 200

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_rds_clusters(session, identifiers)