"""EKS clusters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from .common import AwsResource, logger, region_of

# The regions that support EKS.
EKS_REGIONS = (
    "us-east-1",
    "us-east-2",
    "us-west-2",
    "eu-central-1",
    "eu-west-1",
    "eu-west-2",
    "eu-west-3",
    "eu-north-1",
    "ap-southeast-1",
    "ap-southeast-2",
    "ap-northeast-1",
    "ap-northeast-2",
    "ap-south-1",
)


def eks_supported_region(region: str) -> bool:
    """Return True if EKS is available in the region."""
    return region in EKS_REGIONS


def get_all_eks_clusters(session: Any, exclude_after: datetime) -> list[str]:
    """Return the names of clusters created before ``exclude_after``."""
    client = session.client("eks")
    result = client.list_clusters()
    return filter_out_recent_eks_clusters(client, result.get("clusters", []), exclude_after)


def filter_out_recent_eks_clusters(
    client: Any, cluster_names: Sequence[str], exclude_after: datetime
) -> list[str]:
    """Drop the clusters created after ``exclude_after``."""
    kept = []
    for name in cluster_names:
        cluster = client.describe_cluster(name=name)["cluster"]
        if exclude_after > cluster["createdAt"]:
            kept.append(cluster["name"])
    return kept


def delete_eks_clusters(client: Any, cluster_names: Sequence[str]) -> list[str]:
    """Request deletion of each cluster; return those AWS accepted."""
    requested = []
    for name in cluster_names:
        try:
            client.delete_cluster(name=name)
        except Exception as exc:  # noqa: BLE001 - failures are reported and skipped
            logger.error("[Failed] Failed deleting EKS cluster %s: %s", name, exc)
        else:
            requested.append(name)
    return requested


def wait_until_eks_clusters_deleted(client: Any, cluster_names: Sequence[str]) -> list[str]:
    """Wait for each cluster to disappear; return those that did."""
    waiter = client.get_waiter("cluster_deleted")
    deleted = []
    for name in cluster_names:
        try:
            waiter.wait(name=name)
        except Exception as exc:  # noqa: BLE001 - failures are reported and skipped
            logger.error("[Failed] Failed waiting for EKS cluster to be deleted %s: %s", name, exc)
        else:
            logger.info("Deleted EKS cluster: %s", name)
            deleted.append(name)
    return deleted


def nuke_all_eks_clusters(session: Any, cluster_names: Sequence[str]) -> list[str]:
    """Delete the clusters and wait for them to go; return those deleted."""
    region = region_of(session)
    client = session.client("eks")
    count = len(cluster_names)

    if count == 0:
        logger.info("No EKS clusters to nuke in region %s", region)
        return []

    logger.info("Deleting %d EKS clusters in region %s", count, region)
    requested = delete_eks_clusters(client, cluster_names)
    deleted = wait_until_eks_clusters_deleted(client, requested)

    logger.info("[OK] %d of %d EKS cluster(s) deleted in %s", len(deleted), count, region)
    return deleted


@dataclass
class EKSClusters(AwsResource):
    """All EKS clusters found in a region."""

    clusters: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "ekscluster"

    def resource_identifiers(self) -> list[str]:
        return self.clusters

    def max_batch_size(self) -> int:
        return 200

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_eks_clusters(session, identifiers)