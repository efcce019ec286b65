"""Auto Scaling launch configurations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from .common import AwsResource, logger, region_of


def get_all_launch_configurations(session: Any, region: str, exclude_after: datetime) -> list[str]:
    """Return the names of launch configurations created before ``exclude_after``."""
    client = session.client("autoscaling")
    result = client.describe_launch_configurations()
    return [
        config["LaunchConfigurationName"]
        for config in result.get("LaunchConfigurations", [])
        if exclude_after > config["CreatedTime"]
    ]


def nuke_all_launch_configurations(session: Any, config_names: Sequence[str]) -> list[str]:
    """Delete every given launch configuration; return the names deleted."""
    client = session.client("autoscaling")
    region = region_of(session)

    if not config_names:
        logger.info("No Launch Configurations to nuke in region %s", region)
        return []

    logger.info("Deleting all Launch Configurations in region %s", region)
    deleted = []
    for name in config_names:
        try:
            client.delete_launch_configuration(LaunchConfigurationName=name)
        except Exception as exc:  # noqa: BLE001 - failures are reported and skipped
            logger.error("[Failed] %s", exc)
        else:
            deleted.append(name)
            logger.info("Deleted Launch configuration: %s", name)

    logger.info("[OK] %d Launch Configuration(s) deleted in %s", len(deleted), region)
    return deleted


@dataclass
class LaunchConfigs(AwsResource):
    """All launch configurations selected for deletion."""

    launch_configuration_names: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "lc"

    def resource_identifiers(self) -> list[str]:
        return self.launch_configuration_names

    def max_batch_size(self) -> int:
        # Tentative batch size to keep AWS from throttling.
        return 200

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_launch_configurations(session, identifiers)