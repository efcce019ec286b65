"""Lambda functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from .common import AwsResource, logger, region_of

LAST_MODIFIED_LAYOUT = "%Y-%m-%dT%H:%M:%S.%f%z"


class LambdaDeleteError(Exception):
    """A Lambda function could not be deleted."""

    def __init__(self, name: str) -> None:
        super().__init__("Lambda Function:" + name + "was not deleted")
        self.name = name


def get_all_lambda_functions(session: Any, exclude_after: datetime) -> list[str]:
    """Return the names of functions last modified before ``exclude_after``."""
    client = session.client("lambda")
    result = client.list_functions()

    names = []
    for function in result.get("Functions", []):
        last_modified = function.get("LastModified")
        if last_modified is None:
            continue
        modified_at = datetime.strptime(last_modified, LAST_MODIFIED_LAYOUT)
        if exclude_after > modified_at:
            names.append(function["FunctionName"])
    return names


def nuke_all_lambda_functions(session: Any, names: Sequence[str]) -> list[str]:
    """Delete every given function; return the names deleted."""
    client = session.client("lambda")
    region = region_of(session)

    if not names:
        logger.info("No Lambda Functions to nuke in region %s", region)
        return []

    logger.info("Deleting all Lambda Functions in region %s", region)
    deleted = []
    for name in names:
        try:
            client.delete_function(FunctionName=name)
        except Exception as exc:  # noqa: BLE001 - failures are reported and skipped
            logger.error("[Failed] %s: %s", name, exc)
        else:
            deleted.append(name)
            logger.info("Deleted Lambda Function: %s", name)

    logger.info("[OK] %d Lambda Function(s) deleted in %s", len(deleted), region)
    return deleted


@dataclass
class LambdaFunctions(AwsResource):
    """All Lambda functions selected for deletion."""

    lambda_function_names: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "lambda"

    def resource_identifiers(self) -> list[str]:
        return self.lambda_function_names

    def max_batch_size(self) -> int:
        # Tentative batch size to keep AWS from throttling.
        return 200

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_lambda_functions(session, identifiers)