"""Shared pieces used by every resource module: errors, retries and the resource interface."""

from __future__ import annotations

import abc
import logging
import time
from typing import Any, Callable, Iterable, Sequence, TypeVar

# Resources without a creation timestamp (such as Elastic IPs) are tagged with this key
# the first time they are seen, so that age filtering can be applied on later runs.
FIRST_SEEN_TAG_KEY = "cloud-nuke-first-seen"

logger = logging.getLogger("cloudnuke")

T = TypeVar("T")


class FatalError(Exception):
    """Raised from a retried action to stop retrying at once."""

    def __init__(self, underlying: BaseException) -> None:
        super().__init__(str(underlying))
        self.underlying = underlying


class MultiError(Exception):
    """Several independent failures collected into one exception."""

    def __init__(self, errors: Iterable[BaseException]) -> None:
        self.errors = list(errors)
        super().__init__(self._format())

    def _format(self) -> str:
        count = len(self.errors)
        noun = "error" if count == 1 else "errors"
        points = "".join(f"\n\t* {error}" for error in self.errors)
        return f"{count} {noun} occurred:{points}\n\n"

    def __str__(self) -> str:
        return self._format()


class AwsResource(abc.ABC):
    """A kind of AWS resource that can be listed and destroyed in batches."""

    @abc.abstractmethod
    def resource_name(self) -> str:
        """The short name of the resource kind."""

    @abc.abstractmethod
    def resource_identifiers(self) -> Sequence[str]:
        """The identifiers of the collected resources."""

    @abc.abstractmethod
    def max_batch_size(self) -> int:
        """How many identifiers may be nuked in one call."""

    @abc.abstractmethod
    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        """Destroy the resources with the given identifiers."""


def error_code(exc: BaseException) -> str | None:
    """Return the AWS error code carried by an exception, if any."""
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        code = (response.get("Error") or {}).get("Code")
        if code:
            return str(code)
    code = getattr(exc, "code", None)
    return code if isinstance(code, str) else None


def region_of(session: Any) -> str:
    """Return the region a session is bound to."""
    return getattr(session, "region_name", None) or ""


def do_with_retry(
    description: str,
    max_tries: int,
    sleep_between: float,
    action: Callable[[], T],
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """Call ``action`` until it succeeds, at most ``max_tries`` times.

    Raising :class:`FatalError` from the action stops at once and re-raises the
    underlying error. When every try fails a :class:`TimeoutError` is raised.
    """
    last_error: BaseException | None = None
    for _ in range(max_tries):
        logger.debug(description)
        try:
            return action()
        except FatalError as fatal:
            raise fatal.underlying
        except Exception as exc:  # noqa: BLE001 - any failure means try again
            last_error = exc
            logger.info(
                "%s returned an error: %s. Sleeping for %ss and will try again.",
                description,
                exc,
                sleep_between,
            )
            sleep(sleep_between)
    raise TimeoutError(f"'{description}' unsuccessful after {max_tries} retries") from last_error