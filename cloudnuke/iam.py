"""IAM users and everything attached to them."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from .common import AwsResource, FatalError, MultiError, do_with_retry, error_code, logger

NameFilter = Optional[Callable[[str], bool]]

# Services whose service-specific credentials are removed before deleting a user.
CREDENTIAL_SERVICES = (
    "cassandra.amazonaws.com",
    "codecommit.amazonaws.com",
)

_LOGIN_PROFILE_TRIES = 10
_LOGIN_PROFILE_INTERVAL = 2.0


def _sleep(seconds: float) -> None:
    time.sleep(seconds)


def get_all_iam_users(session: Any, exclude_after: datetime, name_filter: NameFilter = None) -> list[str]:
    """Return the names of users created before ``exclude_after`` that pass ``name_filter``."""
    client = session.client("iam")
    output = client.list_users()
    return [
        user["UserName"]
        for user in output.get("Users", [])
        if (name_filter is None or name_filter(user["UserName"]))
        and exclude_after > user["CreateDate"]
    ]


def detach_user_policies(client: Any, user_name: str) -> None:
    """Detach every managed policy from the user."""
    output = client.list_attached_user_policies(UserName=user_name)
    for policy in output.get("AttachedPolicies", []):
        arn = policy["PolicyArn"]
        try:
            client.detach_user_policy(UserName=user_name, PolicyArn=arn)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise
        logger.info("Detached Policy %s from User %s", arn, user_name)


def delete_inline_user_policies(client: Any, user_name: str) -> None:
    """Delete every inline policy of the user."""
    try:
        output = client.list_user_policies(UserName=user_name)
    except Exception as exc:
        logger.error("[Failed] %s", exc)
        raise
    for policy_name in output.get("PolicyNames", []):
        try:
            client.delete_user_policy(UserName=user_name, PolicyName=policy_name)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise
        logger.info("Deleted Inline Policy %s from User %s", policy_name, user_name)


def remove_user_from_groups(client: Any, user_name: str) -> None:
    """Take the user out of every group it belongs to."""
    output = client.list_groups_for_user(UserName=user_name)
    for group in output.get("Groups", []):
        group_name = group["GroupName"]
        try:
            client.remove_user_from_group(GroupName=group_name, UserName=user_name)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise
        logger.info("Removed user %s from group %s", user_name, group_name)


def delete_login_profile(client: Any, user_name: str) -> None:
    """Delete the user's console login profile, retrying while it is locked."""

    def attempt() -> None:
        try:
            client.delete_login_profile(UserName=user_name)
        except Exception as exc:
            code = error_code(exc)
            if code == "NoSuchEntity":
                # Users created through the API often have no login profile.
                return
            if code == "EntityTemporarilyUnmodifiable":
                raise RuntimeError(
                    f"Login Profile for user {user_name} cannot be deleted now"
                ) from exc
            raise FatalError(exc) from exc
        logger.info("Deleted Login Profile from user %s", user_name)

    do_with_retry(
        "Delete Login Profile",
        _LOGIN_PROFILE_TRIES,
        _LOGIN_PROFILE_INTERVAL,
        attempt,
        sleep=_sleep,
    )


def delete_access_keys(client: Any, user_name: str) -> None:
    """Delete every access key of the user."""
    try:
        output = client.list_access_keys(UserName=user_name)
    except Exception as exc:
        logger.error("[Failed] %s", exc)
        raise
    for metadata in output.get("AccessKeyMetadata", []):
        key_id = metadata["AccessKeyId"]
        try:
            client.delete_access_key(UserName=user_name, AccessKeyId=key_id)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise
        logger.info("Deleted Access Key %s from user %s", key_id, user_name)


def delete_signing_certificates(client: Any, user_name: str) -> None:
    """Delete every signing certificate of the user."""
    try:
        output = client.list_signing_certificates(UserName=user_name)
    except Exception as exc:
        logger.error("[Failed] %s", exc)
        raise
    for certificate in output.get("Certificates", []):
        certificate_id = certificate["CertificateId"]
        try:
            client.delete_signing_certificate(UserName=user_name, CertificateId=certificate_id)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise
        logger.info("Deleted Signing Certificate ID %s from user %s", certificate_id, user_name)


def delete_ssh_public_keys(client: Any, user_name: str) -> None:
    """Delete every SSH public key of the user."""
    try:
        output = client.list_ssh_public_keys(UserName=user_name)
    except Exception as exc:
        logger.error("[Failed] %s", exc)
        raise
    for key in output.get("SSHPublicKeys", []):
        key_id = key["SSHPublicKeyId"]
        try:
            client.delete_ssh_public_key(UserName=user_name, SSHPublicKeyId=key_id)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise
        logger.info("Deleted SSH Public Key with ID %s from user %s", key_id, user_name)


def delete_service_specific_credentials(client: Any, user_name: str) -> None:
    """Delete the user's service-specific credentials for every known service."""
    for service in CREDENTIAL_SERVICES:
        try:
            output = client.list_service_specific_credentials(
                UserName=user_name, ServiceName=service
            )
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise
        for metadata in output.get("ServiceSpecificCredentials", []):
            credential_id = metadata["ServiceSpecificCredentialId"]
            try:
                client.delete_service_specific_credential(
                    UserName=user_name, ServiceSpecificCredentialId=credential_id
                )
            except Exception as exc:
                logger.error("[Failed] %s", exc)
                raise
            logger.info(
                "Deleted Service Specific Credential with ID %s of service %s from user %s",
                credential_id,
                service,
                user_name,
            )


def delete_mfa_devices(client: Any, user_name: str) -> None:
    """Deactivate and then delete every MFA device of the user."""
    try:
        output = client.list_mfa_devices(UserName=user_name)
    except Exception as exc:
        logger.error("[Failed] %s", exc)
        raise
    serial_numbers = [device["SerialNumber"] for device in output.get("MFADevices", [])]

    # Devices must be deactivated before they can be deleted.
    for serial_number in serial_numbers:
        try:
            client.deactivate_mfa_device(UserName=user_name, SerialNumber=serial_number)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise
        logger.info(
            "Deactivated Virtual MFA Device with ID %s from user %s", serial_number, user_name
        )

    for serial_number in serial_numbers:
        try:
            client.delete_virtual_mfa_device(SerialNumber=serial_number)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            raise
        logger.info("Deleted Virtual MFA Device with ID %s from user %s", serial_number, user_name)


def delete_user(client: Any, user_name: str) -> None:
    """Delete the user itself."""
    client.delete_user(UserName=user_name)


# The user itself goes last, so that a forgotten attachment makes the deletion fail.
_USER_STEPS = (
    detach_user_policies,
    delete_inline_user_policies,
    remove_user_from_groups,
    delete_login_profile,
    delete_access_keys,
    delete_signing_certificates,
    delete_ssh_public_keys,
    delete_service_specific_credentials,
    delete_mfa_devices,
    delete_user,
)


def nuke_user(client: Any, user_name: str) -> None:
    """Remove everything attached to a user, then the user."""
    for step in _USER_STEPS:
        step(client, user_name)


def nuke_all_iam_users(session: Any, user_names: Sequence[str]) -> list[str]:
    """Delete every given user; return those deleted.

    Failures do not stop the others; they are raised together as a
    :class:`MultiError` at the end.
    """
    if not user_names:
        logger.info("No IAM Users to nuke")
        return []

    logger.info("Deleting all IAM Users")
    client = session.client("iam")
    deleted = []
    errors = []
    for user_name in user_names:
        try:
            nuke_user(client, user_name)
        except Exception as exc:  # noqa: BLE001 - collected and raised together
            logger.error("[Failed] %s", exc)
            errors.append(exc)
        else:
            deleted.append(user_name)
            logger.info("Deleted IAM User: %s", user_name)

    logger.info("[OK] %d IAM User(s) terminated", len(deleted))
    if errors:
        raise MultiError(errors)
    return deleted


@dataclass
class IAMUsers(AwsResource):
    """All IAM users of the account selected for deletion."""

    user_names: list[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return "iam"

    def resource_identifiers(self) -> list[str]:
        return self.user_names

    def max_batch_size(self) -> int:
        # Tentative batch size to keep AWS from throttling.
        return 200

    def nuke(self, session: Any, identifiers: Sequence[str]) -> None:
        nuke_all_iam_users(session, identifiers)