"""Validation utilities for Kubernetes object names."""

import re

_DNS_LABEL = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
_DNS_SUBDOMAIN = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)*$")


def validate_namespace(name: str) -> bool:
    """Validate a namespace name follows the DNS label convention.

    Namespace names must:
    - Be lowercase
    - Start and end with alphanumeric characters
    - Contain only alphanumeric characters and hyphens
    - Be between 1 and 63 characters

    Args:
        name: Namespace name to validate

    Returns:
        True if valid

    Raises:
        ValueError: If name is invalid
    """
    if not name:
        raise ValueError("Namespace name cannot be empty")

    if len(name) > 63:
        raise ValueError("Namespace name must be 63 characters or less")

    if not _DNS_LABEL.match(name):
        raise ValueError(
            "Namespace name must be lowercase alphanumeric with hyphens, "
            "starting and ending with alphanumeric characters"
        )

    return True


def validate_resource_name(name: str) -> bool:
    """Validate an object name follows the DNS subdomain convention.

    Args:
        name: Object name to validate

    Returns:
        True if valid

    Raises:
        ValueError: If name is invalid
    """
    if not name:
        raise ValueError("Resource name cannot be empty")

    if len(name) > 253:
        raise ValueError("Resource name must be 253 characters or less")

    if not _DNS_SUBDOMAIN.match(name):
        raise ValueError(
            f"Invalid resource name: {name}. Must be lowercase alphanumeric "
            "with hyphens or dots, starting and ending with alphanumeric characters"
        )

    return True
