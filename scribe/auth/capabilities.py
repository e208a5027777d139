"""
Capabilities - the named authorization requirements a route can declare.

This defines WHAT is required, not HOW we check it.
The actual checking happens in policies.py.
"""

from enum import Enum


class Capability(str, Enum):
    """Authorization requirements, each checked independently."""

    AUTHENTICATED = "authenticated"  # Any logged-in user
    ADMIN = "admin"                  # Logged-in user with is_admin
    OWNER = "owner"                  # Logged-in author of the resource


class DenyReason(str, Enum):
    """
    Why a check failed.

    The two reasons are externally different outcomes: one prompts a
    login, the other shows an access-denied result.
    """

    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
