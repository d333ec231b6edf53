"""Caller role enum for role-based access control."""

from enum import Enum as PyEnum


class UserRole(str, PyEnum):
    """
    Roles carried in the access token.

    - USER: records and manages their own transactions
    - ADMIN: reads, deletes and aggregates every user's transactions
    """

    USER = "user"
    ADMIN = "admin"
