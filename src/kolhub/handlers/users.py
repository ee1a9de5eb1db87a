"""User account resource handler: login, CRUD, and password changes."""

from __future__ import annotations

from typing import Any

import structlog

from kolhub.auth import (
    PASSWORD_POLICY_MESSAGE,
    PASSWORD_TOO_LONG_MESSAGE,
    PasswordHasher,
    TokenService,
    fits_hash_limit,
    meets_password_policy,
)
from kolhub.domain.models import Principal
from kolhub.domain.types import ROLE_VALUES, UserRole
from kolhub.handlers.envelope import Envelope, failure, gateway_failures, parse_id, success
from kolhub.pagination import offset_for, paginate
from kolhub.persistence.gateway import Gateway, Where

logger = structlog.get_logger()

PUBLIC_USER_COLUMNS: tuple[str, ...] = ("id", "username", "email", "role", "created_at")
SORTABLE_COLUMNS: tuple[str, ...] = ("username", "email", "created_at")

NEW_PASSWORD_POLICY_MESSAGE = (
    "The new password must have at least 8 characters, contain uppercase letters, "
    "lowercase letters, numbers, and special characters."
)


def _public(user: dict[str, Any]) -> dict[str, Any]:
    return {name: user[name] for name in PUBLIC_USER_COLUMNS}


class UserHandler:
    """User operations over an injected gateway.

    Args:
        gateway: Persistence gateway.
        hasher: Password hashing service.
        tokens: Bearer token issuer used by ``login``.
    """

    def __init__(self, gateway: Gateway, hasher: PasswordHasher, tokens: TokenService) -> None:
        self._gateway = gateway
        self._hasher = hasher
        self._tokens = tokens

    @gateway_failures("Login failed.")
    def login(self, body: Any) -> Envelope:
        """Exchange email and password for a signed bearer token."""
        body = body if isinstance(body, dict) else {}
        email, password = body.get("email"), body.get("password")
        if not all(isinstance(v, str) and v for v in (email, password)):
            return failure(400, "Email and password is required.")

        user = self._gateway.find_first("users", Where(equals={"email": email}))
        if user is None:
            logger.info("Login rejected", reason="unknown_email")
            return failure(401, "Email not registered")

        if not self._hasher.verify(password, user["password"]):
            logger.info("Login rejected", reason="wrong_password", user_id=user["id"])
            return failure(401, "wrong password")

        principal = Principal(id=user["id"], username=user["username"], role=user["role"])
        logger.info("Login succeeded", user_id=user["id"], role=user["role"])
        return success("Login successfully.", data={"token": self._tokens.issue(principal)})

    @gateway_failures("Failed create user")
    def create(self, body: Any) -> Envelope:
        body = body if isinstance(body, dict) else {}
        username, email = body.get("username"), body.get("email")
        password, role = body.get("password"), body.get("role")
        if not all(isinstance(v, str) and v for v in (username, email, password, role)):
            return failure(400, "All fields must be filled, including role")

        if not meets_password_policy(password):
            return failure(400, PASSWORD_POLICY_MESSAGE)
        if not fits_hash_limit(password):
            return failure(400, PASSWORD_TOO_LONG_MESSAGE)

        if role not in ROLE_VALUES:
            return failure(400, "Invalid role")

        if self._taken(username, email):
            return failure(400, "Email or username is already registered.")

        user = self._gateway.create(
            "users",
            {
                "username": username,
                "email": email,
                "password": self._hasher.hash(password),
                "role": role,
            },
        )
        logger.info("User created", user_id=user["id"], role=role)
        return success(
            f"User {user['username']} created successfully.", 201, data=_public(user)
        )

    @gateway_failures("Failed to fetch users.")
    def list_page(
        self,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        sort_by: str = "created_at",
        order: str = "asc",
    ) -> Envelope:
        """Page of users without password hashes.

        Unknown *sort_by* falls back to ``created_at`` and unknown *order*
        to ``asc``; *limit* is at least 1.
        """
        limit = max(limit, 1)
        sort_field = sort_by if sort_by in SORTABLE_COLUMNS else "created_at"
        direction = order.lower() if order.lower() in ("asc", "desc") else "asc"

        where = Where(search=search, search_columns=("username", "email"))
        total = self._gateway.count("users", where)
        users = self._gateway.find_many(
            "users",
            where,
            skip=offset_for(page, limit),
            take=limit,
            order_by=[(sort_field, direction), ("id", direction)],
            columns=PUBLIC_USER_COLUMNS,
        )
        return success(
            "Users fetched successfully.",
            data=users,
            pagination=paginate(page, limit, total),
        )

    @gateway_failures("Failed to update User data.")
    def update(self, body: Any, principal: Principal) -> Envelope:
        """Patch username, email, role or password.

        Non-admins may only patch their own account and may change neither
        role nor password.
        """
        body = body if isinstance(body, dict) else {}
        user_id = parse_id(body.get("id"))
        if user_id is None:
            return failure(400, "User ID is required.")

        if not principal.is_admin and principal.id != user_id:
            return failure(403, "You are not allowed to update other users")

        updates: dict[str, Any] = {}
        for name in ("username", "email"):
            if name in body:
                if not isinstance(body[name], str) or not body[name]:
                    return failure(400, f"{name} must be a non-empty string.")
                updates[name] = body[name]

        if "role" in body:
            if not principal.is_admin:
                return failure(403, "You do not have permission to change roles")
            if body["role"] not in ROLE_VALUES:
                return failure(400, "Invalid role")
            updates["role"] = UserRole(body["role"]).value

        if "password" in body:
            if not meets_password_policy(body["password"]):
                return failure(400, PASSWORD_POLICY_MESSAGE)
            if not fits_hash_limit(body["password"]):
                return failure(400, PASSWORD_TOO_LONG_MESSAGE)
            if not principal.is_admin:
                return failure(403, "You are not allowed to change the password")
            updates["password"] = self._hasher.hash(body["password"])

        if not updates:
            return failure(400, "No data updated")

        if self._gateway.find_unique("users", user_id) is None:
            return failure(404, "User not found.")

        if self._taken(updates.get("username"), updates.get("email"), exclude_id=user_id):
            return failure(400, "Email or username is already registered.")

        user = self._gateway.update("users", user_id, updates)
        logger.info("User updated", user_id=user_id, fields=sorted(updates))
        return success(f"User {user['username']} updated successfully", data=_public(user))

    @gateway_failures("Failed to delete User data.")
    def delete(self, raw_id: Any) -> Envelope:
        user_id = parse_id(raw_id)
        if user_id is None:
            return failure(400, "User ID is required.")

        if self._gateway.find_unique("users", user_id) is None:
            return failure(404, "User not found.")

        self._gateway.delete("users", user_id)
        logger.info("User deleted", user_id=user_id)
        return success("User data successfully deleted.")

    @gateway_failures("Failed to change password.")
    def change_password(self, body: Any, principal: Principal) -> Envelope:
        """Replace the caller's password after verifying the old one."""
        body = body if isinstance(body, dict) else {}
        old_password, new_password = body.get("oldPassword"), body.get("newPassword")
        if not old_password or not new_password:
            return failure(400, "Old password and new password is required")

        if not meets_password_policy(new_password):
            return failure(400, NEW_PASSWORD_POLICY_MESSAGE)
        if not fits_hash_limit(new_password):
            return failure(400, PASSWORD_TOO_LONG_MESSAGE)

        user = self._gateway.find_unique("users", principal.id)
        if user is None:
            return failure(404, "User not found")

        if not isinstance(old_password, str) or not self._hasher.verify(
            old_password, user["password"]
        ):
            return failure(400, "Old password is invalid")

        self._gateway.update("users", principal.id, {"password": self._hasher.hash(new_password)})
        logger.info("Password changed", user_id=principal.id)
        return success("Password changed successfully")

    def _taken(
        self,
        username: str | None,
        email: str | None,
        exclude_id: int | None = None,
    ) -> bool:
        """Whether another account already uses *username* or *email*."""
        groups = tuple(
            {column: value}
            for column, value in (("username", username), ("email", email))
            if value is not None
        )
        if not groups:
            return False
        not_equals = {"id": exclude_id} if exclude_id is not None else {}
        match = self._gateway.find_first("users", Where(any_of=groups, not_equals=not_equals))
        return match is not None
