"""Admin team management: roles, permissions and roster changes.

Allow-listed emails are super-admins. Everyone else gets a role only through an
active TeamMember row. Only super-admins manage the roster, and they may only
grant the plain admin role.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from job_tracker.admin import AdminResolver
from job_tracker.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    StoreError,
    ValidationError,
)
from job_tracker.models import TeamMember
from job_tracker.utils.sanitize import is_valid_email, sanitize_email, sanitize_notes, sanitize_text

logger = logging.getLogger("job_tracker.team")

SUPER_ADMIN = "super-admin"
ADMIN = "admin"
TEAM_ROLES = (SUPER_ADMIN, ADMIN)

ROLE_PERMISSIONS = {
    SUPER_ADMIN: [
        "read:all",
        "write:all",
        "delete:all",
        "manage:users",
        "manage:admins",
        "manage:team",
        "export:data",
        "view:analytics",
        "system:settings",
        "invite:users",
        "promote:users",
    ],
    ADMIN: [
        "read:jobs",
        "write:jobs",
        "delete:jobs",
        "read:feedback",
        "write:feedback",
        "delete:feedback",
        "export:data",
        "view:analytics",
    ],
}

ROLE_DESCRIPTIONS = {
    SUPER_ADMIN: "Full access to all features including user management and system settings",
    ADMIN: "Manage jobs and feedback, view analytics (cannot manage team members)",
}

UPDATABLE_FIELDS = ("role", "display_name", "department", "notes", "is_active")


def role_allows(role: str | None, permission: str) -> bool:
    """True if role grants permission directly or through the matching "<verb>:all"."""
    granted = ROLE_PERMISSIONS.get(role or "", [])
    verb = permission.split(":", 1)[0]
    return permission in granted or f"{verb}:all" in granted


class TeamManager:
    def __init__(self, db: Session, resolver: AdminResolver):
        self.db = db
        self.resolver = resolver

    def get_member(self, email: str) -> TeamMember | None:
        email = sanitize_email(email)
        if not email:
            return None
        return self.db.query(TeamMember).filter(TeamMember.email == email).first()

    def list_members(self) -> list[TeamMember]:
        return self.db.query(TeamMember).order_by(TeamMember.added_at).all()

    def role_of(self, email: str) -> str | None:
        if self.resolver.is_listed(email):
            return SUPER_ADMIN
        member = self.get_member(email)
        if member is None or not member.is_active:
            return None
        return member.role

    def has_permission(self, email: str, permission: str) -> bool:
        return role_allows(self.role_of(email), permission)

    def can_manage(self, email: str) -> bool:
        return self.role_of(email) == SUPER_ADMIN

    def _require_manager(self, actor_email: str) -> None:
        if not self.can_manage(actor_email):
            raise PermissionDeniedError("Insufficient permissions to manage team members")

    def _check_assignable(self, role: str) -> None:
        if role not in TEAM_ROLES:
            raise ValidationError({"role": f"Unknown role: {role}"})
        if role != ADMIN:
            raise PermissionDeniedError(f"Insufficient permissions to assign {role} role")

    def add_member(
        self,
        actor_email: str,
        email: str,
        role: str = ADMIN,
        display_name: str = "",
        department: str = "",
        notes: str = "",
    ) -> TeamMember:
        self._require_manager(actor_email)

        email = sanitize_email(email)
        if not is_valid_email(email):
            raise ValidationError({"email": "Please enter a valid email address."})
        if self.get_member(email) is not None:
            raise ConflictError("Team member already exists")
        self._check_assignable(role)

        member = TeamMember(
            email=email,
            role=role,
            display_name=sanitize_text(display_name),
            department=sanitize_text(department),
            notes=sanitize_notes(notes),
            added_by=sanitize_email(actor_email),
            is_active=True,
        )
        self._commit(lambda: self.db.add(member), "Failed to add team member")
        self.resolver.forget(email)
        logger.info("%s added %s to the team as %s", actor_email, email, role)
        return member

    def update_member(self, actor_email: str, email: str, updates: dict) -> TeamMember:
        self._require_manager(actor_email)

        member = self.get_member(email)
        if member is None:
            raise NotFoundError("Team member not found")
        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError({name: "This field cannot be changed." for name in sorted(unknown)})
        if "role" in updates:
            self._check_assignable(updates["role"])

        values = dict(updates)
        for name in ("display_name", "department"):
            if name in values:
                values[name] = sanitize_text(values[name])
        if "notes" in values:
            values["notes"] = sanitize_notes(values["notes"])
        if "is_active" in values:
            values["is_active"] = bool(values["is_active"])

        def apply():
            for name, value in values.items():
                setattr(member, name, value)

        self._commit(apply, "Failed to update team member")
        self.resolver.forget(member.email)
        logger.info("%s updated team member %s: %s", actor_email, member.email, sorted(values))
        return member

    def remove_member(self, actor_email: str, email: str) -> None:
        self._require_manager(actor_email)

        if sanitize_email(actor_email) == sanitize_email(email):
            raise PermissionDeniedError("Cannot remove yourself from the team")
        member = self.get_member(email)
        if member is None:
            raise NotFoundError("Team member not found")

        self._commit(lambda: self.db.delete(member), "Failed to remove team member")
        self.resolver.forget(member.email)
        logger.info("%s removed %s from the team", actor_email, member.email)

    def _commit(self, change, message: str) -> None:
        try:
            change()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("%s: %s", message, e)
            raise StoreError(f"{message}. Please try again.") from e
