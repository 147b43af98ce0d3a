"""Tests for admin team roles and roster management."""

import os
import tempfile

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from job_tracker.admin import AdminResolver
from job_tracker.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    StoreError,
    ValidationError,
)
from job_tracker.models import Base, TeamMember, User
from job_tracker.team import ADMIN, SUPER_ADMIN, TeamManager, role_allows

BOSS = "boss@example.com"


@pytest.fixture
def db():
    with tempfile.TemporaryDirectory() as tmpdir:
        engine = create_engine(f"sqlite:///{os.path.join(tmpdir, 'team.db')}")
        Base.metadata.create_all(engine)
        session = sessionmaker(bind=engine, expire_on_commit=False)()
        yield session
        session.close()
        engine.dispose()


@pytest.fixture
def resolver():
    return AdminResolver([BOSS])


@pytest.fixture
def team(db, resolver):
    return TeamManager(db, resolver)


class TestRoles:
    def test_super_admin_wildcards(self):
        assert role_allows(SUPER_ADMIN, "write:feedback")
        assert role_allows(SUPER_ADMIN, "manage:team")
        assert role_allows(SUPER_ADMIN, "export:data")

    def test_admin_permissions(self):
        assert role_allows(ADMIN, "write:feedback")
        assert role_allows(ADMIN, "export:data")
        assert not role_allows(ADMIN, "manage:team")
        assert not role_allows(ADMIN, "system:settings")

    def test_no_role(self):
        assert not role_allows(None, "read:jobs")
        assert not role_allows("owner", "read:jobs")

    def test_role_of(self, team):
        assert team.role_of("Boss@Example.com") == SUPER_ADMIN
        assert team.role_of("nobody@example.com") is None
        team.add_member(BOSS, "ops@example.com")
        assert team.role_of("ops@example.com") == ADMIN
        assert team.can_manage(BOSS)
        assert not team.can_manage("ops@example.com")


class TestAddMember:
    def test_add(self, team):
        member = team.add_member(BOSS, " Ops@Example.com ", display_name="Ops", department="Support")
        assert member.id is not None
        assert member.email == "ops@example.com"
        assert member.role == ADMIN
        assert member.added_by == BOSS
        assert member.is_active
        assert [m.email for m in team.list_members()] == ["ops@example.com"]

    def test_duplicate(self, team):
        team.add_member(BOSS, "ops@example.com")
        with pytest.raises(ConflictError):
            team.add_member(BOSS, "OPS@example.com")

    def test_only_super_admins_manage(self, team):
        team.add_member(BOSS, "ops@example.com")
        with pytest.raises(PermissionDeniedError):
            team.add_member("ops@example.com", "friend@example.com")
        with pytest.raises(PermissionDeniedError):
            team.add_member("stranger@example.com", "friend@example.com")

    def test_cannot_grant_super_admin(self, team):
        with pytest.raises(PermissionDeniedError):
            team.add_member(BOSS, "ops@example.com", role=SUPER_ADMIN)
        with pytest.raises(ValidationError):
            team.add_member(BOSS, "ops@example.com", role="owner")
        assert team.list_members() == []

    def test_invalid_email(self, team):
        with pytest.raises(ValidationError) as exc:
            team.add_member(BOSS, "not-an-email")
        assert "email" in exc.value.errors

    def test_add_clears_cached_admin_check(self, db, team, resolver):
        user = User(email="ops@example.com", password_hash="x")
        db.add(user)
        db.commit()
        assert not resolver.is_admin(user)

        team.add_member(BOSS, "ops@example.com")
        db.expire(user)
        assert resolver.is_admin(user)


class TestUpdateAndRemove:
    def test_update(self, team):
        team.add_member(BOSS, "ops@example.com")
        member = team.update_member(BOSS, "ops@example.com", {"display_name": " Ops Lead ", "is_active": False})
        assert member.display_name == "Ops Lead"
        assert team.role_of("ops@example.com") is None

    def test_update_rejects_unknown_fields_and_roles(self, team):
        team.add_member(BOSS, "ops@example.com")
        with pytest.raises(ValidationError):
            team.update_member(BOSS, "ops@example.com", {"email": "other@example.com"})
        with pytest.raises(PermissionDeniedError):
            team.update_member(BOSS, "ops@example.com", {"role": SUPER_ADMIN})
        with pytest.raises(NotFoundError):
            team.update_member(BOSS, "ghost@example.com", {"notes": "x"})

    def test_remove(self, team):
        team.add_member(BOSS, "ops@example.com")
        team.remove_member(BOSS, "ops@example.com")
        assert team.list_members() == []
        assert team.role_of("ops@example.com") is None

    def test_remove_errors(self, team):
        with pytest.raises(PermissionDeniedError):
            team.remove_member(BOSS, BOSS)
        with pytest.raises(NotFoundError):
            team.remove_member(BOSS, "ghost@example.com")
        team.add_member(BOSS, "ops@example.com")
        with pytest.raises(PermissionDeniedError):
            team.remove_member("ops@example.com", "ops@example.com")

    def test_write_failure_raises_store_error(self, db, team, monkeypatch):
        def broken_commit():
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(StoreError):
            team.add_member(BOSS, "ops@example.com")
        monkeypatch.undo()
        assert team.list_members() == []


class TestUserRole:
    def test_admin_flag_follows_membership(self, db, team):
        user = User(email="ops@example.com", password_hash="x")
        db.add(user)
        db.commit()
        assert not user.is_admin

        team.add_member(BOSS, "ops@example.com")
        db.expire(user)
        assert user.is_admin
        assert user.team_role == ADMIN

        team.update_member(BOSS, "ops@example.com", {"is_active": False})
        db.expire(user)
        assert not user.is_admin

    def test_member_before_signup(self, db, team):
        team.add_member(BOSS, "later@example.com")
        user = User(email="later@example.com", password_hash="x")
        db.add(user)
        db.commit()
        assert user.is_admin
        assert db.query(TeamMember).count() == 1
