"""
Tests for the management CLI.
"""

import pytest
from typer.testing import CliRunner

from admin_api import cli
from admin_api.container import AppContainer
from admin_api.services.media import InlineImageUploader
from conftest import run
from shared.config.settings import get_settings
from shared.security.auth import verify_jwt

runner = CliRunner()


@pytest.fixture
def shared_store(memory_store, monkeypatch):
    """Every CLI invocation builds its container around the same memory store."""
    monkeypatch.setattr(
        cli,
        "_build_container",
        lambda: AppContainer.build(get_settings(), store=memory_store, uploader=InlineImageUploader()),
    )
    return memory_store


@pytest.fixture
def cli_container(shared_store):
    return AppContainer.build(get_settings(), store=shared_store, uploader=InlineImageUploader())


class TestTenantCommands:
    def test_bootstrap_first_super_admin(self, cli_container):
        result = runner.invoke(cli.app, ["create-tenant", "root", "root@example.com", "--role", "super_admin"])

        assert result.exit_code == 0
        assert run(cli_container.oracle.is_super_admin("root")) is True

    def test_existing_profile_is_not_overwritten(self, cli_container):
        runner.invoke(cli.app, ["create-tenant", "u1", "u1@example.com", "--name", "First"])

        result = runner.invoke(cli.app, ["create-tenant", "u1", "u1@example.com", "--name", "Second"])

        assert result.exit_code == 1
        assert run(cli_container.profiles.get_profile("u1")).restaurant_name == "First"

    def test_unknown_role_fails(self, shared_store):
        result = runner.invoke(cli.app, ["create-tenant", "u1", "u1@example.com", "--role", "emperor"])
        assert result.exit_code == 1

    def test_last_super_admin_cannot_be_demoted(self, shared_store):
        runner.invoke(cli.app, ["create-tenant", "root", "r@example.com", "--role", "super_admin"])

        result = runner.invoke(cli.app, ["set-role", "root", "restaurant_owner"])

        assert result.exit_code == 1

    def test_set_active(self, cli_container):
        runner.invoke(cli.app, ["create-tenant", "u1", "u1@example.com"])

        result = runner.invoke(cli.app, ["set-active", "u1", "--inactive"])

        assert result.exit_code == 0
        assert run(cli_container.profiles.get_profile("u1")).is_active is False


class TestReportCommands:
    def test_stats(self, shared_store):
        runner.invoke(cli.app, ["create-tenant", "u1", "u1@example.com"])

        result = runner.invoke(cli.app, ["stats"])

        assert result.exit_code == 0
        assert "Restaurants" in result.output

    def test_tenants_rejects_unknown_status(self, shared_store):
        result = runner.invoke(cli.app, ["tenants", "--status", "asleep"])
        assert result.exit_code == 1

    def test_orphans(self, cli_container):
        category = run(cli_container.categories.create("u1", {"name": "Gone"}))
        run(cli_container.menu_items.create("u1", {"name": "Left", "price": 1, "category_id": category.id}))

        clean = runner.invoke(cli.app, ["orphans", "u1"])
        run(cli_container.categories.delete("u1", category.id))
        dirty = runner.invoke(cli.app, ["orphans", "u1"])

        assert clean.exit_code == 0
        assert dirty.exit_code == 1


class TestDevelopmentCommands:
    def test_issue_token(self):
        result = runner.invoke(cli.app, ["issue-token", "u1", "--email", "u1@example.com"])

        assert result.exit_code == 0
        assert verify_jwt(result.output.strip())["sub"] == "u1"
