"""
Tests for CLI commands — registry, push, verify, check-config.

Uses Click's CliRunner with the test fleet injected through ctx.obj.
"""

from __future__ import annotations

import asyncio
import json

import pytest
from click.testing import CliRunner

from repofleet.config.settings import FleetSettings
from repofleet.main import cli


@pytest.fixture
def invoke(settings, fleet):
    runner = CliRunner()

    def _invoke(*args, input=None):
        return runner.invoke(
            cli,
            list(args),
            obj={"settings": settings, "fleet_factory": lambda: fleet},
            input=input,
        )

    return _invoke


class TestRegistryCommands:

    def test_empty_list(self, invoke):
        result = invoke("repo-list")
        assert result.exit_code == 0
        assert "No repositories registered" in result.output

    def test_add_then_list(self, invoke, mock_host):
        mock_host.add_repository("acme", "app")

        result = invoke("repo-add", "https://github.com/acme/app", "--nickname", "Prod")
        assert result.exit_code == 0, result.output
        assert "Repository added: Prod" in result.output
        assert "marked as master" in result.output

        listed = json.loads(invoke("repo-list", "--json").output)
        assert listed[0]["nickname"] == "Prod"
        assert listed[0]["last_commit"] == mock_host.tip("acme", "app")

    def test_label_and_set_master(self, invoke, seeded, read_repo):
        assert invoke("repo-label", seeded.target_id, "Mirror").exit_code == 0
        result = invoke("repo-set-master", seeded.target_id)
        assert "Master repository is now Mirror" in result.output
        assert read_repo(seeded.source_id).is_master is False

    def test_remove_requires_confirmation(self, invoke, seeded, read_repo):
        result = invoke("repo-remove", seeded.target_id, input="n\n")
        assert result.exit_code == 1
        assert read_repo(seeded.target_id).id == seeded.target_id

        result = invoke("repo-remove", seeded.target_id, "--yes")
        assert result.exit_code == 0
        assert "Repository deleted" in result.output

    def test_refresh(self, invoke, seeded):
        result = invoke("refresh", seeded.source_id)
        assert result.exit_code == 0
        assert "Default branch: main" in result.output
        assert "Add feature" in result.output

    def test_unknown_id_exits_1(self, invoke):
        result = invoke("refresh", "missing")
        assert result.exit_code == 1
        assert "RepositoryNotFound: Repository not found: missing" in result.output


class TestPushCommand:

    def test_push_and_verify(self, invoke, mock_host, seeded):
        result = invoke("push", seeded.source_id, seeded.target_id)

        assert result.exit_code == 0, result.output
        assert "Starting regular push operation to 1 target(s)" in result.output
        assert "Push verified successful" in result.output
        assert mock_host.tip("mirror", "app") == seeded.source_tip

    def test_json_output(self, invoke, seeded):
        result = invoke("push", seeded.source_id, seeded.target_id,
                        "--strategy", "force", "--no-verify", "--json")
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["strategy"] == "force"
        assert "verification" not in payload

    def test_no_targets(self, invoke, seeded):
        result = invoke("push", seeded.source_id)
        assert result.exit_code == 2
        assert "at least one target" in result.output

    def test_master_target_aborts_on_any_no(self, invoke, mock_host, seeded):
        before = mock_host.tip("acme", "app")

        result = invoke("push", seeded.target_id, seeded.source_id,
                        "--strategy", "force", input="y\ny\nn\n")

        assert result.exit_code == 1
        assert "MASTER repository" in result.output
        assert "Final confirmation" in result.output
        assert mock_host.tip("acme", "app") == before
        assert mock_host.call_count("update_ref") == 0

    def test_master_target_after_three_confirmations(self, invoke, mock_host, seeded):
        result = invoke("push", seeded.target_id, seeded.source_id,
                        "--strategy", "force", "--no-verify", input="y\ny\ny\n")

        assert result.exit_code == 0, result.output
        assert mock_host.tip("acme", "app") == seeded.target_tip

    def test_yes_skips_confirmations(self, invoke, mock_host, seeded):
        result = invoke("push", seeded.target_id, seeded.source_id,
                        "--strategy", "force", "--no-verify", "--yes")
        assert result.exit_code == 0
        assert "MASTER" not in result.output

    def test_partial_failure_exits_1(self, invoke, mock_host, seeded):
        mock_host.inject_failure("update_ref", repo="mirror/app", status=403,
                                 message="Resource not accessible")
        result = invoke("push", seeded.source_id, seeded.target_id,
                        "--strategy", "force", "--continue-on-error")
        assert result.exit_code == 1
        assert "Resource not accessible" in result.output


class TestVerifyCommand:

    def test_diverged_exits_1(self, invoke, seeded):
        result = invoke("verify", seeded.source_id, seeded.target_id)
        assert result.exit_code == 1
        assert "0/1 in sync" in result.output

    def test_missing_source_commit(self, invoke, mock_host, seeded, fleet):
        fresh = asyncio.run(fleet.registry.register("https://github.com/acme/new"))
        result = invoke("verify", fresh.id, seeded.target_id)
        assert result.exit_code == 1
        assert "Source commit information not available" in result.output


class TestCheckConfig:

    def test_mock_settings_configured(self, invoke):
        result = invoke("check-config", "--json")
        assert result.exit_code == 0
        assert json.loads(result.output)["configured"] is True

    def test_missing_token(self, tmp_path):
        result = CliRunner().invoke(
            cli, ["check-config"],
            obj={"settings": FleetSettings(registry_file=tmp_path / "r.json")},
        )
        assert result.exit_code == 1
        assert "GITHUB_ACCESS_TOKEN" in result.output


class TestServe:

    def test_passes_bind_options(self, invoke, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "repofleet.admin.server.run_server",
            lambda **kwargs: calls.append(kwargs),
        )
        result = invoke("serve", "--host", "0.0.0.0", "--port", "8080", "--debug")
        assert result.exit_code == 0, result.output
        assert calls == [{"host": "0.0.0.0", "port": 8080, "debug": True}]
