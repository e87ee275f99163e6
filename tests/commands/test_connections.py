"""Tests for the ``connections`` command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from peerlink.cli import cli


def _connect(runner: CliRunner, a: str, b: str) -> str:
    sent = runner.invoke(cli, ["--json", "request", "send", a, b])
    rid = json.loads(sent.stdout)["data"]["request_id"]
    accepted = runner.invoke(cli, ["request", "accept", rid, "--as", b])
    assert accepted.exit_code == 0, accepted.output
    return rid


@pytest.mark.usefixtures("_isolated_root")
class TestConnectionsCommands:
    def test_list_both_sides(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["user", "add", "bob", "--name", "Bob Tran"])
        _connect(cli_runner, "alice", "bob")

        alice = json.loads(
            cli_runner.invoke(cli, ["--json", "connections", "list", "alice"]).stdout
        )
        bob = json.loads(cli_runner.invoke(cli, ["--json", "connections", "list", "bob"]).stdout)
        assert alice["data"]["items"][0]["peer_id"] == "bob"
        assert alice["data"]["items"][0]["name"] == "Bob Tran"
        assert bob["data"]["items"][0]["peer_id"] == "alice"

    def test_list_human(self, cli_runner: CliRunner) -> None:
        _connect(cli_runner, "alice", "bob")
        result = cli_runner.invoke(cli, ["connections", "list", "alice"])
        assert result.exit_code == 0
        assert "bob" in result.stdout
        assert "1 connections" in result.stdout

    def test_check(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["connections", "check", "alice", "bob"])
        assert "not connected" in result.stdout

        _connect(cli_runner, "alice", "bob")
        result = cli_runner.invoke(cli, ["connections", "check", "bob", "alice"])
        assert "are connected" in result.stdout

    def test_remove(self, cli_runner: CliRunner) -> None:
        _connect(cli_runner, "alice", "bob")
        result = cli_runner.invoke(cli, ["--json", "connections", "remove", "alice", "bob"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["edges_removed"] == 2

        again = cli_runner.invoke(cli, ["--json", "connections", "remove", "alice", "bob"])
        assert again.exit_code == 1
        assert json.loads(again.stderr)["error"]["code"] == "NOT_CONNECTED"
