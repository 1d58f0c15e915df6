import pytest
from click.testing import CliRunner

from cli import cli
from services.account_monitor.models import AccountSnapshot
from services.auth.models import LoginFailure, LoginResult

TOKEN = "0f3c2a9e-7b1d-4c55-9e0a-3d2b1c4f5e6a"
LOGIN_ARGS = ["login", "-u", "12345", "-p", "secret", "-s", "Broker-Demo"]


@pytest.fixture
def runner(tmp_path, monkeypatch):
    # Keep a developer's .env out of Settings()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MT5_TOKEN", raising=False)
    return CliRunner()


def fake_login(result, calls):
    async def _login(credentials, settings=None):
        calls.append(credentials)
        return result
    return _login


def test_login_failure_exits_with_api_message(runner, monkeypatch):
    calls = []
    monkeypatch.setattr(
        "services.auth.session_client.login",
        fake_login(LoginResult.failed(LoginFailure.API, "Invalid account or password"), calls),
    )

    result = runner.invoke(cli, LOGIN_ARGS)

    assert result.exit_code == 1
    assert "Error: Invalid account or password" in result.output
    assert "Login succeeded." not in result.output
    assert calls[0].username == "12345"
    assert calls[0].server == "Broker-Demo"


def test_login_success_prints_token_only_when_asked(runner, monkeypatch):
    calls = []
    monkeypatch.setattr("services.auth.session_client.login", fake_login(LoginResult.ok(TOKEN), calls))

    quiet = runner.invoke(cli, LOGIN_ARGS)
    shown = runner.invoke(cli, LOGIN_ARGS + ["--show-token"])

    assert quiet.exit_code == 0
    assert quiet.output == "Login succeeded.\n"
    assert shown.exit_code == 0
    assert TOKEN in shown.output
    assert len(calls) == 2


def test_snapshot_renders_account(runner, monkeypatch):
    tokens = []

    async def fake_fetch(token, settings=None):
        tokens.append(token)
        return AccountSnapshot(balance=1500.0, accountNumber="12345", accountName="Demo", serverName="Broker-Demo")

    monkeypatch.setattr("services.account_monitor.fetcher.fetch_snapshot", fake_fetch)

    result = runner.invoke(cli, ["snapshot", "--token", TOKEN])

    assert result.exit_code == 0
    assert "Account 12345 (Demo) @ Broker-Demo" in result.output
    assert tokens == [TOKEN]


def test_snapshot_requires_a_token(runner):
    result = runner.invoke(cli, ["snapshot"])

    assert result.exit_code == 2
    assert "--token" in result.output
