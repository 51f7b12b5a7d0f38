from __future__ import annotations

import json

from typer.testing import CliRunner

from longport_cli import main


def test_config_show_json_is_redacted(creds_env, tmp_path) -> None:
    creds_env.setenv("ENABLE_OVERNIGHT", "True")
    runner = CliRunner()
    result = runner.invoke(main.app, ["config", "show", "--json", "--env-file", str(tmp_path / "none.env")])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["params"]["app_key"] == "app-key"
    assert data["params"]["enable_overnight"] is True
    assert data["params"]["language"] == "en"
    assert data["sources"]["enable_overnight"] == "process_env"
    assert data["sources"]["http_url"] == "default"
    assert "app-secret-value" not in result.output
    assert "access-token-value" not in result.output


def test_config_show_reads_env_file(clean_env, tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("APP_KEY=k\nAPP_SECRET=s3cr3t-file\nACCESS_TOKEN=t0ken-file\nLANGUAGE=zh-HK\n",
                        encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(main.app, ["config", "show", "--json", "--env-file", str(env_file)])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["params"]["language"] == "zh-HK"
    assert data["sources"]["app_key"] == "env_file"


def test_config_show_table(creds_env, tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(main.app, ["config", "show", "--env-file", str(tmp_path / "none.env")])
    assert result.exit_code == 0, result.output
    assert "app_key" in result.output
    assert "app-secret-value" not in result.output


def test_config_show_reports_invalid_enum(creds_env, tmp_path) -> None:
    creds_env.setenv("PUSH_CANDLESTICK_MODE", "weekly")
    runner = CliRunner()
    result = runner.invoke(main.app, ["config", "show", "--env-file", str(tmp_path / "none.env")])
    assert result.exit_code == 2
    assert "PUSH_CANDLESTICK_MODE" in result.output
    assert "weekly" in result.output


def test_config_show_reports_missing_credentials(clean_env, tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(main.app, ["config", "show", "--env-file", str(tmp_path / "none.env")])
    assert result.exit_code == 2
    assert "APP_KEY" in result.output


def test_config_show_with_prefix(clean_env, tmp_path) -> None:
    clean_env.setenv("LONGPORT_APP_KEY", "pk")
    clean_env.setenv("LONGPORT_APP_SECRET", "ps-secret")
    clean_env.setenv("LONGPORT_ACCESS_TOKEN", "pt-token")
    runner = CliRunner()
    result = runner.invoke(
        main.app,
        ["config", "show", "--json", "--prefix", "LONGPORT_", "--env-file", str(tmp_path / "none.env")],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["params"]["app_key"] == "pk"
