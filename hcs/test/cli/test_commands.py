from __future__ import annotations

from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from hcs import __version__
from hcs.cli.app import app
from hcs.cli.context import PROJECT_ENV_VAR, CLIContext, build_context, project_root
from hcs.core.config import PublishConfig
from hcs.core.errors import ErrorCode
from hcs.core.result import Err, Ok, Result
from hcs.output.console import MockConsole
from hcs.services.assets import ContentStore, MockContentStore
from hcs.services.credentials import Credentials, MemoryCredentialStore, ScriptedPrompter
from hcs.services.errors import ContentStoreError
from hcs.services.registry import MockRegistryClient

ACCEPTED = {"body": {"success": True, "msg": "ok"}}


def _ctx(root: Path) -> CLIContext:
    return CLIContext(project_root=root, config=PublishConfig(), console=MockConsole())


class _Wiring:
    def __init__(
        self,
        reply: object = None,
        *,
        secrets: dict[str, str] | None = None,
        answers: list[str] | None = None,
        fail_keys: set[str] | None = None,
    ) -> None:
        self.store = MemoryCredentialStore({"AKID": "secret"} if secrets is None else secrets)
        self.prompter = ScriptedPrompter(answers)
        self.registry = MockRegistryClient(ACCEPTED if reply is None else reply)
        self.content = MockContentStore(fail_keys)


def _patch_publish(
    monkeypatch: pytest.MonkeyPatch, ctx: CLIContext, wiring: _Wiring
) -> None:
    import hcs.cli.commands.publish as publish_cmd

    def store_for(
        credentials: Credentials, config: PublishConfig
    ) -> Result[ContentStore, ContentStoreError]:
        return Ok(wiring.content)

    monkeypatch.setattr(publish_cmd, "build_context", lambda: ctx)
    monkeypatch.setattr(publish_cmd, "KeyringCredentialStore", lambda service: wiring.store)
    monkeypatch.setattr(publish_cmd, "TyperPrompter", lambda: wiring.prompter)
    monkeypatch.setattr(publish_cmd, "UrllibRegistryClient", lambda **_: wiring.registry)
    monkeypatch.setattr(publish_cmd, "s3_store_for", store_for)


def test_build_writes_archive(app_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import hcs.cli.commands.build as build_cmd

    ctx = _ctx(app_project)
    monkeypatch.setattr(build_cmd, "build_context", lambda: ctx)

    build_cmd.build(latest=False)

    assert (app_project / "com.example.lights-v1.2.0.tar.gz").is_file()
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("Build finished")
    assert ctx.console.find("sha1: ")


def test_build_without_manifest_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import hcs.cli.commands.build as build_cmd

    monkeypatch.setattr(build_cmd, "build_context", lambda: _ctx(tmp_path))

    with pytest.raises(typer.Exit) as exc:
        build_cmd.build(latest=False)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_publish_success(app_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import hcs.cli.commands.publish as publish_cmd

    ctx = _ctx(app_project)
    wiring = _Wiring()
    _patch_publish(monkeypatch, ctx, wiring)

    publish_cmd.publish(force=False)

    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("Successfully published the app (5 assets uploaded).")
    assert len(wiring.registry.sent) == 1


def test_publish_rejected_exits_user_error(
    app_project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import hcs.cli.commands.publish as publish_cmd

    ctx = _ctx(app_project)
    wiring = _Wiring({"body": {"success": False, "msg": "version exists"}})
    _patch_publish(monkeypatch, ctx, wiring)

    with pytest.raises(typer.Exit) as exc:
        publish_cmd.publish(force=False)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("version exists")
    assert wiring.content.puts == []


def test_publish_partial_failure_exits_partial(
    app_project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import hcs.cli.commands.publish as publish_cmd

    ctx = _ctx(app_project)
    wiring = _Wiring(fail_keys={"com.example.lights/1.2.0/assets/icon.svg"})
    _patch_publish(monkeypatch, ctx, wiring)

    with pytest.raises(typer.Exit) as exc:
        publish_cmd.publish(force=False)

    assert exc.value.exit_code == int(ErrorCode.PARTIAL_PUBLISH)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("1 of 5 assets failed to upload")
    assert ctx.console.find("  failed: assets/icon.svg")
    assert not ctx.console.find("Successfully published")


def test_publish_cancelled(app_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import hcs.cli.commands.publish as publish_cmd

    ctx = _ctx(app_project)
    wiring = _Wiring(secrets={}, answers=["AKID", ""])
    _patch_publish(monkeypatch, ctx, wiring)

    with pytest.raises(typer.Exit) as exc:
        publish_cmd.publish(force=False)

    assert exc.value.exit_code == int(ErrorCode.CANCELLED)
    assert wiring.registry.sent == []


def test_publish_content_store_failure_exits_env_error(
    app_project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import hcs.cli.commands.publish as publish_cmd

    ctx = _ctx(app_project)
    wiring = _Wiring()
    _patch_publish(monkeypatch, ctx, wiring)
    monkeypatch.setattr(
        publish_cmd,
        "s3_store_for",
        lambda credentials, config: Err(ContentStoreError("profile (nope) not found")),
    )

    with pytest.raises(typer.Exit) as exc:
        publish_cmd.publish(force=False)

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
    assert wiring.registry.sent == []
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("could not set up the content store")


def test_logout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import hcs.cli.commands.logout as logout_cmd

    ctx = _ctx(tmp_path)
    store = MemoryCredentialStore({"AKID": "secret"})
    monkeypatch.setattr(logout_cmd, "build_context", lambda: ctx)
    monkeypatch.setattr(logout_cmd, "KeyringCredentialStore", lambda service: store)

    logout_cmd.logout()

    assert store.secrets == {}
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("1 stored key(s) removed")


def test_project_root_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PROJECT_ENV_VAR, str(tmp_path))
    assert project_root() == tmp_path.resolve()


def test_build_context_reads_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".hcs.toml").write_text('[assets]\nbucket = "staging"\n', encoding="utf-8")
    monkeypatch.setenv(PROJECT_ENV_VAR, str(tmp_path))
    monkeypatch.delenv("HCS_CONFIG", raising=False)

    ctx = build_context()

    assert ctx.config.bucket == "staging"
    assert ctx.project_root == tmp_path.resolve()


def test_build_context_invalid_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".hcs.toml").write_text("[assets\n", encoding="utf-8")
    monkeypatch.setenv(PROJECT_ENV_VAR, str(tmp_path))
    monkeypatch.delenv("HCS_CONFIG", raising=False)

    with pytest.raises(typer.Exit) as exc:
        build_context()

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)


def test_version_flag() -> None:
    result = CliRunner().invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_build_via_app(app_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # the --project callback writes the variable; setenv restores it afterwards
    monkeypatch.setenv(PROJECT_ENV_VAR, str(app_project))
    monkeypatch.delenv("HCS_CONFIG", raising=False)

    result = CliRunner().invoke(app, ["--project", str(app_project), "build", "--latest"])

    assert result.exit_code == 0, result.output
    assert (app_project / "com.example.lights-latest.tar.gz").is_file()


def test_missing_project_dir(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["--project", str(tmp_path / "nope"), "build"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)

