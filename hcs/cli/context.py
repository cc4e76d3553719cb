from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from hcs.core.config import PublishConfig, config_path_for, load_config_or_default
from hcs.core.errors import ErrorCode
from hcs.core.result import Err
from hcs.output.console import ConsoleProtocol, RichConsole
from hcs.output.errors import print_config_error

PROJECT_ENV_VAR = "HCS_PROJECT_ROOT"


@dataclass(frozen=True, slots=True)
class CLIContext:
    project_root: Path
    config: PublishConfig
    console: ConsoleProtocol


def project_root() -> Path:
    env = os.environ.get(PROJECT_ENV_VAR)
    if env:
        return Path(env).expanduser().resolve()
    return Path.cwd().resolve()


def build_context() -> CLIContext:
    console = RichConsole()
    root = project_root()
    if not root.is_dir():
        console.error(f"project root is not a directory: {root}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config_result = load_config_or_default(config_path_for(root))
    if isinstance(config_result, Err):
        print_config_error(config_result.error, console)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(project_root=root, config=config_result.value, console=console)
