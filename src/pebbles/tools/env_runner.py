"""Run startup commands and named tasks from ``.cursor/environment.json``.

Usage:
    pebbles-env                 # run startup commands (default)
    pebbles-env startup
    pebbles-env task <name>
    pebbles-env help

Config shape::

    {
      "startup": {"commands": ["npm ci", {"name": "db", "command": "...",
                                          "required": true, "retries": 2,
                                          "retryDelay": 5}]},
      "tasks": {"test": {"description": "...", "commands": ["npm test"],
                         "environmentVariables": {"CI": "1"}}}
    }

Commands run sequentially through ``/bin/bash``. A command is attempted up to
``retries + 1`` times, ``retry_delay_s`` apart. A ``required`` command that
still fails (and is not ``continue_on_error``) stops the run with exit code 1.
"""

from __future__ import annotations

import argparse
import json
import os
import subprocess
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from pebbles.core.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

ENV_FILE = Path(".cursor") / "environment.json"
SHELL = "/bin/bash"

Runner = Callable[..., "subprocess.CompletedProcess[Any]"]


class RequiredCommandFailed(RuntimeError):
    """A required command exhausted its retries."""

    def __init__(self, name: str, attempts: int) -> None:
        super().__init__(f"{name} failed after {attempts} attempts")
        self.name = name
        self.attempts = attempts


@dataclass(frozen=True)
class CommandSpec:
    """One named shell command with retry policy."""

    command: str
    name: Optional[str] = None
    required: bool = False
    retries: int = 0
    retry_delay_s: float = 1.0
    continue_on_error: bool = False

    @property
    def label(self) -> str:
        return self.name or "Command"

    @classmethod
    def from_json(cls, value: Any) -> "CommandSpec":
        """Accept a bare command string or a command object."""
        if isinstance(value, str):
            return cls(command=value)
        if not isinstance(value, Mapping) or not value.get("command"):
            raise ValueError(f"Invalid command entry: {value!r}")
        delay = value.get("retryDelaySeconds", value.get("retryDelay", 1))
        return cls(
            command=str(value["command"]),
            name=value.get("name"),
            required=bool(value.get("required", False)),
            retries=max(0, int(value.get("retries", 0))),
            retry_delay_s=max(0.0, float(delay)),
            continue_on_error=bool(value.get("continueOnError", False)),
        )


@dataclass(frozen=True)
class TaskSpec:
    name: str
    description: str = ""
    commands: tuple[CommandSpec, ...] = ()
    environment: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EnvConfig:
    startup: tuple[CommandSpec, ...] = ()
    tasks: Mapping[str, TaskSpec] = field(default_factory=dict)

    @classmethod
    def from_json_dict(cls, d: Mapping[str, Any]) -> "EnvConfig":
        startup_raw = (d.get("startup") or {}).get("commands") or []
        tasks: dict[str, TaskSpec] = {}
        for name, t in (d.get("tasks") or {}).items():
            tasks[name] = TaskSpec(
                name=name,
                description=str(t.get("description") or ""),
                commands=tuple(CommandSpec.from_json(c) for c in t.get("commands") or []),
                environment={str(k): str(v) for k, v in (t.get("environmentVariables") or {}).items()},
            )
        return cls(startup=tuple(CommandSpec.from_json(c) for c in startup_raw), tasks=tasks)

    @classmethod
    def load(cls, path: Path) -> "EnvConfig":
        """Read and parse the config file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not valid JSON or has a bad shape.
        """
        raw = path.read_text(encoding="utf-8")
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError(f"{path} does not contain a JSON object")
        return cls.from_json_dict(parsed)


def run_command(
    spec: CommandSpec,
    *,
    env: Optional[Mapping[str, str]] = None,
    runner: Runner = subprocess.run,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Run a command with retries.

    Returns:
        True if an attempt succeeded, False if all attempts failed and the
        failure is tolerated.

    Raises:
        RequiredCommandFailed: If ``spec.required`` and not ``continue_on_error``.
    """
    logger.info(f"-> {spec.name or 'Running command'}: {spec.command}")

    attempts = 0
    while attempts <= spec.retries:
        result = runner(spec.command, shell=True, executable=SHELL, env=env, check=False)
        if result.returncode == 0:
            logger.info(f"{spec.label} completed successfully")
            return True
        attempts += 1
        if attempts <= spec.retries:
            logger.warning(
                f"Attempt {attempts} failed (exit {result.returncode}), retrying in {spec.retry_delay_s}s"
            )
            sleep(spec.retry_delay_s)

    if spec.required and not spec.continue_on_error:
        logger.error(f"{spec.label} failed after {attempts} attempts")
        raise RequiredCommandFailed(spec.label, attempts)
    logger.warning(f"{spec.label} failed but continuing")
    return False


def run_startup(config: EnvConfig, *, runner: Runner = subprocess.run) -> list[bool]:
    if not config.startup:
        logger.info("No startup commands defined")
        return []
    logger.info("Running startup commands")
    results = [run_command(c, runner=runner) for c in config.startup]
    logger.info("Startup completed")
    return results


def run_task(config: EnvConfig, name: str, *, runner: Runner = subprocess.run) -> list[bool]:
    """Run a named task with its environment variables.

    Raises:
        KeyError: If the task is not defined.
    """
    task = config.tasks.get(name)
    if task is None:
        available = ", ".join(sorted(config.tasks)) or "none"
        raise KeyError(f"Task '{name}' not found (available: {available})")

    logger.info(f"Running task: {name} ({task.description or 'No description'})")
    env = {**os.environ, **task.environment}
    results = [run_command(c, env=env, runner=runner) for c in task.commands]
    logger.info(f"Task '{name}' completed")
    return results


def _print_help(parser: argparse.ArgumentParser, config: Optional[EnvConfig]) -> None:
    parser.print_help()
    if config is not None and config.tasks:
        print("\nAvailable tasks:")
        for name, task in config.tasks.items():
            print(f"  - {name}: {task.description or 'No description'}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="pebbles-env", description="Environment command runner")
    parser.add_argument("command", nargs="?", default="startup", choices=["startup", "task", "help"])
    parser.add_argument("task_name", nargs="?", default=None)
    parser.add_argument("--config", type=Path, default=ENV_FILE, help="Path to environment.json")
    args = parser.parse_args(argv)
    setup_logging(level="INFO")

    try:
        config = EnvConfig.load(args.config)
    except FileNotFoundError:
        logger.error(f"{args.config} not found")
        return 1
    except ValueError as e:
        logger.error(f"Error loading {args.config}: {e}")
        return 1

    if args.command == "help":
        _print_help(parser, config)
        return 0

    try:
        if args.command == "task":
            if not args.task_name:
                parser.error("task requires a task name")
            run_task(config, args.task_name)
        else:
            run_startup(config)
    except KeyError as e:
        logger.error(e.args[0])
        return 1
    except RequiredCommandFailed as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
