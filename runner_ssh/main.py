"""
runner-add-ssh — CLI entrypoint.

Usage:
    runner-add-ssh --help
    runner-add-ssh setup --public-key "ssh-ed25519 AAAA..." --port 2222
    runner-add-ssh plan
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from runner_ssh import __version__
from runner_ssh.core.errors import ConfigError, ExecutionFailure, SetupError
from runner_ssh.core.observability.logging_config import default_log_file, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="runner-add-ssh")
@click.option("--quiet", "-q", is_flag=True, help="Suppress output (errors only).")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--cwd",
    type=click.Path(file_okay=False),
    default=None,
    help="Working directory for .runner-data (default: current directory).",
)
@click.pass_context
def cli(ctx: click.Context, quiet: bool, debug: bool, cwd: str | None) -> None:
    """Provision and start a key-only OpenSSH server on this host."""
    ctx.ensure_object(dict)
    ctx.obj["cwd"] = str(Path(cwd).resolve()) if cwd else os.getcwd()
    ctx.obj["quiet"] = quiet

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("RUNNER_SSH_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("RUNNER_SSH_LOG_FILE") or default_log_file(ctx.obj["cwd"]),
    )


def _config_options(func):
    """Options shared by every command that needs a SetupConfig."""
    options = [
        click.option("--public-key", help="SSH public key (overrides SSH_RUNNER_PUBLIC_KEY)."),
        click.option("--port", type=int, help="SSH port (overrides SSH_PORT)."),
        click.option(
            "--mode",
            type=click.Choice(["root", "user", "auto"]),
            help="Key target account (overrides SSH_MODE).",
        ),
        click.option("--allow-users", help="Allowed users, space or comma separated (overrides SSH_ALLOW_USERS)."),
        click.option("--default-cwd", help="Default working directory (overrides SSH_DEFAULT_CWD)."),
        click.option(
            "--disable-force-cwd",
            is_flag=True,
            default=None,
            help="Disable ForceCommand (overrides SSH_DISABLE_FORCE_CWD).",
        ),
        click.option(
            "--config",
            "-c",
            "config_path",
            type=click.Path(dir_okay=False),
            default=None,
            help="Path to ssh.yml (default: .runner-data/ssh.yml if present).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load_config(ctx: click.Context, options: dict, config_path: str | None):
    from runner_ssh.core.config.loader import load_config

    cli_options = dict(options, cwd=ctx.obj["cwd"])
    return load_config(cli_options, config_path=Path(config_path) if config_path else None)


def _echo_config_error(error: ConfigError) -> None:
    click.secho(f"❌ {error}", fg="red", bold=True)
    for err in error.errors:
        click.echo(f"   • {err}")


def _echo_failure(error: SetupError) -> None:
    click.secho(f"❌ {error}", fg="red")

    if isinstance(error, ExecutionFailure):
        click.echo(f"   Failed stage: {error.stage}")
        click.echo(f"   Completed: {', '.join(error.completed_steps) or 'none'}")
        proc = error.process_error
        if proc is not None and proc.command:
            click.echo(f"   Command: {proc.command_line}")
            if proc.exit_code is not None:
                click.echo(f"   Exit code: {proc.exit_code}")

    if error.privilege_related:
        click.secho("   Cause: missing privileges", fg="yellow")
    if error.hint:
        click.secho(f"   💡 {error.hint}", fg="yellow")


def _failure_dict(error: SetupError) -> dict:
    data: dict = {
        "error": str(error),
        "privilege_related": error.privilege_related,
    }
    if isinstance(error, ConfigError):
        data["errors"] = error.errors
    if isinstance(error, ExecutionFailure):
        data["stage"] = error.stage
        data["steps"] = error.completed_steps
    return data


@cli.command()
@_config_options
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def setup(ctx: click.Context, config_path: str | None, as_json: bool, **options) -> None:
    """Install, configure and start the SSH server."""
    from runner_ssh.core.use_cases.setup import run_setup

    try:
        config = _load_config(ctx, options, config_path)
        outcome = run_setup(config)
    except SetupError as e:
        if as_json:
            click.echo(json.dumps(_failure_dict(e), indent=2))
        elif isinstance(e, ConfigError):
            _echo_config_error(e)
        else:
            _echo_failure(e)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
        return

    if ctx.obj.get("quiet"):
        return

    config = outcome.config
    click.secho("\n🎉 SSH server is ready", fg="green", bold=True)
    click.echo(f"   OS: {outcome.plan.os}")
    click.echo(f"   Port: {config.port}")
    click.echo(f"   Allowed users: {' '.join(config.users)}")
    forced = " (forced)" if config.force_cwd else ""
    click.echo(f"   Working directory: {config.default_cwd}{forced}")
    click.echo(f"   Config: {outcome.sshd_config_path}")
    click.echo(f"   Steps: {' → '.join(outcome.result.steps)}")
    click.echo()
    click.secho(f"   Connect: ssh -p {config.port} {config.users[0]}@<host>", fg="cyan")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def plan(as_json: bool) -> None:
    """Show what setup would do on this host, without changing anything."""
    from runner_ssh.core.use_cases.setup import inspect_host

    try:
        inspection = inspect_host()
    except SetupError as e:
        if as_json:
            click.echo(json.dumps(_failure_dict(e), indent=2))
        else:
            _echo_failure(e)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(inspection.to_dict(), indent=2))
        return

    p = inspection.plan
    click.secho(f"\n📋 Plan for {p.os}", fg="cyan", bold=True)
    click.echo(f"   Install needed: {'yes' if p.needs_install else 'no'}")
    click.echo(f"   Steps: {' → '.join(p.steps)}")
    click.echo()
    click.secho("   Privileges:", fg="white", bold=True)
    click.echo(f"     • privileged: {'yes' if inspection.privileged else 'no'}")
    click.echo(f"     • elevation access: {'yes' if inspection.elevation_access else 'no'}")
    if p.os == "linux" and not inspection.elevation_access:
        click.echo()
        click.secho(
            "   ⚠️  Setup will fail: run as root or configure passwordless sudo.",
            fg="yellow",
        )
    click.echo()


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
