"""Config commands -- view and modify global configuration.

Provides the ``spectui config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~spectui.models.GlobalConfig`).
"""

from __future__ import annotations

import typer

from spectui.exceptions import ConfigError
from spectui.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Prints the config file path to stderr, then the configuration after
    project config and environment overrides are applied.

    Example::

        spectui config show
        spectui --json config show
    """
    from spectui.config import global_config_path, resolve_config

    try:
        config = resolve_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config file: {global_config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'request.timeout')."
    ),
    value: str = typer.Argument(help="Value to set ('none' clears base_url)."),
) -> None:
    """Set a configuration value in the global config file.

    Example::

        spectui config set base_url http://localhost:8080
        spectui config set request.timeout 10
        spectui config set ui.fullscreen true
    """
    from spectui.config import load_global_config, save_global_config, set_config_value

    try:
        config = set_config_value(load_global_config(), key, value)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=2) from None

    save_global_config(config)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the global configuration to defaults.

    Example::

        spectui config reset --force
    """
    from spectui.config import save_global_config
    from spectui.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
