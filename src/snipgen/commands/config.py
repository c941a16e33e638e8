"""Config commands -- view and modify global configuration.

Provides the ``snipgen config`` sub-command group for reading and updating
the user's global configuration file (:class:`~snipgen.models.GlobalConfig`):
where each API version's description document comes from, the default
target language, output format and cache TTL.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from snipgen.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Prints the config directory on stderr, then the configuration after
    project config and environment overrides have been applied.

    Example::

        snipgen config show
        snipgen --json config show
    """
    from snipgen.config import get_config_dir, resolve_config
    from snipgen.exceptions import ConfigError

    try:
        config, language = resolve_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    data = config.model_dump(mode="json")
    data["default_language"] = language
    format_response(data)


@config_app.command("set-source")
def config_set_source(
    version: str = typer.Argument(help="API version segment, e.g. 'v1.0' or 'beta'."),
    source: str = typer.Argument(help="URL or file path of the OpenAPI document."),
) -> None:
    """Set the OpenAPI document used for an API version.

    Example::

        snipgen config set-source beta ./openapi-beta.yaml
    """
    from snipgen.config import set_index_source
    from snipgen.exceptions import ConfigError

    try:
        set_index_source(version, source)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f"Index source for {version.lower()} = {source}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'cache.ttl_seconds')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to the type
    of the existing field (bool, int or str) and the result is validated
    against :class:`~snipgen.models.GlobalConfig` before saving.
    ``default_language`` must name a supported language.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or validation fails.

    Example::

        snipgen config set default_language python
        snipgen config set output.format plain
        snipgen config set cache.ttl_seconds 600
    """
    from snipgen.config import load_global_config, save_global_config
    from snipgen.exceptions import ConfigError, UnsupportedLanguageError
    from snipgen.exit_codes import EXIT_INVALID_USAGE
    from snipgen.models import GlobalConfig
    from snipgen.render.languages import get_profile

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    else:
        coerced = value  # type: ignore[assignment]

    if key == "default_language":
        try:
            coerced = get_profile(value).language_id  # type: ignore[assignment]
        except UnsupportedLanguageError as exc:
            error(str(exc))
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")
