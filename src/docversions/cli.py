import asyncio
import sys
import warnings
from typing import Optional, Tuple

import asyncclick as click

from .__about__ import __version__
from .client.catalog_builder import CatalogBuilder
from .client.config_manager import ConfigManager
from .client.registry_client import RegistryClient
from .models.version import CatalogResult
from .utils.exceptions import DocVersionsError, RegistryQueryError, UnparseableVersionWarning
from .utils.logger import DocVersionsLog, LogMe
from .utils.service_writer import ServiceWriter

# Context settings to enable both ``-h`` and ``--help`` for help output
CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def setup_logging(debug: bool) -> None:
    """Configures global logging based on the debug flag."""
    DocVersionsLog.setup_logger(debug=debug)


def format_err(exc: DocVersionsError) -> None:
    """Logs an error and formats its message to console."""
    LogMe(__name__).error(f"{type(exc).__name__}: {exc}")
    click.echo(click.style(f"Error: {str(exc)}", fg="red", bold=True), err=True)
    click.echo(
        f"For more details, please check the log file at: '{DocVersionsLog.LOG_FILE}'",
        err=True,
    )


def warning_format(message, category, filename, lineno, file=None, line=None):
    return f"{category.__name__}: {message}\n"


sys.excepthook = DocVersionsLog.custom_excepthook  # Log unhandled exceptions
warnings.simplefilter("always", UnparseableVersionWarning)  # Show warnings in CLI
warnings.formatwarning = warning_format


async def collect(
    config: ConfigManager, version_file: Optional[str], strict: bool = False
) -> CatalogResult:
    """
    Queries the registry and builds the catalog with the current settings.

    :param config: The configuration manager holding build settings.
    :type config: :class:`~docversions.client.config_manager.ConfigManager`
    :param version_file: Optional override of the ``version.json`` path.
    :type version_file: :py:obj:`~typing.Optional` [:py:class:`str`]
    :param strict: Fail instead of warning when unparseable versions were dropped.
    :type strict: :py:class:`bool`
    :return: The built catalog.
    :rtype: :class:`~docversions.models.version.CatalogResult`
    """
    settings = config.settings
    current = config.load_current_version(version_file)
    registry = RegistryClient(registry_command=settings.registry_command)
    raw_versions = await registry.get_versions(settings.package)

    result = CatalogBuilder(settings).build_catalog(raw_versions, current)
    if not result.clean:
        if strict:
            raise DocVersionsError(
                "Registry listed unparseable versions.", dropped=", ".join(result.dropped)
            )
        for raw in result.dropped:
            warnings.warn(f"Skipping unparseable version '{raw}'", UnparseableVersionWarning)
    return result


# Entry
@click.group(context_settings=CONTEXT_SETTINGS, options_metavar="<options>")
@click.version_option(version=__version__)
@click.option("--debug", "-x", is_flag=True, help="Enable debug logging (verbose mode).")
@click.option(
    "--config",
    "-c",
    "config_path",
    metavar="<path>",
    type=click.Path(dir_okay=False),
    help="JSON file with build settings. Defaults are used when omitted.",
)
@click.pass_context
async def cli(ctx: click.Context, debug: bool, config_path: Optional[str]) -> None:
    """
    Generates version switcher data for versioned documentation.

    \b
    Exit Codes:
        0   Success
        1   General error (e.g., invalid settings or no stable release)
        2   Unhandled exception
        4   Registry error (e.g., command failed, invalid JSON)
        130 KeyboardInterrupt (Ctrl+C)
    \f

    :param ctx: The context object, providing access to shared state between commands.
    :type ctx: `click.Context <https://click.palletsprojects.com/en/stable/api/#click.Context>`_
    :param debug: Enables debug (verbose) logging if ``True``.
    :type debug: :py:class:`bool`
    :param config_path: Path to a JSON settings file.
    :type config_path: :py:obj:`~typing.Optional` [:py:class:`str`]
    """
    setup_logging(debug)
    ctx.obj = {
        "debug": debug,
        "log": LogMe(__name__),
        "config": ConfigManager(config_path),
    }


# Generate
@cli.command(
    "generate", short_help="Writes version switcher data files.", options_metavar="<options>"
)
@click.option(
    "--version-file",
    "-v",
    metavar="<path>",
    type=click.Path(dir_okay=False),
    help="Path to version.json describing the current build.",
)
@click.option(
    "--output-dir",
    "-o",
    metavar="<path>",
    type=click.Path(file_okay=False),
    help="Directory generated files are written under.",
)
@click.option(
    "--format",
    "-f",
    "formats",
    multiple=True,
    metavar="<format>",
    type=click.Choice(["js", "json"], case_sensitive=False),
    help="Output format (default: js). Use multiple times for multiple formats.",
)
@click.option("--package", "-p", metavar="<name>", help="Package to list versions of.")
@click.option(
    "--strict", is_flag=True, help="Fail if the registry lists unparseable version strings."
)
@click.pass_context
async def generate(
    ctx: click.Context,
    version_file: Optional[str],
    output_dir: Optional[str],
    formats: Tuple[str, ...],
    package: Optional[str],
    strict: bool,
) -> None:
    """
    Queries the registry for published versions and writes the current version and all
    versions service files.
    \f

    :param ctx: The context object, providing access to shared state between commands.
    :type ctx: click.Context
    :param version_file: Overrides the ``version_file`` setting.
    :type version_file: :py:obj:`~typing.Optional` [:py:class:`str`]
    :param output_dir: Overrides the ``output_dir`` setting.
    :type output_dir: :py:obj:`~typing.Optional` [:py:class:`str`]
    :param formats: Overrides the ``formats`` setting.
    :type formats: :py:obj:`~typing.Tuple` [:py:class:`str`, ...]
    :param package: Overrides the ``package`` setting.
    :type package: :py:obj:`~typing.Optional` [:py:class:`str`]
    :param strict: Treat unparseable registry versions as an error.
    :type strict: :py:class:`bool`
    """
    log = ctx.obj.get("log")
    config = ctx.obj.get("config")
    settings = config.override(
        package=package, output_dir=output_dir, formats=formats, version_file=version_file
    )

    result = await collect(config, settings.version_file, strict=strict)
    records = CatalogBuilder.records(result)

    writer = ServiceWriter(settings.output_dir)
    written = await writer.write(records, formats=set(settings.formats))
    paths = [path for fmt_paths in written.values() for path in fmt_paths]
    log.info(f"Generated {len(paths)} file(s) for {len(result.options)} version options.")

    click.echo(
        click.style(
            f"Success! {len(result.options)} versions written to {settings.output_dir}",
            fg="green",
            bold=True,
        )
    )
    for path in paths:
        click.echo(f"  {path}")


# Show
@cli.command("show", short_help="Prints the version catalog.", options_metavar="<options>")
@click.option(
    "--version-file",
    "-v",
    metavar="<path>",
    type=click.Path(dir_okay=False),
    help="Path to version.json describing the current build.",
)
@click.option("--package", "-p", metavar="<name>", help="Package to list versions of.")
@click.option("--raw", is_flag=True, help="Print the catalog as JSON.")
@click.pass_context
async def show(
    ctx: click.Context, version_file: Optional[str], package: Optional[str], raw: bool
) -> None:
    """
    Prints the catalog the version switcher would list, without writing files.
    \f

    :param ctx: The context object, providing access to shared state between commands.
    :type ctx: click.Context
    :param version_file: Overrides the ``version_file`` setting.
    :type version_file: :py:obj:`~typing.Optional` [:py:class:`str`]
    :param package: Overrides the ``package`` setting.
    :type package: :py:obj:`~typing.Optional` [:py:class:`str`]
    :param raw: Print JSON instead of a table.
    :type raw: :py:class:`bool`
    """
    config = ctx.obj.get("config")
    settings = config.override(package=package, version_file=version_file)
    result = await collect(config, settings.version_file)

    if raw:
        _, all_versions = CatalogBuilder.records(result)
        click.echo(all_versions.model_dump_json(by_alias=True, indent=2))
        return

    width = max(len(option.label) for option in result.options)
    for option in result.options:
        click.echo(f"{option.group:<10} {option.label:<{width}}  {option.docs_url}")


def main() -> None:
    try:
        asyncio.run(cli.main(prog_name="docversions"))
    except RegistryQueryError as e:
        format_err(e)
        sys.exit(4)
    except DocVersionsError as e:
        format_err(e)
        sys.exit(1)
    except Exception as e:
        # Delegate to sys.excepthook
        sys.excepthook(type(e), e, e.__traceback__)
        sys.exit(2)


if __name__ == "__main__":
    main()
