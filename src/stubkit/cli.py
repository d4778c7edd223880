import logging

import click

from stubkit.errors import UnknownTypeError
from stubkit.factory import compute_interception_set
from stubkit.reflection import describe_type, resolve_type
from stubkit.types import InterceptionPolicy

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

_POLICY_CHOICES = ["none", "all", "all-except", "only-overridden"]


def _format_names(names: frozenset[str]) -> str:
    if not names:
        return click.style("(none)", dim=True)
    return ", ".join(sorted(names))


def _policy_from_options(policy: str, excluded: str | None) -> InterceptionPolicy:
    if policy == "all-except":
        if excluded is None:
            raise click.UsageError("--policy all-except requires --except METHOD")
        return InterceptionPolicy.all_except(excluded)
    if excluded is not None:
        raise click.UsageError("--except is only valid with --policy all-except")
    if policy == "none":
        return InterceptionPolicy.none()
    if policy == "all":
        return InterceptionPolicy.all()
    return InterceptionPolicy.only_overridden()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="stubkit")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug: bool) -> None:
    """Build and inspect test doubles."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")


@cli.command("inspect")
@click.argument("target")
@click.option(
    "--policy",
    type=click.Choice(_POLICY_CHOICES),
    default="only-overridden",
    show_default=True,
    help="Interception policy to preview",
)
@click.option("--except", "excluded", default=None, help="Operation kept by --policy all-except")
@click.option(
    "--override",
    "overrides",
    multiple=True,
    help="Member name that would be overridden (repeatable)",
)
def inspect_cmd(target: str, policy: str, excluded: str | None, overrides: tuple[str, ...]) -> None:
    """Show how TARGET would be doubled.

    TARGET is an import path such as `package.module:Class`.
    """
    interception = _policy_from_options(policy, excluded)
    try:
        resolved = resolve_type(target)
    except UnknownTypeError as exc:
        raise click.ClickException(str(exc)) from exc

    descriptor = describe_type(resolved)
    intercepted = compute_interception_set(descriptor, interception, list(overrides))

    click.echo(f"Type:        {click.style(descriptor.name, bold=True)}")
    click.echo(f"Abstract:    {'yes' if descriptor.is_abstract else 'no'}")
    if descriptor.is_abstract:
        click.echo(f"  abstract:  {_format_names(descriptor.abstract_members)}")
    click.echo(f"Operations:  {_format_names(descriptor.operations)}")
    click.echo(f"Fields:      {_format_names(descriptor.fields)}")
    click.echo(f"Intercepted ({interception.describe()}): {_format_names(intercepted)}")

    unknown = sorted(
        name
        for name in overrides
        if name not in descriptor.operations and name not in descriptor.fields
    )
    if unknown:
        message = f"Would attach as new attributes: {', '.join(unknown)}"
        click.echo(click.style(message, fg="yellow"), err=True)


def main() -> None:
    """CLI entry point used by the `stubkit` console script."""
    cli()
