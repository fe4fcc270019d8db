#!/usr/bin/env python3
"""FieldCloak CLI - mask values and check policy files."""

import json
import sys
from pathlib import Path

import click

from fieldcloak import __version__
from fieldcloak.core.descriptor import SensitivityDescriptor
from fieldcloak.core.exceptions import FieldCloakError
from fieldcloak.core.kinds import MaskKind
from fieldcloak.core.policy_loader import PolicyLoader

_KIND_CHOICES = [kind.value for kind in MaskKind]


@click.group()
@click.version_option(__version__, prog_name="fieldcloak")
def cli() -> None:
    """FieldCloak: policy-driven masking of sensitive field values."""


@cli.command()
@click.argument("value")
@click.option(
    "--kind",
    "-k",
    type=click.Choice(_KIND_CHOICES, case_sensitive=False),
    default=MaskKind.GENERIC.value,
    help="Masking algorithm",
)
@click.option("--show-first", type=click.IntRange(min=0), default=0, help="Visible leading characters (generic only)")
@click.option("--show-last", type=click.IntRange(min=0), default=0, help="Visible trailing characters (generic only)")
@click.option("--mask-char", "-m", default="*", help="Fill character")
def mask(value: str, kind: str, show_first: int, show_last: int, mask_char: str) -> None:
    """Mask a single VALUE and print the result."""
    try:
        descriptor = SensitivityDescriptor(
            kind=kind, show_first=show_first, show_last=show_last, mask_char=mask_char
        )
    except FieldCloakError as e:
        raise click.BadParameter(e.message) from e

    click.echo(descriptor.mask(value))


@cli.group()
def policy() -> None:
    """Manage sensitivity policy files."""


@policy.command("validate")
@click.argument("policy_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print resolved policies as JSON")
def validate_policy(policy_file: str, as_json: bool) -> None:
    """Load POLICY_FILE, resolving inheritance, and list its policies."""
    try:
        policy_set = PolicyLoader().load(Path(policy_file))
    except (FieldCloakError, FileNotFoundError) as e:
        click.echo(f"✗ Invalid policy file: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(policy_set.to_dict(), indent=2, sort_keys=True))
        return

    label = policy_set.name or Path(policy_file).name
    click.echo(f"✓ {label}: {len(policy_set)} policies")
    for name in policy_set.names():
        descriptor = policy_set[name]
        roles = ", ".join(sorted(descriptor.allowed_roles)) or "-"
        click.echo(f"  {name}: kind={descriptor.kind.value} roles={roles}")


@policy.command("apply")
@click.argument("policy_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("name")
@click.argument("value")
def apply_policy(policy_file: str, name: str, value: str) -> None:
    """Mask VALUE with the policy NAME from POLICY_FILE."""
    try:
        policy_set = PolicyLoader().load(Path(policy_file))
        descriptor = policy_set[name]
    except (FieldCloakError, FileNotFoundError, KeyError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(descriptor.mask(value))


def main() -> int:
    """Main entry point."""
    try:
        cli()
        return 0
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
