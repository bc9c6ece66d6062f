"""Profit participant commands."""

import json

import click
from profitshare.cli.error_handling import handle_domain_error
from profitshare.domain.entities import ParticipantInput
from profitshare.domain.errors import DomainError
from profitshare.domain.participant import ParticipantService, total_ratio
from profitshare.utils.money import format_ratio


def _inputs_from_json(payload) -> list[ParticipantInput]:
    """Convert a decoded JSON array into participant inputs."""
    if not isinstance(payload, list):
        raise ValueError("Participant file must contain a JSON array")

    inputs = []
    for index, item in enumerate(payload, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Participant entry {index} must be a JSON object")
        participant_id = item.get("id")
        if participant_id is not None and not isinstance(participant_id, int):
            raise ValueError(f"Participant entry {index} has a non-integer id")
        inputs.append(
            ParticipantInput(
                id=participant_id,
                name=str(item.get("name") or ""),
                bill_account=item.get("billAccount"),
                ratio=item.get("ratio"),
                note=str(item.get("note") or ""),
            )
        )
    return inputs


@click.group()
def participant_group():
    """Manage profit participants."""
    pass


@participant_group.command("list")
@click.pass_context
def list_participants(ctx):
    """List profit participants and their ratios."""
    service = ParticipantService(ctx.obj["db"])

    participants = service.list_participants()
    if not participants:
        click.echo("No participants found.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<20} {'Bill account':<20} {'Ratio':>10}  Note")
    click.echo("-" * 80)
    for p in participants:
        click.echo(
            f"{p.id:<6} {p.name[:20]:<20} {(p.bill_account or '-')[:20]:<20} "
            f"{format_ratio(p.ratio):>10}  {p.note}"
        )
    click.echo("-" * 80)
    click.echo(f"{'TOTAL':<48} {total_ratio(participants):>10}")


@participant_group.command("save")
@click.argument("file", type=click.File("r", encoding="utf-8"))
@click.pass_context
def save_participants(ctx, file):
    """Replace the whole participant set from a JSON file.

    The file holds a JSON array of objects with "name", "ratio" and optional
    "id", "billAccount" and "note". Entries with a known id are updated,
    the rest created; participants missing from the file are removed.
    Ratios must sum to 1.

    Examples:
        profitshare participant save participants.json
    """
    service = ParticipantService(ctx.obj["db"])

    try:
        inputs = _inputs_from_json(json.load(file))
    except ValueError as e:
        click.echo(f"Error: Invalid participant file: {e}", err=True)
        ctx.exit(1)

    try:
        saved = service.save_participants(inputs)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Saved {len(saved)} participant(s), total ratio {total_ratio(saved)}")


def register_commands(cli: click.Group) -> None:
    """Register participant commands with main CLI."""
    cli.add_command(participant_group, name="participant")
