"""
Push provisioning developer CLI.

Usage:
    push-provisioning [OPTIONS] COMMAND [ARGS]...
"""
from __future__ import annotations

import asyncio
import json

import click
from rich.console import Console
from rich.table import Table

from .classifier import TokenizationStatusClassifier
from .client import BackendRelayClient
from .config import ProvisioningSettings
from .eligibility import classify_cards, describe
from .logging import configure_logging, mask_value
from .models.errors import PushProvisioningError
from .status import EligibleCardsSuccess, GreenPath, Tokenized, YellowPath
from .wallet.memory import InMemoryWallet

console = Console()


def _relay(ctx: click.Context) -> BackendRelayClient:
    settings: ProvisioningSettings = ctx.obj["settings"]
    try:
        return BackendRelayClient.from_settings(settings)
    except PushProvisioningError as e:
        raise click.ClickException(e.message)


def _run(coro):
    try:
        return asyncio.run(coro)
    except PushProvisioningError as e:
        raise click.ClickException(e.message)


def _status_label(status) -> str:
    if isinstance(status, GreenPath):
        return "[green]green path[/green]"
    if isinstance(status, YellowPath):
        return f"[yellow]yellow path[/yellow] ({status.token_reference_id})"
    if isinstance(status, Tokenized):
        return "[cyan]tokenized[/cyan]"
    return str(status)


@click.group()
@click.version_option(message="%(prog)s %(version)s", package_name="issuing-push-provisioning")
@click.option("--backend-url", envvar="PUSH_PROVISIONING_BACKEND_URL", help="Backend relay base URL")
@click.option("--username", envvar="PUSH_PROVISIONING_BACKEND_USERNAME", help="Backend relay username")
@click.option("--password", envvar="PUSH_PROVISIONING_BACKEND_PASSWORD", help="Backend relay password")
@click.option("-v", "--verbose", is_flag=True, help="Log HTTP traffic (secrets masked)")
@click.pass_context
def cli(ctx, backend_url: str | None, username: str | None, password: str | None, verbose: bool):
    """Stripe Issuing push provisioning tools."""
    ctx.ensure_object(dict)

    overrides = {}
    if backend_url:
        overrides["backend_url"] = backend_url
    if username:
        overrides["backend_username"] = username
    if password:
        overrides["backend_password"] = password
    if verbose:
        overrides["log_level"] = "DEBUG"

    settings = ProvisioningSettings(**overrides)
    configure_logging(settings.log_level)

    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


@cli.command()
@click.pass_context
def status(ctx):
    """Show current configuration."""
    settings: ProvisioningSettings = ctx.obj["settings"]

    console.print("\n[bold blue]Push Provisioning Status[/bold blue]\n")
    console.print(f"Backend URL: [cyan]{settings.backend_url}[/cyan]")
    console.print(f"Username: [cyan]{settings.backend_username}[/cyan]")
    console.print(f"Password: [green]{mask_value(settings.backend_password, show_chars=2)}[/green]")
    console.print(f"Stripe API version: [cyan]{settings.stripe_api_version}[/cyan]")

    missing = settings.missing_fields()
    if missing:
        console.print(f"\n[yellow]⚠ Not configured: {', '.join(missing)}[/yellow]")
    console.print()


@cli.command("cards")
@click.pass_context
def list_cards(ctx):
    """List cards available to the authenticated cardholder."""
    relay = _relay(ctx)

    async def fetch():
        async with relay:
            return await relay.list_cards()

    cards = _run(fetch())

    table = Table(title="Issuing Cards")
    table.add_column("Card ID", style="cyan")
    table.add_column("Brand", style="white")
    table.add_column("Last 4", style="dim")
    table.add_column("Cardholder", style="white")
    table.add_column("Google Pay", justify="center")
    table.add_column("Apple Pay", justify="center")
    table.add_column("Primary Account Identifier", style="dim")

    for card in cards:
        table.add_row(
            card.id,
            card.brand,
            card.last4,
            card.cardholder_name,
            "[green]yes[/green]" if card.eligible_for_google_pay else "[red]no[/red]",
            "[green]yes[/green]" if card.eligible_for_apple_pay else "[red]no[/red]",
            card.primary_account_identifier or "-",
        )

    console.print(table)


@cli.command("ephemeral-key")
@click.argument("card_id")
@click.option("--api-version", help="Stripe API version (defaults to configured)")
@click.option("--show-secret", is_flag=True, help="Print the key secret unmasked")
@click.pass_context
def ephemeral_key(ctx, card_id: str, api_version: str | None, show_secret: bool):
    """Mint an ephemeral key for CARD_ID."""
    settings: ProvisioningSettings = ctx.obj["settings"]
    relay = _relay(ctx)

    async def mint():
        async with relay:
            return await relay.create_ephemeral_key(api_version or settings.stripe_api_version, card_id)

    key = _run(mint())
    payload = json.loads(key.raw)
    if not show_secret:
        payload["secret"] = mask_value(key.secret)
    console.print_json(data=payload)


@cli.command()
@click.argument("tokens_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--all-cards", is_flag=True, help="Also classify cards not eligible for Google Pay")
@click.pass_context
def classify(ctx, tokens_file: str, all_cards: bool):
    """Classify cards against a saved listTokens() snapshot."""
    relay = _relay(ctx)
    try:
        wallet = InMemoryWallet.from_snapshot(tokens_file)
    except ValueError as e:
        raise click.ClickException(f"Could not read {tokens_file}: {e}")
    classifier = TokenizationStatusClassifier(wallet)

    async def run():
        async with relay:
            cards = await relay.list_cards()
        if not all_cards:
            cards = [card for card in cards if card.eligible_for_google_pay]
        return EligibleCardsSuccess(await classify_cards(cards, classifier))

    result = _run(run())

    table = Table(title="Tokenization Status")
    table.add_column("Card ID", style="cyan")
    table.add_column("Brand", style="white")
    table.add_column("Last 4", style="dim")
    table.add_column("Status")

    eligible = result.eligible_cards
    for entry in eligible.not_yet_tokenized + eligible.already_tokenized:
        table.add_row(entry.card.id, entry.card.brand, entry.card.last4, _status_label(entry.tokenization_status))

    console.print(table)
    console.print(describe(result))


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
