"""Market quote commands."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.domain.entities import Quote
from fincontrol.quotes.job import QuotationJob
from fincontrol.quotes.provider import BrapiQuoteProvider
from fincontrol.quotes.service import QuotationService


def _quotation_service(ctx: click.Context) -> QuotationService:
    """Build the quotation service, using an injected provider when present."""
    provider = ctx.obj.get("quote_provider") or BrapiQuoteProvider()
    return QuotationService(ctx.obj["db"], provider)


def format_quote(quote: Quote) -> str:
    """Format a live quote."""
    return (
        f"{quote.ticker}: {quote.price:,.2f} "
        f"({quote.percent_change:+.2f}%, {quote.absolute_change:+,.2f})"
    )


@click.group()
def quotes_group():
    """Refresh and inspect market quotes."""
    pass


@quotes_group.command("run")
@click.option("--force", is_flag=True, help="Run even outside weekdays after 19h")
@click.pass_context
def run_job(ctx, force: bool):
    """Refresh the quotes of every active stock, REIT and ETF.

    Meant to be scheduled (e.g. cron '0 19 * * 1-5'); without --force the
    run is skipped on weekends and before the market closes.
    """
    job = QuotationJob(_quotation_service(ctx))
    result = job.force_execute() if force else job.execute()

    if result.skipped:
        click.echo(f"Skipped: {result.reason}")
        return
    if not result.success:
        click.echo(f"Error: Quote refresh failed: {result.message}", err=True)
        ctx.exit(1)

    click.echo(
        f"Quotes refreshed: {result.updated}/{result.total} updated, "
        f"{result.failed} failed in {result.duration_ms}ms"
    )


@quotes_group.command("ticker")
@click.argument("ticker")
@click.pass_context
def refresh_ticker(ctx, ticker: str):
    """Fetch and store the quote of one ticker."""
    service = _quotation_service(ctx)
    try:
        quote, updated = service.refresh_ticker(ticker)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(format_quote(quote))
    click.echo(f"Updated {updated} asset{'s' if updated != 1 else ''}")


@quotes_group.command("live")
@click.argument("ticker")
@click.pass_context
def live_quote(ctx, ticker: str):
    """Show the live quote of a ticker without storing it."""
    service = _quotation_service(ctx)
    try:
        quote = service.live_quote(ticker)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(format_quote(quote))


@quotes_group.command("status")
@click.pass_context
def quotation_status(ctx):
    """Show how many assets carry a recent quote."""
    service = _quotation_service(ctx)
    status = service.status()

    click.echo(f"Assets with ticker: {status.total_assets}")
    click.echo(f"With quotes:        {status.with_quotes} ({status.coverage:.1f}%)")
    click.echo(f"Updated today:      {status.updated_today}")
    click.echo(f"Last update:        {status.last_update_date or 'never'}")


@quotes_group.command("outdated")
@click.pass_context
def outdated(ctx):
    """List assets whose quote is missing or more than a day old."""
    service = _quotation_service(ctx)
    assets = service.outdated_assets()
    if not assets:
        click.echo("All quotes are up to date.")
        return

    for asset in assets:
        click.echo(f"{asset.ticker:8s} | {asset.name:25s} | last quote: {asset.last_quote_date or 'never'}")
    click.echo(f"{len(assets)} outdated asset{'s' if len(assets) != 1 else ''}")


@quotes_group.command("info")
@click.pass_context
def job_info(ctx):
    """Show the schedule of the quotation job."""
    info = QuotationJob(_quotation_service(ctx)).info
    for key, value in info.items():
        click.echo(f"{key:12s} {value}")


def register_commands(cli):
    """Register quote commands with main CLI."""
    cli.add_command(quotes_group, name="quotes")
