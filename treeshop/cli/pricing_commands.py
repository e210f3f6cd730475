"""
Pricing CLI Commands - Quotes, rate table maintenance and equipment costs.

Provides command-line interface for:
- Quote calculation
- Rate table display and edits (base rate, overrides, reset)
- Equipment hourly cost with alerts
- Running the API server
"""
import logging
from decimal import Decimal
from typing import Optional

import click

from treeshop.config import get_config
from treeshop.domain.entities.equipment import (
    Equipment,
    EquipmentFinancial,
    EquipmentIdentity,
    EquipmentUsage,
    MaintenanceLevel,
    UsagePattern,
)
from treeshop.domain.entities.pricing import PackageTier
from treeshop.domain.exceptions import DomainError
from treeshop.domain.money import quantize_currency
from treeshop.domain.services import EquipmentCostEngine, QuoteCalculator, calculate_estimated_resale
from treeshop.infrastructure.document_store import DocumentStore, SqlDocumentStore
from treeshop.infrastructure.repositories import PricingRepository
from treeshop.models import get_db, init_db

logger = logging.getLogger(__name__)

TIER_CHOICES = [tier.value for tier in PackageTier]


def _store(ctx: click.Context) -> DocumentStore:
    """Document store for this invocation; the database unless one was injected."""
    obj = ctx.ensure_object(dict)
    if 'store' not in obj:
        init_db()
        obj['store'] = SqlDocumentStore(next(get_db()))
    return obj['store']


def _fail(ctx: click.Context, error: DomainError) -> None:
    click.echo(click.style(f"Error: {error.message}", fg='red'), err=True)
    ctx.exit(1)


def _currency(amount: Decimal) -> str:
    return f"${quantize_currency(amount):,.2f}"


def _print_rates(rate_table) -> None:
    click.echo(click.style("Package rates (per acre)", bold=True))
    for entry in rate_table.entries():
        if entry.tier == PackageTier.MEDIUM:
            flag = "base"
        elif entry.overridden:
            flag = "override"
        elif entry.auto_derived:
            flag = "auto"
        else:
            flag = "flat"
        click.echo(f"  {entry.tier.value:<10} {_currency(entry.rate):>12}  [{flag}]")


# =============================================================================
# Quote
# =============================================================================

@click.command()
@click.option('--acres', required=True, type=float, help='Land size in acres')
@click.option('--tier', default='medium', type=click.Choice(TIER_CHOICES), help='Package tier')
@click.option('--transport-hours', type=float, default=None, help='Round-trip transport hours')
@click.option('--debris-yards', type=float, default=0.0, help='Manual debris yards')
@click.pass_context
def quote(ctx, acres: float, tier: str, transport_hours: Optional[float], debris_yards: float):
    """Calculate a quote using the saved rate table."""
    config = get_config()
    rate_table, settings = PricingRepository(_store(ctx), config).load()
    hours = transport_hours if transport_hours is not None else config.default_transport_hours

    try:
        breakdown = QuoteCalculator(rate_table, settings).calculate_quote(acres, tier, hours, debris_yards)
    except DomainError as e:
        _fail(ctx, e)

    click.echo(click.style(f"Quote: {breakdown.acres} acres, {breakdown.tier.value}", fg='green'))
    click.echo(f"  Base cost:       {_currency(breakdown.base_cost)}")
    click.echo(f"  Transport:       {_currency(breakdown.transport_cost)} ({breakdown.transport_hours} h)")
    click.echo(f"  Debris:          {_currency(breakdown.debris_cost)} ({breakdown.total_debris_yards} yd)")
    click.echo(f"  Subtotal:        {_currency(breakdown.subtotal)}")
    click.echo(click.style(f"  Final price:     {_currency(breakdown.final_price)}", bold=True))
    click.echo(f"  Deposit:         {_currency(breakdown.deposit_amount)}")
    click.echo(f"  Balance due:     {_currency(breakdown.balance_due)}")


# =============================================================================
# Rates
# =============================================================================

@click.group()
def rates():
    """Rate table commands."""
    pass


@rates.command()
@click.pass_context
def show(ctx):
    """Show the current rate table."""
    rate_table, _ = PricingRepository(_store(ctx), get_config()).load()
    _print_rates(rate_table)


@rates.command('set-base')
@click.argument('rate', type=float)
@click.pass_context
def set_base(ctx, rate: float):
    """Set the medium (base) rate; auto tiers follow it."""
    repo = PricingRepository(_store(ctx), get_config())
    rate_table, settings = repo.load()
    rate_table.set_base_rate(rate)
    repo.save(rate_table, settings)
    _print_rates(rate_table)


@rates.command()
@click.argument('tier', type=click.Choice(TIER_CHOICES))
@click.argument('rate', type=float)
@click.pass_context
def override(ctx, tier: str, rate: float):
    """Manually set a tier rate (medium sets the base rate)."""
    repo = PricingRepository(_store(ctx), get_config())
    rate_table, settings = repo.load()
    try:
        rate_table.set_rate(tier, rate)
    except DomainError as e:
        _fail(ctx, e)
    repo.save(rate_table, settings)
    _print_rates(rate_table)


@rates.command()
@click.argument('tier', type=click.Choice(TIER_CHOICES))
@click.pass_context
def reset(ctx, tier: str):
    """Return a tier to its auto-calculated rate."""
    repo = PricingRepository(_store(ctx), get_config())
    rate_table, settings = repo.load()
    try:
        rate_table.reset_to_auto(tier)
    except DomainError as e:
        _fail(ctx, e)
    repo.save(rate_table, settings)
    _print_rates(rate_table)


# =============================================================================
# Equipment
# =============================================================================

@click.command('equipment-cost')
@click.option('--purchase-price', required=True, type=float, help='Purchase price')
@click.option('--years', 'years_of_service', required=True, type=int, help='Years of service')
@click.option('--resale', type=float, default=None, help='Estimated resale value (default 20% of price)')
@click.option('--daily-fuel', type=float, default=0.0, help='Fuel cost per working day')
@click.option('--usage', 'usage_pattern', default='moderate',
              type=click.Choice([p.value for p in UsagePattern]), help='Usage pattern')
@click.option('--days', 'days_per_year', type=int, default=None, help='Working days per year')
@click.option('--hours', 'hours_per_day', type=float, default=None, help='Hours per working day')
@click.option('--maintenance-level', default='standard',
              type=click.Choice([m.value for m in MaintenanceLevel]), help='Maintenance level')
@click.option('--maintenance', type=float, default=None, help='Annual maintenance (overrides level)')
@click.option('--insurance', type=float, default=0.0, help='Annual insurance cost')
@click.option('--year', type=int, default=0, help='Model year (for replacement alerts)')
@click.pass_context
def equipment_cost(ctx, purchase_price, years_of_service, resale, daily_fuel, usage_pattern,
                   days_per_year, hours_per_day, maintenance_level, maintenance, insurance, year):
    """Calculate an equipment hourly cost and recommended rate."""
    config = get_config()
    engine = EquipmentCostEngine.from_config(config)

    usage = EquipmentUsage.for_pattern(UsagePattern(usage_pattern))
    if days_per_year is not None:
        usage.days_per_year = days_per_year
    if hours_per_day is not None:
        usage.hours_per_day = Decimal(str(hours_per_day))
    if resale is None:
        resale = calculate_estimated_resale(purchase_price, config.default_resale_percentage)

    equipment = engine.calculate(Equipment(
        identity=EquipmentIdentity(year=year),
        usage=usage,
        financial=EquipmentFinancial(
            purchase_price=Decimal(str(purchase_price)),
            years_of_service=years_of_service,
            estimated_resale_value=Decimal(str(resale)),
            daily_fuel_cost=Decimal(str(daily_fuel)),
            annual_insurance_cost=Decimal(str(insurance)),
            maintenance_level=MaintenanceLevel(maintenance_level),
            annual_maintenance=Decimal(str(maintenance)) if maintenance is not None else None,
        ),
    ))
    calc = equipment.calculated

    click.echo(click.style("Equipment cost", fg='green'))
    click.echo(f"  Annual hours:       {calc.annual_hours}")
    click.echo(f"  Depreciation:       {_currency(calc.annual_depreciation)}")
    click.echo(f"  Fuel:               {_currency(calc.annual_fuel)}")
    click.echo(f"  Maintenance:        {_currency(calc.annual_maintenance)}")
    click.echo(f"  Insurance:          {_currency(calc.annual_insurance)}")
    click.echo(f"  Total annual cost:  {_currency(calc.total_annual_cost)}")
    click.echo(click.style(f"  Hourly cost:        {_currency(calc.hourly_cost)}", bold=True))
    click.echo(click.style(f"  Recommended rate:   {_currency(calc.recommended_rate)}", bold=True))

    breakdown = engine.analyze_cost_breakdown(calc)
    click.echo(f"\n  Largest cost: {breakdown.dominant_cost_factor}")
    click.echo(f"    Depreciation {breakdown.depreciation_pct:.1f}%  Fuel {breakdown.fuel_pct:.1f}%  "
               f"Maintenance {breakdown.maintenance_pct:.1f}%  Insurance {breakdown.insurance_pct:.1f}%")

    colors = {'info': 'cyan', 'warning': 'yellow', 'error': 'red'}
    for alert in engine.validate(equipment):
        severity = alert.severity.value
        click.echo(click.style(f"  [{severity}] {alert.message}", fg=colors[severity]))


# =============================================================================
# Server
# =============================================================================

@click.command()
@click.option('--port', default=8000, type=int, help='Port to bind')
@click.option('--host', default='127.0.0.1', help='Host to bind')
@click.option('--reload', is_flag=True, help='Reload on code changes')
def serve(port: int, host: str, reload: bool):
    """Start the API server."""
    import uvicorn

    click.echo(click.style('TreeShop Ops - API Server', fg='cyan', bold=True))
    click.echo(f"Starting server at http://{host}:{port}")
    click.echo("Press CTRL+C to stop\n")

    uvicorn.run("treeshop.main:app", host=host, port=port, reload=reload)


def register_commands(cli):
    """Register pricing commands with the main CLI."""
    cli.add_command(quote)
    cli.add_command(rates)
    cli.add_command(equipment_cost)
    cli.add_command(serve)
