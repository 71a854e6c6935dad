# Overview: Flask CLI command groups for bootstrap, projection sync, and status changes.

# backend/orderdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to orderdesk (PowerShell: $env:FLASK_APP="orderdesk").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent). Prefer "flask db upgrade" in production.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Tracking projection:
# - python -m flask tracking sync
#   Run one sync pass and print the staff-visible orders.
# - python -m flask tracking watch --interval 2 [--max-snapshots 5]
#   Follow the live order feed until interrupted.
#
# Orders:
# - python -m flask orders set-status <order_id> "Ready for Pickup" [--actor "Jane"]
#   Apply a status transition (stock / sales side effects included).

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import order_status_service, tracking_service
from .services.customer_service import LOADING_CUSTOMER, display_name
from .services.order_status_service import OrderStatusError
from .services.subscription import list_orders


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


def _echo_orders(orders):
    if not orders:
        click.echo("No orders found.")
        return

    click.echo("=" * 96)
    click.echo(f"{'Order':<10} {'Customer':<28} {'Payment':<18} {'Status':<18} {'Total':>10}")
    click.echo("=" * 96)
    for tracked in orders:
        payment = tracked.payment_method
        if tracked.payment_status:
            payment = f"{payment} ({tracked.payment_status})"
        total = f"{tracked.total_amount_cents / 100:.2f}"
        click.echo(
            f"{tracked.order_id[:8]:<10} {display_name(tracked.customer, LOADING_CUSTOMER)[:27]:<28} "
            f"{payment[:17]:<18} {(tracked.status or 'unknown')[:17]:<18} {total:>10}"
        )


@click.group('tracking')
def tracking_group():
    """Staff-visible order listing and tracking projection."""


@tracking_group.command('sync')
@click.option('--search', 'term', default='', help='Filter by order id or customer name')
@with_appcontext
def sync_tracking(term):
    """
    Run one projection sync pass.

    Example:
        flask tracking sync
        flask tracking sync --search ana
    """
    orders = tracking_service.sync_visible_orders()
    _echo_orders(tracking_service.search_orders(orders, term))
    click.echo(f"\nPASS Synced {len(orders)} visible order(s).")


@tracking_group.command('watch')
@click.option('--interval', type=float, default=None, help='Seconds between change checks')
@click.option('--max-snapshots', type=int, default=None, help='Stop after this many snapshots')
@with_appcontext
def watch_tracking(interval, max_snapshots):
    """Follow the live order feed (Ctrl+C to stop)."""
    seen = 0
    with list_orders(poll_interval=interval) as subscription:
        try:
            for snapshot in subscription:
                seen += 1
                state = "DEGRADED" if snapshot.degraded else "LIVE"
                click.echo(f"\n[{state}] {len(snapshot.orders)} visible order(s)")
                _echo_orders(snapshot.orders)
                if max_snapshots is not None and seen >= max_snapshots:
                    break
        except KeyboardInterrupt:
            click.echo("\nStopped.")


@click.group('orders')
def orders_group():
    """Order status commands."""


@orders_group.command('set-status')
@click.argument('order_id')
@click.argument('status', type=click.Choice(order_status_service.SELECTABLE_STATUSES))
@click.option('--actor', default=None, help='Name recorded on stock history rows')
@with_appcontext
def set_status(order_id, status, actor):
    """Move an order to a new status."""
    try:
        change = order_status_service.apply_status(order_id, status, actor=actor)
    except OrderStatusError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS {order_status_service.success_message(status, change.changed)}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(tracking_group)
    app.cli.add_command(orders_group)
