# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/barberdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--org "Barbearia Demo"] [--slug barbearia-demo]
#   Idempotent demo bootstrap: one organization with an admin and a barber.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Organization inspection (MULTI-TENANT):
# - python -m flask orgs list
#   List all organizations with staff and client counts.
#
# Inventory repair:
# - python -m flask inventory reconcile [--org-id 1] [--fix]
#   Compare each product's stock counter with the sum of its movements.
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 30
#   Delete expired or revoked sessions older than the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Client, Organization, Profile, User
from .services.auth_service import register_user
from .services.onboarding_service import complete_onboarding
from .services.team_service import create_barber
from .services import session_service, stock_service


DEMO_PASSWORD = "Password123!"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--org', 'org_name', default='Barbearia Demo', help='Organization name')
@click.option('--slug', default='barbearia-demo', help='Organization slug')
@with_appcontext
def init_system(org_name, slug):
    """
    Create a demo organization with one admin and one barber.

    Creates:
    - Organization <slug> (if none exists with that slug)
    - admin@barberdesk.local (admin role, owner of the organization)
    - barber@barberdesk.local (barber role, 40% commission)
    - All passwords default to: "Password123!"

    SECURITY: Change passwords immediately in production!
    """
    click.echo("START Initializing BarberDesk demo data...")

    org = db.session.query(Organization).filter_by(slug=slug).first()
    if org:
        click.echo(f"PASS Using existing organization: {org.name} (ID: {org.id})")
    else:
        admin = db.session.query(User).filter_by(email="admin@barberdesk.local").first()
        if not admin:
            admin = register_user("admin@barberdesk.local", DEMO_PASSWORD, "Demo Admin")
            click.echo(f"PASS Created admin user: {admin.email}")
        org, _ = complete_onboarding(
            user=admin,
            session=None,
            payload={"organization_name": org_name, "slug": slug, "full_name": admin.full_name},
        )
        click.echo(f"PASS Created organization: {org.name} (ID: {org.id}, Slug: {org.slug})")

    if not db.session.query(User).filter_by(email="barber@barberdesk.local").first():
        create_barber(org.id, {
            "email": "barber@barberdesk.local",
            "password": DEMO_PASSWORD,
            "full_name": "Demo Barber",
            "commission_rate": 40,
        })
        click.echo("PASS Created barber user: barber@barberdesk.local")

    click.echo("\nDONE Login with:")
    click.echo(f"   admin  -> admin@barberdesk.local  / {DEMO_PASSWORD}")
    click.echo(f"   barber -> barber@barberdesk.local / {DEMO_PASSWORD}")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


# =============================================================================
# ORGANIZATION COMMANDS
# =============================================================================

@click.group('orgs')
def orgs_group():
    """Organization (tenant) inspection commands."""


@orgs_group.command('list')
@with_appcontext
def list_orgs():
    """List all organizations."""
    orgs = db.session.query(Organization).order_by(Organization.id.asc()).all()

    if not orgs:
        click.echo("No organizations found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<30} {'Slug':<20} {'Active':<8} {'Staff':<7} {'Clients'}")
    click.echo("="*80)

    for org in orgs:
        staff_count = db.session.query(Profile).filter_by(org_id=org.id).count()
        client_count = db.session.query(Client).filter_by(org_id=org.id).count()
        active_str = "Yes" if org.is_active else "No"

        click.echo(f"{org.id:<5} {org.name:<30} {org.slug:<20} {active_str:<8} {staff_count:<7} {client_count}")

    click.echo("="*80 + "\n")


# =============================================================================
# INVENTORY COMMANDS
# =============================================================================

@click.group('inventory')
def inventory_group():
    """Inventory inspection and repair commands."""


@inventory_group.command('reconcile')
@click.option('--org-id', type=int, help='Limit to one organization')
@click.option('--fix', is_flag=True, help='Overwrite drifted counters with the ledger sum')
@with_appcontext
def reconcile_inventory(org_id, fix):
    """
    Compare products.stock_quantity with the sum of stock_movements.quantity.

    Without --fix this is read-only.
    """
    drifted = stock_service.reconcile_stock(org_id, fix=fix)
    if not drifted:
        click.echo("PASS All product counters match the stock ledger.")
        return

    for row in drifted:
        status = "FIXED" if row["fixed"] else "DRIFT"
        click.echo(
            f"{status} product {row['product_id']} ({row['name']}) org {row['org_id']}: "
            f"counter={row['stock_quantity']} ledger={row['ledger_quantity']} drift={row['drift']:+d}"
        )
    click.echo(f"\n{len(drifted)} product(s) drifted.")


# =============================================================================
# MAINTENANCE COMMANDS
# =============================================================================

@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(retention_days):
    """Delete expired or revoked sessions past the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"Deleted {deleted} sessions older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(orgs_group)  # Multi-tenant organization inspection
    app.cli.add_command(inventory_group)
    app.cli.add_command(maintenance_group)
