"""
Management commands for setup and maintenance
"""
import click
from dateutil.relativedelta import relativedelta
from flask.cli import with_appcontext

from .extensions import db
from .models import Distribution, DrugLot, Service, User
from .services.stock_mutation import distribute_stock, receive_stock
from .utils.timezone_utils import TimezoneUtils

DEMO_SERVICES = (
    'Urgences',
    'Chirurgie',
    'Pédiatrie',
    'Cardiologie',
    'Oncologie',
    'Médecine interne',
)

# (barcode, designation, lot number, category, quantity, threshold, months until expiry or None)
DEMO_LOTS = (
    ('8901043011333', 'Paracetamol 500mg', 'PCM-2401', 'Analgesic', 250, 50, 14),
    ('1234567890123', 'Paracetamol 500mg', 'PCM-2407', 'Analgesic', 500, 50, 24),
    ('8901296043232', 'Amoxicillin 250mg', 'AMX-2312', 'Antibiotic', 45, 50, 2),
    ('8901135230018', 'Ibuprofen 200mg', 'IBU-2403', 'Analgesic', 300, 100, 20),
    ('9876543210987', 'Ibuprofen 200mg', 'IBU-2311', 'Analgesic', 150, 100, -1),
    ('8904091102029', 'Cetirizine 10mg', 'CTZ-2310', 'Antihistamine', 150, 30, 1),
    ('8906009400249', 'Aspirin 75mg', 'ASP-2402', 'Cardiology', 180, 40, 8),
    ('8901799002131', 'Metformin 500mg', 'MET-2405', 'Antidiabetic', 120, 25, 16),
    ('8901088102345', 'Omeprazole 20mg', 'OMP-2401', 'Gastro', 90, 30, 5),
    ('3400930000001', 'Sodium chloride 0.9% 500ml', None, 'Solution', 400, 100, None),
)

# (barcode, lot number, service name, quantity)
DEMO_DISTRIBUTIONS = (
    ('8901043011333', 'PCM-2401', 'Urgences', 20),
    ('8901296043232', 'AMX-2312', 'Pédiatrie', 15),
    ('8901135230018', 'IBU-2403', 'Chirurgie', 30),
    ('8906009400249', 'ASP-2402', 'Cardiologie', 10),
    ('8901043011333', 'PCM-2401', 'Médecine interne', 25),
)


@click.command('create-user')
@click.argument('username')
@click.option('--email', default=None, help='Contact email')
@click.password_option()
@with_appcontext
def create_user_command(username, email, password):
    """Create a pharmacy staff account"""
    if User.query.filter_by(username=username).first():
        raise click.ClickException(f"User {username} already exists.")

    user = User(username=username, email=email, is_active=True)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    click.echo(f"✅ Created user {username} (id {user.id})")


@click.command('seed-demo')
@with_appcontext
def seed_demo_command():
    """Seed demo services, lots and distributions (safe to run twice)"""
    services = {service.name: service for service in Service.query.all()}
    for name in DEMO_SERVICES:
        if name not in services:
            service = Service(name=name)
            db.session.add(service)
            services[name] = service
    db.session.commit()
    click.echo(f"✅ Services: {len(services)}")

    if db.session.query(DrugLot.id).first() is not None:
        click.echo("ℹ️  Drug lots already present; skipping lots and distributions.")
        return

    today = TimezoneUtils.today()
    for barcode, designation, lot_number, category, quantity, threshold, months in DEMO_LOTS:
        expiry = (today + relativedelta(months=months)).isoformat() if months is not None else 'N/A'
        receive_stock(
            barcode=barcode,
            designation=designation,
            quantity=quantity,
            lot_number=lot_number,
            expiry_date=expiry,
            category=category,
            low_stock_threshold=threshold,
        )
    click.echo(f"✅ Drug lots: {len(DEMO_LOTS)}")

    for barcode, lot_number, service_name, quantity in DEMO_DISTRIBUTIONS:
        distribute_stock(
            barcode=barcode,
            lot_number=lot_number,
            service_id=services[service_name].id,
            quantity=quantity,
        )
    click.echo(f"✅ Distributions: {len(DEMO_DISTRIBUTIONS)}")


@click.command('check-stock-integrity')
@with_appcontext
def check_stock_integrity_command():
    """Report lots with negative stock and distributions whose lot is gone"""
    negative = DrugLot.query.filter(DrugLot.current_stock < 0).order_by(DrugLot.id).all()
    orphaned = (
        Distribution.query.outerjoin(DrugLot, Distribution.drug_lot_id == DrugLot.id)
        .filter(DrugLot.id.is_(None))
        .order_by(Distribution.id)
        .all()
    )

    for lot in negative:
        click.echo(f"❌ Lot {lot.id} ({lot.designation}) has negative stock: {lot.current_stock}")
    for entry in orphaned:
        click.echo(f"⚠️  Distribution {entry.id} ({entry.item_name}) references a lot that no longer exists")

    if not negative and not orphaned:
        click.echo("✅ Stock ledger is consistent.")
        return
    raise SystemExit(1)


def register_commands(app):
    """Register CLI commands"""
    app.cli.add_command(create_user_command)
    app.cli.add_command(seed_demo_command)
    app.cli.add_command(check_stock_integrity_command)
