import click
from flask.cli import with_appcontext
from werkzeug.security import generate_password_hash

from extensions import db
from models import Department, User, UserRole


def seed_departments():
    departments = [
        {"code": "CSE", "name": "Computer Science and Engineering"},
        {"code": "ECE", "name": "Electronics and Communication Engineering"},
    ]

    for d in departments:
        existing = Department.query.filter_by(code=d["code"]).first()
        if not existing:
            db.session.add(Department(code=d["code"], name=d["name"]))

    db.session.commit()
    click.echo("Departments seeded")


def seed_admin(email, password, full_name="Administrator"):
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        click.echo(f"Admin {email} already exists")
        return

    admin = User(
        email=email,
        full_name=full_name,
        password_hash=generate_password_hash(password),
        is_active=True
    )
    admin.role_assignment = UserRole(role="admin")
    db.session.add(admin)
    db.session.commit()
    click.echo(f"Admin {email} created")


@click.command("seed")
@click.option("--admin-email", default="admin@example.com", show_default=True)
@click.option("--admin-password", prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def seed_command(admin_email, admin_password):
    """Create the default departments and the first admin account."""
    seed_departments()
    seed_admin(admin_email, admin_password)
