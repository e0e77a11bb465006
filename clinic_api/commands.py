import click
from flask.cli import with_appcontext
from sqlalchemy import or_
from clinic_api.extensions import db
from clinic_api.models.user_models import User, ADMIN

@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the users and audit tables."""
    db.create_all()
    click.echo("Database initialized successfully!")

@click.command('create-admin')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.password_option()
@with_appcontext
def create_admin_command(username, email, password):
    """Create an admin account. Signup only ever creates patients."""
    email = email.strip().lower()
    if User.query.filter(or_(User.username == username, User.email == email)).first():
        raise click.ClickException("Username or email already in use")

    admin = User(username=username, email=email, user_type=ADMIN)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    click.echo(f"Admin '{username}' created with id {admin.id}")

def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)
