import sys
from invoke import task
from pathlib import Path

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.absolute()

# Note: .env file is loaded by the Django settings


def project_relative(path):
    """Convert a relative path to an absolute path relative to the project root."""
    return str(PROJECT_ROOT / path)


def import_database():
    """Import the default database settings from Django settings."""
    sys.path.insert(0, str(PROJECT_ROOT))
    from tipgame.settings import DATABASES
    return DATABASES['default']


def manage(c, command):
    manage_py = project_relative("manage.py")
    c.run(f"python {manage_py} {command}")


@task
def update(c):
    """Reinstall the project with its test dependencies."""
    c.run(f"pip install -e {PROJECT_ROOT}[test]")


@task
def up(c):
    """Alias for update."""
    update(c)


@task
def createdb(c):
    """Create the PostgreSQL database configured through DB_NAME."""
    database = import_database()
    if database['ENGINE'].endswith('sqlite3'):
        print("Using SQLite, nothing to create. Set DB_NAME to use PostgreSQL.")
        return
    c.run(f"createdb -U {database['USER']} {database['NAME']}", warn=True)


@task
def migrate(c):
    """Run Django database migrations."""
    manage(c, "migrate")


@task
def makemigrations(c):
    """Create new Django migrations."""
    manage(c, "makemigrations predictions")


@task
def shell(c):
    """Start Django shell."""
    manage(c, "shell")


@task
def test(c, path=None):
    """Run the tests. Optionally specify a specific test path."""
    target = path or ""
    manage(c, f"test --settings=tipgame.test_settings {target}".rstrip())


@task
def settle(c, event_id, group_code=None):
    """Settle every bundle of an event, or a single one."""
    extra = f" --group-code {group_code}" if group_code is not None else ""
    manage(c, f"settle_bundle {event_id}{extra}")


@task
def snapshot(c, season_tag, margin_aware=False):
    """Store the squad standings of a season."""
    extra = " --margin-aware" if margin_aware else ""
    manage(c, f"rebuild_squad_snapshot {season_tag}{extra}")


@task
def seed(c, settle=False):
    """Seed a demo season with one event, optionally settled."""
    manage(c, "seed_demo_event --settle" if settle else "seed_demo_event")


@task
def createsuperuser(c):
    """Create a Django superuser."""
    manage(c, "createsuperuser")
