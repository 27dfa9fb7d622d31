#!/usr/bin/env python
"""
Quick setup for local development.

This script:
1. Configures Django settings
2. Runs migrations
3. Creates a super-admin account
4. Optionally files sample tickets through the use cases

Usage:
    python scripts/quick_setup.py --admin-email admin@example.com --admin-password changeme123
    python scripts/quick_setup.py --with-sample-data
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

logger = logging.getLogger("quick_setup")

SAMPLE_TICKETS = [
    {
        "title": "VPN drops every few minutes",
        "description": "Since this morning the VPN disconnects constantly and I cannot reach the file server.",
        "priority": "High",
    },
    {
        "title": "Payroll slip shows wrong leave balance",
        "description": "My payslip lists 3 days of annual leave but I should have 12.",
        "priority": "Medium",
    },
    {
        "title": "Request for a second monitor",
        "description": "Could I get a second monitor for my desk? It would help with spreadsheets.",
        "priority": "Low",
    },
]


def setup_django():
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "src.config.settings")

    import django
    django.setup()


def check_connection() -> bool:
    from django.db import DatabaseError, connection

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        logger.error(f"Database connection failed: {e}")
        return False
    logger.info("Database connection OK")
    return True


def run_migrations():
    from django.core.management import call_command

    logger.info("Running migrations...")
    call_command("migrate", verbosity=1)


def ensure_super_admin(email: str, password: str):
    """Create the super-admin unless the email is already registered."""
    from src.config.container import get_container
    from src.core.accounts.entities import ActorRole, UserEntity

    container = get_container()
    repo = container.user_repository()

    existing = repo.get_by_email(UserEntity.normalize_email(email))
    if existing:
        logger.info(f"Super-admin already exists: {existing.email}")
        return existing

    UserEntity.validate_password(password)
    user = UserEntity.create(
        name="Administrator",
        email=email,
        password_hash=container.password_hasher().hash(password),
        role=ActorRole.SUPER_ADMIN,
        department="IT",
    )
    repo.save(user)
    logger.info(f"Super-admin created: {user.email}")
    return user


def create_sample_data(requester):
    from src.config.container import get_container
    from src.core.tickets.dtos import CreateTicketInputDTO

    service = get_container().create_ticket_service()
    for data in SAMPLE_TICKETS:
        output = service.execute(requester, CreateTicketInputDTO(**data))
        logger.info(f"  {output.ticket.ticket_number} [{output.ticket.category}] {output.ticket.title}")

    logger.info(f"{len(SAMPLE_TICKETS)} sample tickets created")


def main():
    parser = argparse.ArgumentParser(description="Quick setup for local development")
    parser.add_argument("--admin-email", default="admin@helpdesk.local")
    parser.add_argument("--admin-password", default="change-me-now")
    parser.add_argument(
        "--with-sample-data",
        action="store_true",
        help="File sample tickets as the super-admin",
    )
    parser.add_argument(
        "--check-only",
        action="store_true",
        help="Only check the database connection",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    setup_django()

    if not check_connection():
        sys.exit(1)
    if args.check_only:
        return

    run_migrations()
    admin = ensure_super_admin(args.admin_email, args.admin_password)

    if args.with_sample_data:
        create_sample_data(admin)


if __name__ == "__main__":
    main()
