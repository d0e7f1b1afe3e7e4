#!/usr/bin/env python3
"""
Create or reset an administrator account.

An existing account with the email is reactivated, promoted to admin and
given the new password. Either way the account must change its password
at next login.

Usage:
    uv run python create_admin.py --email admin@example.com --password 'initial-pass'
"""

import argparse
import sys

from rich.console import Console

from modules.auth.passwords import CredentialStore, check_password_policy
from modules.users.models import normalize_email
from modules.users.repository import UserRepository
from shared.config import get_settings
from shared.database import connect, scoped_connection
from shared.exceptions import ValidationError

console = Console()


def create_admin(users: UserRepository, credentials: CredentialStore, email: str, password: str, full_name: str) -> dict:
    """Insert a new admin, or reset the newest account holding the email."""
    email = normalize_email(email)
    password_hash = credentials.hash(password)
    existing = users.find_any_by_email(email)

    if not existing:
        return users.insert(
            {
                "email": email,
                "password_hash": password_hash,
                "full_name": full_name,
                "role": "admin",
                "must_change_password": True,
            }
        )

    user_id = existing[0]["id"]
    users.reactivate(
        user_id,
        {"password_hash": password_hash, "full_name": full_name, "role": "admin", "doctor_id": existing[0].get("doctor_id")},
    )
    return users.update_any(user_id, {"must_change_password": True})


def main():
    parser = argparse.ArgumentParser(description="Create or reset an administrator account")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--password", required=True, help="Initial password")
    parser.add_argument("--full-name", default="Administrator", help="Display name")
    args = parser.parse_args()

    settings = get_settings()
    try:
        check_password_policy(args.password, settings.min_password_length)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)

    credentials = CredentialStore(rounds=settings.bcrypt_rounds)
    with scoped_connection(connect) as conn:
        user = create_admin(UserRepository(conn), credentials, args.email, args.password, args.full_name)

    console.print(f"[green]✓[/green] Admin ready: {user['email']} (id {user['id']})")
    console.print("[yellow]The password must be changed on first login.[/yellow]")


if __name__ == "__main__":
    main()
