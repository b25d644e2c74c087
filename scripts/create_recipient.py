"""Utility script to register a notification recipient in the database."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from app.application.use_cases.users import register_recipient
from app.domain.entities import RECIPIENT_ROLES
from app.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for recipient creation."""

    parser = argparse.ArgumentParser(
        description="Register a user who receives purchase-request notifications.",
    )
    parser.add_argument("--name", required=True, help="Display name of the recipient")
    parser.add_argument(
        "--role",
        choices=RECIPIENT_ROLES,
        default="operations",
        help="Workflow role (default: operations)",
    )
    parser.add_argument("--email", default=None, help="E-mail address (optional)")
    parser.add_argument(
        "--phone",
        default=None,
        help="Phone number used by the paid messaging gateway (optional)",
    )
    parser.add_argument("--department", default=None, help="Department (optional)")
    return parser.parse_args()


def main() -> None:
    """Create a recipient using the provided command line arguments."""

    args = parse_args()
    initialize_database()

    session = SessionLocal()
    try:
        recipient = register_recipient(
            session,
            name=args.name,
            role=args.role,
            email=args.email,
            phone=args.phone,
            department=args.department,
        )
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"Could not register the recipient: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Error while saving the recipient: {exc}") from exc
    else:
        print(
            "Recipient registered:\n"
            f"  ID: {recipient.id}\n"
            f"  Name: {recipient.name}\n"
            f"  Role: {recipient.role}\n"
            f"  Email: {recipient.email or '-'}\n"
            f"  Phone: {recipient.phone or '-'}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
