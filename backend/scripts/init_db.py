#!/usr/bin/env python3
"""
Initialize the SCRS database with tables, the default department and an admin user.

Safe to run multiple times (idempotent).

Admin credentials can be provided via:
1. Command line arguments: --username, --email, --password
2. Environment variables: ADMIN_USERNAME, ADMIN_EMAIL, ADMIN_PASSWORD
3. Interactive prompts (if running interactively)
"""
import argparse
import getpass
import logging
import os
import sys

# Add backend directory to path
script_dir = os.path.dirname(os.path.abspath(__file__))
backend_dir = os.path.dirname(script_dir)
sys.path.insert(0, backend_dir)

from scrs.core.database import SessionLocal, init_db
from scrs.core.security import get_password_hash
from scrs.models.user import User, UserRole
from scrs.services.department_service import DepartmentService

logger = logging.getLogger("scrs.init_db")


def get_admin_credentials(args=None):
    """Get admin credentials from args, environment variables, or prompt"""
    username = (args and args.username) or os.environ.get("ADMIN_USERNAME")
    email = (args and args.email) or os.environ.get("ADMIN_EMAIL")
    password = (args and args.password) or os.environ.get("ADMIN_PASSWORD")

    if sys.stdin.isatty():
        if not username:
            username = input("Enter admin username: ").strip()
        if not email:
            email = input("Enter admin email: ").strip()
        if not password:
            password = getpass.getpass("Enter admin password: ")
            if password != getpass.getpass("Confirm admin password: "):
                logger.error("Passwords do not match")
                return None, None, None

    if not username or not email or not password:
        return None, None, None

    if len(password) < 8:
        logger.error("Password must be at least 8 characters long")
        return None, None, None

    return username, email, password


def init_database(admin_username=None, admin_email=None, admin_password=None) -> bool:
    init_db()
    logger.info("Database tables created")

    db = SessionLocal()
    try:
        department = DepartmentService(db).get_or_create_default()
        logger.info("Default department: %s (id=%s)", department.name, department.id)

        admins = db.query(User).filter(User.role == UserRole.ADMIN).all()
        if admins:
            for admin in admins:
                if not admin.is_active:
                    admin.is_active = True
                    logger.info("Re-activated admin %s", admin.username)
            logger.info("%d admin user(s) found", len(admins))
        elif admin_username and admin_email and admin_password:
            admin = User(
                username=admin_username,
                email=admin_email,
                hashed_password=get_password_hash(admin_password),
                role=UserRole.ADMIN,
                is_active=True,
            )
            db.add(admin)
            logger.info("Admin user %s created", admin_username)
        else:
            logger.warning(
                "No admin user exists and no credentials were provided; "
                "rerun with --username/--email/--password to create one"
            )

        db.commit()
        return True
    except Exception:
        db.rollback()
        logger.exception("Database initialization failed")
        return False
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(
        description="Initialize the SCRS database with tables, default department and admin user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python init_db.py --username admin --email admin@example.com --password MySecurePass123
  ADMIN_USERNAME=admin ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=MySecurePass123 python init_db.py
        """
    )
    parser.add_argument("--username", "-u", help="Admin username")
    parser.add_argument("--email", "-e", help="Admin email address")
    parser.add_argument("--password", "-p", help="Admin password (min 8 characters)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    username, email, password = get_admin_credentials(args)
    sys.exit(0 if init_database(username, email, password) else 1)


if __name__ == "__main__":
    main()
