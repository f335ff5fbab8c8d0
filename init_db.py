#!/usr/bin/env python3
"""
Database Initialization Script
Run once after cloning to create the schema and the first admin account.
"""
import getpass
import sys
from pathlib import Path


def main():
    """Initialize database with default data"""
    print("=" * 60)
    print("Knowledge Base - Database Initialization")
    print("=" * 60)

    # Check if data directory exists
    data_dir = Path("data")
    if not data_dir.exists():
        print(f"Creating data directory: {data_dir}")
        data_dir.mkdir(parents=True, exist_ok=True)

    from knowledge_base.config import settings
    from knowledge_base.database import init_db, SessionLocal
    from knowledge_base.models.init_data import init_default_data
    from knowledge_base.services.auth import is_allowed_email

    # Initialize database schema
    print("\nCreating database tables...")
    init_db()
    print("Database schema created successfully")

    default_email = f"admin{settings.allowed_email_domain}"
    email = input(f"\nAdmin email [{default_email}]: ").strip() or default_email
    if not is_allowed_email(email):
        print(f"Admin email must end with {settings.allowed_email_domain}")
        sys.exit(1)
    password = getpass.getpass("Admin password (min 8 characters): ")
    if len(password) < 8:
        print("Password is too short")
        sys.exit(1)

    db = SessionLocal()
    try:
        admin = init_default_data(db, email, password)
        if admin:
            print(f"Admin account created: {admin.email}")
        else:
            print("An admin account already exists, skipping")
    except Exception as e:
        print(f"Error during initialization: {e}")
        db.rollback()
        sys.exit(1)
    finally:
        db.close()

    print("\n" + "=" * 60)
    print("Database initialization completed!")
    print("=" * 60)
    print("\nNext steps:")
    print("   1. Configure .env file with your settings (SECRET_KEY is required)")
    print("   2. Run: uvicorn knowledge_base.main:app --reload --host 0.0.0.0 --port 8000")
    print("=" * 60)


if __name__ == "__main__":
    main()
