#!/usr/bin/env python3
"""
Seed script to create a demo account.

Usage:
    # Set environment variables for the account
    export SEED_EMAIL="demo@lifelog.app"
    export SEED_PASSWORD="your_password"
    export SEED_NAME="Demo"
    # Optional: store a DeepSeek key on the account
    export SEED_DEEPSEEK_API_KEY="sk-..."

    # Run the script
    python scripts/seed_users.py
"""
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from lifelog.auth import MIN_PASSWORD_LENGTH, hash_password
from lifelog.database import SessionLocal, init_db
from lifelog.models import User, UserSettings


def seed_users():
    """Create the demo account from environment variables."""
    email = os.getenv("SEED_EMAIL", "demo@lifelog.app").strip().lower()
    password = os.getenv("SEED_PASSWORD")
    name = os.getenv("SEED_NAME", "Demo")

    if not password:
        print("Error: missing SEED_PASSWORD env var")
        sys.exit(1)
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Error: SEED_PASSWORD must be at least {MIN_PASSWORD_LENGTH} characters")
        sys.exit(1)

    init_db()
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            print(f"Skipped: {email} already exists")
            return

        user = User(email=email, name=name, password_hash=hash_password(password))
        user.settings = UserSettings(
            deepseek_api_key=os.getenv("SEED_DEEPSEEK_API_KEY") or None
        )
        db.add(user)
        db.commit()
        print(f"Created: {name} ({email})")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    seed_users()
