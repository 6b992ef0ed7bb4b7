#!/usr/bin/env python3
"""
Database Setup & Admin Script for the Resume ATS Analyzer
Run this to verify the database connection, create tables and manage accounts.

    python setup_database.py                  # check, create tables, list users
    python setup_database.py --delete alice   # remove an account
"""

import argparse
import sys

from dotenv import load_dotenv
load_dotenv()

from database import (
    SessionLocal, check_db_connection, init_db, list_users, delete_user
)


def test_connection():
    """Test database connection"""
    print("🔌 Testing database connection...")
    if check_db_connection():
        print("✅ Database connected successfully!\n")
        return True
    print("❌ Database connection failed!")
    print("Check your DATABASE_URL environment variable\n")
    return False


def show_users(session_factory=SessionLocal):
    """List all accounts in the database"""
    print("👥 Current users in database:")
    print("-" * 60)

    db = session_factory()
    try:
        users = list_users(db)
        if not users:
            print("   (No users found)")
        for user in users:
            print(f"   #{user.id} {user.username} (created {user.created_at})")
    finally:
        db.close()

    print(f"Total users: {len(users)}\n")
    return len(users)


def remove_user(username, session_factory=SessionLocal):
    """Delete an account by username"""
    db = session_factory()
    try:
        removed = delete_user(db, username)
    finally:
        db.close()

    if removed:
        print(f"✅ Deleted user: {username}\n")
    else:
        print(f"❌ User not found: {username}\n")
    return removed


def main(argv=None):
    """Main setup script"""
    parser = argparse.ArgumentParser(description="Resume ATS Analyzer database setup")
    parser.add_argument("--delete", metavar="USERNAME", help="delete this account")
    args = parser.parse_args(argv)

    print("=" * 60)
    print("🗄️  Resume ATS Analyzer Database Setup")
    print("=" * 60)
    print()

    if not test_connection():
        return 1

    init_db()
    print("✅ Database tables ready\n")

    if args.delete:
        if not remove_user(args.delete):
            return 1

    show_users()
    return 0


if __name__ == "__main__":
    sys.exit(main())
