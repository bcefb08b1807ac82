"""Set the stored role of a registered user.

Usage:
    python -m lifeshield.promote_user someone@example.com
    python -m lifeshield.promote_user someone@example.com --role agent
"""
import argparse
import sys

from lifeshield.database import SessionLocal, init_database
from lifeshield.models.user import USER_ROLES, User


def promote(email: str, role: str, session_factory=SessionLocal) -> bool:
    db = session_factory()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            return False
        user.role = role
        db.commit()
        return True
    finally:
        db.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Change a user's role.")
    parser.add_argument("email")
    parser.add_argument("--role", default="admin", choices=USER_ROLES)
    args = parser.parse_args(argv)

    init_database()
    if not promote(args.email, args.role):
        print(f"No user registered with email {args.email}", file=sys.stderr)
        sys.exit(1)
    print(f"{args.email} is now {args.role}")


if __name__ == "__main__":
    main()
