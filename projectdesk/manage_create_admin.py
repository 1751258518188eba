"""Create (or promote) the initial ProjectDesk administrator.

Run: `python -m projectdesk.manage_create_admin --email admin@example.com --password changeme`
"""

import argparse
from contextlib import contextmanager

from projectdesk.auth.jwt import get_password_hash
from projectdesk.config import Base, SessionLocal, engine
from projectdesk.constants import MIN_PASSWORD_LENGTH
from projectdesk.models.models import User
from projectdesk.services.audit import record_audit


@contextmanager
def session_scope():
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create the initial admin user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Initial Administrator")
    parser.add_argument(
        "--promote",
        action="store_true",
        help="Give an existing account the admin role instead of failing",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    if len(args.password) < MIN_PASSWORD_LENGTH:
        raise SystemExit(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    Base.metadata.create_all(bind=engine)
    email = args.email.strip().lower()
    with session_scope() as db:
        user = db.query(User).filter(User.email == email).first()
        if user and not args.promote:
            print("User already exists with that email; pass --promote to make it an admin.")
            return
        if user:
            previous_role = user.role
            user.role = "admin"
            db.commit()
            record_audit(db, "user", user.id, None, "update", {"role": {"from": previous_role, "to": "admin"}})
            print(f"Promoted user {user.id} from {previous_role} to admin")
            return

        user = User(email=email, name=args.name, hashed_password=get_password_hash(args.password), role="admin")
        db.add(user)
        db.commit()
        record_audit(db, "user", user.id, None, "create", {"email": email, "role": "admin"})
        print(f"Created admin user with id {user.id}")


if __name__ == "__main__":
    main()
