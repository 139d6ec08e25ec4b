"""
Create an account (e.g. first admin). Run from project root:
  python -m blogai.scripts.create_user EMAIL PASSWORD [role] [--name NAME]
Example:
  python -m blogai.scripts.create_user admin@example.com your-secure-password admin
"""
import argparse
import logging
import sys

from blogai.core.config import get_settings
from blogai.core.context import AppContext
from blogai.core.errors import AppError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a BlogAI account.")
    parser.add_argument("email", help="Email (unique, matched case-sensitively)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    parser.add_argument("--name", default=None, help="Display name")
    args = parser.parse_args()

    context = AppContext.build(get_settings())
    db = context.session_factory()
    try:
        user = context.issuer.register(
            db,
            email=args.email.strip(),
            secret=args.password,
            name=args.name,
            role=args.role,
        )
        print(f"Created user '{user.email}' with role '{user.role}'.")
        return 0
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
        context.close()


if __name__ == "__main__":
    sys.exit(main())
