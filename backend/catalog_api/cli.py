"""
Administrative command line: ``catalog-admin``.

Registration over HTTP is disabled by default, so users are created here.
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from catalog_api.config import Settings
from catalog_api.core.exceptions import Conflict
from catalog_api.core.logging_config import setup_logging
from catalog_api.database import Database
from catalog_api.services.auth_service import AuthService

logger = logging.getLogger(__name__)


def init_db(settings: Settings) -> int:
    db = Database.from_settings(settings).open()
    db.close()
    logger.info(f"Tables created in {settings.DATABASE_URL}")
    return 0


def create_user(settings: Settings, username: str, password: Optional[str]) -> int:
    if password is None:
        password = getpass.getpass("Password: ")
    if len(username) < 3 or len(password) < 6:
        print("Username needs 3+ characters and password 6+ characters", file=sys.stderr)
        return 1

    db = Database.from_settings(settings).open()
    try:
        with db.session_scope() as session:
            user = AuthService(settings).create_user(session, username, password)
            print(f"Created user {user.username} (id={user.id})")
    except Conflict as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


def serve(host: str, port: int, reload: bool) -> int:
    import uvicorn

    uvicorn.run("catalog_api.main:app", host=host, port=port, reload=reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catalog-admin", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create database tables")

    user_parser = sub.add_parser("create-user", help="Create a user able to log in")
    user_parser.add_argument("username")
    user_parser.add_argument(
        "--password", help="Password (prompted for when omitted)"
    )

    serve_parser = sub.add_parser("serve", help="Run the API with uvicorn")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=3000)
    serve_parser.add_argument("--reload", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings()
    setup_logging(settings)

    if args.command == "init-db":
        return init_db(settings)
    if args.command == "create-user":
        return create_user(settings, args.username, args.password)
    return serve(args.host, args.port, args.reload)


if __name__ == "__main__":
    sys.exit(main())
