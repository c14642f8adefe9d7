import argparse
import sys
from pathlib import Path

from excel_quiz import config
from excel_quiz.errors import ConfigurationError
from excel_quiz.logging_setup import setup_console_logging
from excel_quiz.quiz.catalog import load_catalog

setup_console_logging()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Excel quiz administration")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check-catalog", help="Validate the chapter catalog")
    check.add_argument(
        "--path",
        type=Path,
        default=config.CHAPTERS_PATH,
        help="Catalog JSON file",
    )

    add_admin = sub.add_parser("add-admin", help="Add an email to the admin directory")
    add_admin.add_argument("email")
    add_admin.add_argument("--name", default=config.INITIAL_ADMIN_NAME, help="Display name")

    serve = sub.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser.parse_args(argv)


def check_catalog(path: Path) -> int:
    try:
        catalog = load_catalog(path)
    except ConfigurationError as e:
        print(f"Invalid catalog: {e}", file=sys.stderr)
        return 1
    for chapter in catalog:
        print(f"{chapter.id}: {chapter.title} ({chapter.blank_count} blanks)")
    return 0


def add_admin(email: str, name: str) -> int:
    from excel_quiz.database import SessionLocal, init_db
    from excel_quiz.services.admin_service import add_admin as insert_admin

    init_db()
    db = SessionLocal()
    try:
        admin = insert_admin(db, email, name)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Added admin {admin.email}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.command == "check-catalog":
        return check_catalog(args.path)
    if args.command == "add-admin":
        return add_admin(args.email, args.name)

    import uvicorn

    from excel_quiz.app import app

    uvicorn.run(app, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
