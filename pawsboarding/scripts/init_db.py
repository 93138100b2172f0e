from __future__ import annotations

import argparse

from pawsboarding.db.base import Base
from pawsboarding.db.session import SessionLocal, engine

# Import models to register with SQLAlchemy
import pawsboarding.models  # noqa: F401
from pawsboarding.services.vip_service import add_vip_customer


def main() -> int:
    parser = argparse.ArgumentParser(description="Create tables and optionally seed VIP customers")
    parser.add_argument("--vip", action="append", default=[], metavar="EMAIL", help="seed a VIP customer (repeatable)")
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        for email in args.vip:
            add_vip_customer(db, email=email)
    finally:
        db.close()

    print(f"DB initialized ({len(args.vip)} VIP seeded)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
