from __future__ import annotations

import argparse

from pawsboarding.db.session import SessionLocal
from pawsboarding.services.vip_service import add_vip_customer


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", required=True)
    parser.add_argument("--level", default="standard", choices=["standard", "gold", "premium"])

    args = parser.parse_args()

    db = SessionLocal()
    try:
        vip = add_vip_customer(db, email=args.email, vip_level=args.level)
        print(f"VIP customer: {vip.email} ({vip.vip_level})")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
