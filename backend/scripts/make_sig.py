#!/usr/bin/env python3
"""
Print a Stripe-Signature header for a webhook payload, for local testing.

Usage:
    python scripts/make_sig.py <payload.json> [secret]

The secret defaults to STRIPE_WEBHOOK_SECRET from the environment / .env.
"""
import hashlib
import hmac
import json
import sys
import time
from pathlib import Path


def stripe_signature_header(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    sig = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={sig}"


def main(argv: list[str]) -> int:
    if len(argv) not in (2, 3):
        print(__doc__, file=sys.stderr)
        return 1

    payload = Path(argv[1]).read_bytes()
    try:
        json.loads(payload)
    except json.JSONDecodeError:
        print("Error: payload must be valid JSON", file=sys.stderr)
        return 1

    if len(argv) == 3:
        secret = argv[2]
    else:
        from meco.core.config import get_settings

        secret = get_settings().stripe_webhook_secret

    print(stripe_signature_header(payload, secret))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
