#!/usr/bin/env python3
"""
Print the OPA-Auth headers for one PayPay request, using credentials from the
environment (or .env). Handy when comparing against the provider's examples.

  python scripts/sign_request.py GET /v2/payments/order-123
  python scripts/sign_request.py POST /v2/codes --body '{"merchantPaymentId":"order-123"}'
  python scripts/sign_request.py POST /v2/codes --body-file payload.json --timestamp 1700000000 --nonce 00112233445566778899aabbccddeeff
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from src.integrations.errors import ConfigurationError
from src.integrations.signing import build_auth_headers, compute_content_hash
from src.utils.config_loader import load_settings


def main() -> int:
    parser = argparse.ArgumentParser(description="Sign a PayPay API request")
    parser.add_argument("method", choices=["GET", "POST"])
    parser.add_argument("path", help="Resource path, e.g. /v2/codes")
    parser.add_argument("--body", default="", help="Raw request body")
    parser.add_argument("--body-file", type=Path, help="Read the raw body from a file")
    parser.add_argument("--timestamp", type=int, help="Fix the timestamp (seconds since epoch)")
    parser.add_argument("--nonce", help="Fix the nonce (32 hex characters)")
    args = parser.parse_args()

    body = args.body_file.read_bytes() if args.body_file else args.body.encode("utf-8")

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if settings.credential is None:
        print("Error: mock mode is on and no credentials are configured.", file=sys.stderr)
        return 1

    kwargs = {}
    if args.timestamp is not None:
        kwargs["clock"] = lambda: args.timestamp
    if args.nonce:
        try:
            fixed = bytes.fromhex(args.nonce)
        except ValueError:
            print("Error: --nonce must be hex.", file=sys.stderr)
            return 1
        kwargs["random_bytes"] = lambda n: fixed

    headers = build_auth_headers(args.method, args.path, body, settings.credential, **kwargs)

    print(f"# content hash: {compute_content_hash(args.method, body)}")
    for name, value in headers.items():
        print(f"{name}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
