#!/usr/bin/env python3
"""
Trigger one product cache pre-warm pass on a running storefront service.

Useful right after a deploy or a cache clear, when waiting for the next
scheduled pass would leave the quick product listing cold.
"""

import argparse
import json
from pathlib import Path
import sys
import os

import httpx


def warm(*, base_url: str, timeout: float, request_id: str) -> dict:
    """POST to the warm endpoint and return the pass summary."""
    response = httpx.post(
        f"{base_url.rstrip('/')}/api/v1/cache/warm",
        headers={"X-Request-ID": request_id},
        timeout=timeout,
    )
    response.raise_for_status()
    return response.json()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Warm the storefront product cache.")
    parser.add_argument("--base-url", default=os.getenv("STOREFRONT_BASE_URL", "http://localhost:5000"), help="Storefront service URL")
    parser.add_argument("--timeout", type=float, default=30.0, help="Request timeout in seconds")
    parser.add_argument("--request-id", default="cache-warmer", help="X-Request-ID sent with the call (for log correlation)")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    try:
        result = warm(base_url=args.base_url, timeout=args.timeout, request_id=args.request_id)
    except KeyboardInterrupt:
        return 130
    except httpx.HTTPError as exc:
        print(f"[cache-warm] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))

    if args.output:
        args.output.write_text(json.dumps(result, indent=2))

    return 0 if result.get("summary", {}).get("error") is None else 2


if __name__ == "__main__":
    raise SystemExit(main())
