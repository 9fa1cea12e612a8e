"""HMAC signing helper for simulating Shopify webhooks.

Reads JSON body from stdin and outputs a base64-encoded HMAC-SHA256 signature
using the SHOPIFY_WEBHOOK_SECRET from the environment (or .env file).

Usage:
    echo '{"id": 123}' | python -m scripts.sign_webhook

    # Or pipe from a file:
    cat payload.json | python -m scripts.sign_webhook

    # Full curl example:
    BODY='{"id":555,"email":"","customer":{"first_name":"Jane","last_name":"Doe","email":"jane@x.com"}}'
    HMAC=$(echo -n "$BODY" | python -m scripts.sign_webhook)
    curl -X POST http://localhost:10000/webhook \\
      -H "Content-Type: application/json" \\
      -H "X-Shopify-Hmac-Sha256: $HMAC" \\
      -H "X-Shopify-Topic: orders/create" \\
      -d "$BODY"
"""

import sys

from order_webhook.core.config import settings
from order_webhook.integrations.shopify.webhooks import compute_signature


def sign(body: bytes, secret: str) -> str:
    """Compute base64-encoded HMAC-SHA256 signature."""
    return compute_signature(body, secret)


def main() -> None:
    secret = settings.shopify_webhook_secret
    if not secret:
        print("ERROR: SHOPIFY_WEBHOOK_SECRET is not set in .env", file=sys.stderr)
        sys.exit(1)

    body = sys.stdin.buffer.read()
    if not body:
        print("ERROR: No input received on stdin", file=sys.stderr)
        sys.exit(1)

    signature = sign(body, secret)
    print(signature, end="")


if __name__ == "__main__":
    main()
