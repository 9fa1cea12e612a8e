"""Run the webhook receiver with uvicorn: ``python -m order_webhook``."""

import uvicorn

from order_webhook.core.config import settings


def main() -> None:
    uvicorn.run(
        "order_webhook.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
