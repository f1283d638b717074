"""HTTP entrypoint that triggers a business discovery run (Cloud Run friendly)."""

from __future__ import annotations

import logging
import os
from typing import Any

from flask import Flask, jsonify

from business_ingest.core.config import get_settings
from business_ingest.jobs.save_businesses import run_save_businesses

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

# ---------- Routes ----------


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings without touching the database."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "worker_port_config": getattr(settings, "worker_port", None),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.post("/save-businesses")
def save_businesses() -> Any:
    """Run discovery and persistence to completion, then report the totals.

    Takes no input. Only a missing SerpAPI key or an unhandled error yields
    a 500; partial failures are reflected in ``totalSaved``.
    """
    logger.info("Starting to save businesses from Google Maps via SerpAPI")
    try:
        result = run_save_businesses()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error in save-businesses run: %s", exc)
        return jsonify({"error": "Failed to save businesses", "details": str(exc)}), 500

    return jsonify(result.to_dict()), 200


def main() -> None:
    port = int(os.getenv("PORT") or get_settings().worker_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
