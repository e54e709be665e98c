"""Smoke script for the rate proxy.

Demonstrates against a throwaway database:
 1. First lookup triggers a refresh from the configured source.
 2. Re-based table, pair rate and conversion are served from the cached table.
 3. Manual update with the shared secret.

Uses the offline 'static' source unless RATE_SOURCE / API_KEY are set in the
environment. NOTE: This is a lightweight diagnostic and not a formal test.
"""

import json
import os
import sys
import tempfile

from fastapi.testclient import TestClient

from exchange_proxy.core.config import Settings
from exchange_proxy.main import create_app


def run():
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(
            db_path=os.path.join(d, "smoke.db"),
            rate_source=os.environ.get("RATE_SOURCE", "static"),
            update_password="smoke",
        )
        client = TestClient(create_app(settings_override=settings))
        out = {
            "pair": client.get("/USD/EUR").json(),
            "convert": client.get("/USD/JPY/250").json(),
            "last_eur_sample": {
                k: v for k, v in list(client.get("/last/EUR").json()["data"].items())[:5]
            },
            "update": client.get("/update/smoke").json().get("message"),
            "health": client.get("/health").json(),
        }
        print(json.dumps(out, indent=2))


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run()
