"""
ga4gh_identity.api.__main__

Entrypoint for running a gate service via `python -m ga4gh_identity.api` (or the
`ga4gh-identity` console script).

Responsibilities:
- Load settings and pick the app (`GA4GH_APP=key-vendor|proxy`).
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from ga4gh_identity.api import key_vendor, proxy
from ga4gh_identity.settings import get_settings


def main() -> None:
    settings = get_settings()
    factory = proxy.create_app if settings.app == "proxy" else key_vendor.create_app
    app = factory(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
