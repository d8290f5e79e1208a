"""Cross-origin access for the challenge web app."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from streakboard.config import Settings

# Every route is a GET or POST; admin actions are POSTs carrying X-Admin-Token.
ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "X-Admin-Token", "X-Request-Id"]
EXPOSED_HEADERS = ["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Let the web app origins in ``SB_CORS_ORIGINS`` call the API.

    No cookies are used, so credentials stay off; that also keeps a ``*``
    origin entry valid.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=EXPOSED_HEADERS,
    )
