# sdk/server.py
"""ASGI app for ``uvicorn sdk.server:app``: one GameSession built from BLOCKFALL_* config."""

from apps.ui_api.main import create_app
from sdk.runtime import GameSession

app = create_app(GameSession())
