"""
asgi.py -- Application assembly for the GitHub login demo.

This is the ONLY file that imports from both api/ and web/, and the only
place that builds the app from process configuration. Importing it raises
core.config.ConfigError when GITHUB_CLIENT_ID, GITHUB_CLIENT_SECRET or
SESSION_SECRET is unusable, so a misconfigured server never starts.

Run with:  uvicorn asgi:app --reload
           python main.py
"""

from api.main import create_app
from web.routes import build_router

app = create_app()

# Mount the web UI router here, not in api/main.py. /login is limited by
# this app's own limiter.
app.include_router(build_router(app.state.limiter), tags=["Web UI"])
