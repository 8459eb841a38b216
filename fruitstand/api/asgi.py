# ASGI entry point
"""
================================================================================
FILE: fruitstand/api/asgi.py
================================================================================

PURPOSE:
    ASGI entry point for external servers (uvicorn, gunicorn with uvicorn
    workers, hypercorn). Builds the app from environment settings.

KEY FACTS:
    - Never modify app behavior in this file; use main.py for app setup
    - TLS is the server's job: pass --ssl-certfile/--ssl-keyfile, or use
      fruitstand.server which does it from Settings

USAGE:
    uvicorn fruitstand.api.asgi:app --port 8443 \
        --ssl-certfile cert.pem --ssl-keyfile key.pem
"""

# ================================================================================
# IMPORTS
# ================================================================================

from .main import create_app

# ================================================================================
# ASGI APPLICATION EXPORT
# ================================================================================

# ASGI servers look for 'app' by default
app = create_app()

__all__ = ["app"]
