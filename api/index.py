"""
Serverless entry point.

Hosting platforms (Vercel and similar) import this module and invoke ``app``
per request, so no local listener is started here. The app is built at import
time so a missing JWT_SECRET fails the deployment rather than the first login.
"""

from mfa_bridge.main import create_app

app = create_app()
