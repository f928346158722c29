"""Web server exposing readings to the dashboard."""

from .entrypoint import create_app

app = create_app()
