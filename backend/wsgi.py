# backend/wsgi.py
# Entry point for `flask --app wsgi` and WSGI servers.
from salonbook import create_app

app = create_app()
