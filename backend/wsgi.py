# backend/wsgi.py
from andiamo import create_app

app = create_app()
