from asgiref.wsgi import WsgiToAsgi
from app import app  # Import the Flask app from app.py

# Wrap the Flask WSGI app to make it ASGI-compatible
asgi_app = WsgiToAsgi(app)

# To serve with uvicorn directly:
#   uvicorn asgi:asgi_app --host 0.0.0.0 --port 8000
