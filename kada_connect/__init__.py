"""KADA Connect backend package.

To use the Flask app:
    from kada_connect.flask_app import app

To use the lookup service without Flask:
    from kada_connect.core.lookup_service import build_lookup_service
    from kada_connect.core.profiles import InMemoryProfileRepository
"""
# Note: We don't import flask_app by default; importing it builds the app
# from the environment.

__version__ = "1.0.0"
