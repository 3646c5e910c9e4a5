"""Thin API launcher.

This is the uvicorn entrypoint. All application logic lives in the studybuddy package.
Run with: uvicorn main:app --reload

Note: The app instance is created here (not in studybuddy.app) so that
importing create_app has no side effects. Tests build their own apps with
injected stores and providers.
"""

from studybuddy.app import add_request_id_middleware, create_app

# Create the application instance
app = create_app()
# Add request-id middleware LAST so it runs FIRST (outermost)
add_request_id_middleware(app)

__all__ = ["app"]
