"""
Serve the API with uvicorn.

Usage:
    python -m user_todo_api

Bind address and port come from the HOST and PORT environment variables.
"""
import uvicorn

from .main import create_app
from .settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
