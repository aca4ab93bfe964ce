"""
User/Todo resource service.

FastAPI application managing users and the todo items they own. Build an
application with `user_todo_api.main.create_app()`, or serve the default one
with `python -m user_todo_api`.
"""

__version__ = "0.1.0"
