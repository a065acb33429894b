"""FastAPI dependency providers.

Invariants:
    - The UserService (and its store) is built once per application in create_app
      and read from app.state; there is no module-level store
"""

from fastapi import Request

from user_api.services.user_service import UserService


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service
