from fastapi import Request

from .schemas import AppConfig


def get_settings(request: Request) -> AppConfig:
    return request.app.state.settings
