"""
FastAPI dependencies for dependency injection.

The URL store and the alias strategy are created once by the app factory and
kept on ``app.state``; nothing here builds or caches instances itself.

Routes ask for the narrowest capability they use:
- save route     -> URLSaver
- redirect route -> URLGetter
- delete route   -> URLDeleter
so a route never depends on a concrete storage engine.
"""

from fastapi import Request

from shortlink_app.config import Settings
from shortlink_app.services.alias_strategies import AliasStrategy
from shortlink_app.storage.strategies import (
    URLStoreStrategy,
    URLSaver,
    URLGetter,
    URLDeleter,
)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_url_store(request: Request) -> URLStoreStrategy:
    return request.app.state.url_store


def get_url_saver(request: Request) -> URLSaver:
    return get_url_store(request)


def get_url_getter(request: Request) -> URLGetter:
    return get_url_store(request)


def get_url_deleter(request: Request) -> URLDeleter:
    return get_url_store(request)


def get_alias_strategy(request: Request) -> AliasStrategy:
    return request.app.state.alias_strategy
