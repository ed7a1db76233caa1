import logging

from fastapi import APIRouter, Depends, Request, status

from shortlink_app.api.errors import MSG_ALIAS_EXISTS, MSG_INTERNAL, MSG_NOT_FOUND
from shortlink_app.config import Settings
from shortlink_app.dependencies import (
    get_alias_strategy,
    get_app_settings,
    get_url_deleter,
    get_url_saver,
    get_url_store,
)
from shortlink_app.schemas.response import Response
from shortlink_app.schemas.url import URLCreate, URLDeleted, URLInfo, URLSaved
from shortlink_app.services.alias_strategies import AliasStrategy
from shortlink_app.storage.strategies import URLDeleter, URLSaver, URLStoreStrategy

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/urls", tags=["urls"])

ERROR_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {"model": Response, "description": MSG_NOT_FOUND},
    status.HTTP_409_CONFLICT: {"model": Response, "description": MSG_ALIAS_EXISTS},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": Response, "description": MSG_INTERNAL},
}


@router.post(
    "/",
    response_model=URLSaved,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def save_url(
    url_data: URLCreate,
    request: Request,
    saver: URLSaver = Depends(get_url_saver),
    alias_strategy: AliasStrategy = Depends(get_alias_strategy),
    settings: Settings = Depends(get_app_settings)
):
    """
    Save a URL under the requested alias, or a generated one.

    A generated alias that happens to collide is reported as a conflict like
    any other; the caller decides whether to retry.
    """
    alias = url_data.alias or alias_strategy.generate(settings.alias_length)

    saver.save_url(url_data.url, alias)

    logger.info(
        "url saved",
        extra={
            "op": "handlers.url.save",
            "alias": alias,
            "request_id": request.state.request_id,
        },
    )
    return URLSaved(alias=settings.domain + alias)


@router.get(
    "/{alias}",
    response_model=URLInfo,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
def get_url_info(
    alias: str,
    store: URLStoreStrategy = Depends(get_url_store)
):
    """Get the stored record for an alias"""
    record = store.get_record(alias)
    return URLInfo(
        alias=record.alias,
        url=record.target_url,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


@router.delete(
    "/{alias}",
    response_model=URLDeleted,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
def delete_url(
    alias: str,
    request: Request,
    deleter: URLDeleter = Depends(get_url_deleter)
):
    """Delete an alias and return the URL it pointed to"""
    deleted_url = deleter.delete_url(alias)

    logger.info(
        "url deleted",
        extra={
            "op": "handlers.url.delete",
            "alias": alias,
            "request_id": request.state.request_id,
        },
    )
    return URLDeleted(deleted_url=deleted_url)
