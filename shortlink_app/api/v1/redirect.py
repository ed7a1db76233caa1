from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from shortlink_app.dependencies import get_url_getter
from shortlink_app.storage.strategies import URLGetter

router = APIRouter(tags=["redirect"])


@router.get("/{alias}", status_code=status.HTTP_302_FOUND)
def redirect_to_url(
    alias: str,
    getter: URLGetter = Depends(get_url_getter)
):
    """
    Redirect to the original URL.

    Unknown aliases raise URLNotFoundError, answered with 404 by the
    application's error handlers.
    """
    target_url = getter.get_url(alias)
    return RedirectResponse(url=target_url, status_code=status.HTTP_302_FOUND)
