import uvicorn

from shortlink_app.app_factory import create_app
from shortlink_app.config import get_settings

app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
