import uvicorn

from project_tracker.config import settings
from project_tracker.main import create_app


def main() -> None:
    uvicorn.run(create_app(), host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
