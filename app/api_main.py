from __future__ import annotations

import uvicorn

from app.config import Settings, load_dotenv
from app.document_api import create_document_app
from app.logger import configure_logging
from app.record_store import SqliteRecordStore

load_dotenv()
settings = Settings.from_env()
configure_logging(settings.log_level)

app = create_document_app(
    SqliteRecordStore(db_path=settings.record_db_path),
    currency=settings.currency,
    locale=settings.locale,
)


def main() -> None:
    uvicorn.run("app.api_main:app", host=settings.api_host, port=settings.api_port, reload=False)


if __name__ == "__main__":
    main()
