import logging
import time
from contextlib import asynccontextmanager
from typing import List, Literal, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from shortadmin.config import ShortadminConfig, is_test_mode, load_config
from shortadmin.kv_store import SQLiteKeyValueStore
from shortadmin.notifications import (
    NotificationPersistence,
    NotificationStore,
    NotificationsProvider,
    storage_key_for,
    use_notifications,
)

load_dotenv()

_req_logger = logging.getLogger("shortadmin.request")
if not _req_logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    _req_logger.addHandler(_handler)
_req_logger.setLevel(logging.INFO)


class NotificationCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)


class BatchOperation(BaseModel):
    op: Literal["add", "mark_read", "mark_all_read", "remove", "clear"]
    id: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None


class BatchRequest(BaseModel):
    operations: List[BatchOperation]


def build_store(config: ShortadminConfig) -> NotificationStore:
    kv = SQLiteKeyValueStore(config.db_path, quota_bytes=config.storage_quota_bytes)
    key = storage_key_for(config.user_id, base=config.notifications_key)
    return NotificationStore(
        NotificationPersistence(kv, key=key),
        max_notifications=config.max_notifications,
        max_visible=config.max_visible,
    )


async def get_notifications(request: Request):
    with NotificationsProvider(request.app.state.notifications):
        yield use_notifications()


def _validate_operation(operation: BatchOperation) -> None:
    if operation.op == "add" and (not operation.title or not operation.message):
        raise HTTPException(400, detail="add requires title and message")
    if operation.op in ("mark_read", "remove") and not operation.id:
        raise HTTPException(400, detail=f"{operation.op} requires id")


def _apply_operation(store: NotificationStore, operation: BatchOperation) -> None:
    if operation.op == "add":
        store.add_notification(operation.title, operation.message)
    elif operation.op == "mark_read":
        store.mark_as_read(operation.id)
    elif operation.op == "mark_all_read":
        store.mark_all_as_read()
    elif operation.op == "remove":
        store.remove_notification(operation.id)
    elif operation.op == "clear":
        store.clear_all_notifications()


def create_app(config: Optional[ShortadminConfig] = None) -> FastAPI:
    config = config or load_config()
    logging.getLogger("shortadmin").setLevel(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.notifications.activate()
        _req_logger.info(
            "STARTUP: notifications key=%s count=%s",
            app.state.notifications.persistence.key,
            len(app.state.notifications.notifications),
        )
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.config = config
    app.state.notifications = build_store(config)

    @app.middleware("http")
    async def request_logger(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        if not is_test_mode():
            elapsed_ms = int((time.time() - start) * 1000)
            _req_logger.info("%s %s %s %dms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    @app.get("/v1/notifications")
    async def list_notifications_endpoint(store: NotificationStore = Depends(get_notifications)):
        return store.snapshot()

    @app.post("/v1/notifications", status_code=201)
    async def add_notification_endpoint(
        payload: NotificationCreateRequest,
        store: NotificationStore = Depends(get_notifications),
    ):
        notification_id = store.add_notification(payload.title, payload.message)
        return {"id": notification_id, **store.snapshot()}

    @app.post("/v1/notifications/read-all")
    async def mark_all_read_endpoint(store: NotificationStore = Depends(get_notifications)):
        store.mark_all_as_read()
        return store.snapshot()

    @app.post("/v1/notifications/batch")
    async def batch_endpoint(payload: BatchRequest, store: NotificationStore = Depends(get_notifications)):
        for operation in payload.operations:
            _validate_operation(operation)
        with store.batch():
            for operation in payload.operations:
                _apply_operation(store, operation)
        return store.snapshot()

    @app.post("/v1/notifications/{notification_id}/read")
    async def mark_read_endpoint(notification_id: str, store: NotificationStore = Depends(get_notifications)):
        store.mark_as_read(notification_id)
        return store.snapshot()

    @app.delete("/v1/notifications/{notification_id}")
    async def remove_endpoint(notification_id: str, store: NotificationStore = Depends(get_notifications)):
        store.remove_notification(notification_id)
        return store.snapshot()

    @app.delete("/v1/notifications")
    async def clear_endpoint(store: NotificationStore = Depends(get_notifications)):
        store.clear_all_notifications()
        return store.snapshot()

    return app
