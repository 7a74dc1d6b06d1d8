# Windows: .venv\Scripts\uvicorn.exe app.main:app --host 0.0.0.0 --port 8000 --reload
# Unix: uvicorn app.main:app --host 0.0.0.0 --port 8000 --reload
"""
Điểm khởi đầu (entry point) của ứng dụng FastAPI.

Tệp này chịu trách nhiệm khởi tạo ứng dụng, cấu hình middleware (CORS),
đăng ký exception handler và các router, cùng endpoint health check.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.database import init_db
from .core.exceptions import register_exception_handlers
from .routers import (admins, analytics, auth, catalog, customers, feedback,
                      message_settings, office_admin, sales)
from .utils.logger import setup_logging

app = FastAPI(
    title = settings.PROJECT_NAME,
    description = settings.DESCRIPTION,
    version = '1.0.0'
)

# Frontend gửi cookie phiên đăng nhập nên origin phải được liệt kê cụ thể.
if settings.BACKEND_CORS_ORIGINS:
    origins = [str(origin).rstrip('/') for origin in settings.BACKEND_CORS_ORIGINS]
    app.add_middleware(
        CORSMiddleware,
        allow_origins = origins,
        allow_credentials = True,
        allow_methods = ['*'],
        allow_headers = ['*']
    )

register_exception_handlers(app)

# --- API Routers ---
for module in (auth, admins, catalog, feedback, customers, sales,
               message_settings, analytics, office_admin):
    app.include_router(module.router, prefix = settings.API_PREFIX)

# --- Application Events ---
@app.on_event('startup')
async def startup_event():
    """Thiết lập logging và (tuỳ chọn) tạo bảng khi ứng dụng khởi động."""
    setup_logging(settings.LOGGER_CONFIG_PATH)
    if settings.AUTO_CREATE_TABLES:
        init_db()
    logging.info('🚀 Application startup complete.')

@app.on_event('shutdown')
async def shutdown_event():
    logging.info('Application shutdown.')

# --- Top-level Endpoints ---
@app.get('/health', tags=['Health Check'])
def health_check():
    """Endpoint để kiểm tra tình trạng hoạt động của ứng dụng."""
    return {'status': 'ok'}
