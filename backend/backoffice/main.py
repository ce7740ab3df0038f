"""
FastAPI主应用入口
"""
import logging
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from backoffice.core.config import settings
from backoffice.core.database import engine, Base, AsyncSessionLocal
from backoffice.core.exceptions import ServiceError
from backoffice.core.health import check_db
from backoffice.core.logging import setup_logging
from backoffice.api.v1 import api_router
from backoffice.schemas.common import ErrorResponse
from backoffice.services.auth_service import AuthService
import backoffice.models  # noqa: F401  注册所有模型到 Base.metadata

logger = logging.getLogger(__name__)

HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时执行
    setup_logging()
    # 创建数据库表
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if settings.INITIAL_ADMIN_EMAIL and settings.INITIAL_ADMIN_PASSWORD:
        async with AsyncSessionLocal() as session:
            await AuthService(session).ensure_admin(settings.INITIAL_ADMIN_EMAIL, settings.INITIAL_ADMIN_PASSWORD)

    yield

    # 关闭时执行
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="会员套餐购买、订单与退款管理API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# GZip压缩
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """为每个请求生成或透传 X-Request-ID，并写入 request.state"""
    rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = rid
    response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    return response


def _error_response(code: str, message: str, request_id: str | None = None) -> dict:
    return ErrorResponse(code=code, message=message, request_id=request_id).model_dump(exclude_none=True)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """业务规则错误：稳定的错误码 + 可读信息"""
    rid = getattr(request.state, "request_id", None)
    if exc.status_code >= 500:
        logger.error("请求 %s %s 失败: %s", request.method, request.url.path, exc.__cause__ or exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_response(exc.code, exc.message, rid),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """统一 HTTP 异常响应格式"""
    rid = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_response(
            code=HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
            message=exc.detail if isinstance(exc.detail, str) else str(exc.detail),
            request_id=rid,
        ),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 校验错误统一格式"""
    rid = getattr(request.state, "request_id", None)
    errs = jsonable_encoder(exc.errors())
    message = errs[0].get("msg", "请求参数校验失败") if errs else "请求参数校验失败"
    body = _error_response("INVALID_INPUT", message, rid)
    body["errors"] = errs
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """未捕获异常：记录完整堆栈，对外只返回通用错误"""
    rid = getattr(request.state, "request_id", None)
    logger.exception("未处理异常 %s %s request_id=%s", request.method, request.url.path, rid)
    return JSONResponse(
        status_code=500,
        content=_error_response("INTERNAL_ERROR", "服务器内部错误", rid),
    )


# 注册路由
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": "会员订阅后台API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """健康检查：返回数据库连通状态"""
    db_ok, db_msg = await check_db()
    return JSONResponse(
        status_code=200 if db_ok else 503,
        content={
            "status": "healthy" if db_ok else "degraded",
            "service": "backoffice-api",
            "dependencies": {
                "database": {"ok": db_ok, "message": db_msg},
            },
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backoffice.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_excludes=["**/__pycache__/**", "**/*.pyc"],
    )
