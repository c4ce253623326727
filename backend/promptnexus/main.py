"""
FastAPI主应用入口
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from promptnexus.api import auth, feedback, interactions, prompts, settings as settings_api, users
from promptnexus.core.config import settings
from promptnexus.core.errors import PromptNexusError, ServerError
from promptnexus.core.log import setup_logging
from promptnexus.db.init_db import init_db
from promptnexus.middleware.request_log import RequestLogMiddleware
from promptnexus.schemas.common import ErrorResponse

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# 创建数据库表
init_db()

# 创建FastAPI应用
app = FastAPI(
    title=settings.APP_NAME,
    description="AI提示词分享平台后端API",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLogMiddleware)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


@app.exception_handler(PromptNexusError)
async def business_exception_handler(request: Request, exc: PromptNexusError):
    """业务异常统一返回 {success: false, message}"""
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """请求参数格式错误"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"参数错误: {field} {first.get('msg', '')}".strip()
    else:
        message = "参数错误"
    return error_response(400, message)


# 全局异常处理
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """全局异常处理器，未预期的错误也按统一格式返回"""
    logger.exception("未处理的异常: %s %s", request.method, request.url.path)
    error = ServerError(f"服务器内部错误: {exc}" if settings.DEBUG else None)
    return error_response(error.status_code, error.message)


@app.get("/")
async def root():
    """根路径"""
    return {"message": settings.APP_NAME, "version": settings.APP_VERSION}


@app.get(settings.API_PREFIX + "/health")
async def health():
    """健康检查"""
    return {"ok": True}


# 接口文档中列出的统一错误响应
ERROR_RESPONSES = {
    status_code: {"model": ErrorResponse}
    for status_code in (400, 401, 403, 404, 500)
}

# 注册API路由
for module in (auth, prompts, interactions, users, feedback, settings_api):
    app.include_router(module.router, prefix=settings.API_PREFIX, responses=ERROR_RESPONSES)
