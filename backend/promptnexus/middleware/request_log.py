"""
请求日志中间件
用于记录所有API请求的方法、路径、状态码和耗时
"""
import logging
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from promptnexus.core.config import settings

logger = logging.getLogger("promptnexus.request")


class RequestLogMiddleware(BaseHTTPMiddleware):
    """请求日志中间件"""

    # 不需要记录日志的路径
    EXCLUDED_PATHS = [
        "/",
        settings.API_PREFIX + "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
    ]

    async def dispatch(self, request: Request, call_next):
        """处理请求并记录日志"""
        # 跳过OPTIONS预检请求（CORS预检请求）
        if request.method == "OPTIONS" or request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        execution_time = int((time.perf_counter() - start_time) * 1000)

        client = request.client.host if request.client else "-"
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level, "%s %s %s %dms client=%s",
            request.method, request.url.path, response.status_code, execution_time, client
        )
        return response
