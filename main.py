"""
FastAPI应用主入口
"""
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from api.routes import callbacks as callback_routes
from api.routes import connect as connect_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware
from core.config import settings
from core.exceptions import register_exception_handlers
from core.logging_config import get_logger, configure_logging
from infrastructure.database import create_tables, dispose_engine


# 初始化日志：在入口处显式配置，避免模块导入时的副作用
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时创建数据库表（token_cache / token_mappings）
    await create_tables()
    logger.info("database_initialized", database_path=settings.DATABASE_PATH)

    # 出站请求（provider 与 platform）共享一个连接池
    app.state.http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.HTTP_TIMEOUT))
    logger.info("application_started", port=settings.PORT)

    yield

    # 关闭时的清理工作
    await app.state.http_client.aclose()
    await dispose_engine()
    logger.info("application_shutdown", message="Application shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="STBL payment provider connector for the business platform",
)

# 添加中间件（注意顺序：从下往上执行）
# 1. 日志中间件（依赖request_id，因此先添加、后执行）
app.add_middleware(LoggingMiddleware)
# 2. Request ID中间件（最外层，为后续中间件提供request_id）
app.add_middleware(RequestIDMiddleware)

# 注册全局异常处理器
register_exception_handlers(app)

# 注册路由
app.include_router(connect_routes.router)
app.include_router(callback_routes.router)


# 健康检查
@app.get("/health", tags=["Health"])
async def health_check():
    """健康检查端点"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
