"""
app.core.rate_limit
~~~~~~~~~~~~~~~~~~~

HTTP 接口的限流配置。

基于客户端 IP 地址进行限流，超限时由 slowapi 返回 429。
实时聊天通道不做限流。
"""
from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    # 测试环境关闭限流，避免 TestClient 连续请求被 429
    enabled=not settings.is_test,
)
