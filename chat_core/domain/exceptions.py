"""回复链路的业务异常。

回复来源只会抛出 BusinessError 的子类；调度控制器据此把一次失败的
往返转换为一条固定文本的机器人消息，不写入上下文历史。

错误码集中定义在下方常量中，日志与测试都以这些常量为准。
"""


# ---- 错误码 ----
MISSING_ENDPOINT = "MISSING_ENDPOINT"
NETWORK_ERROR = "NETWORK_ERROR"
RATE_LIMIT = "RATE_LIMIT"
API_ERROR = "API_ERROR"
BAD_RESPONSE = "BAD_RESPONSE"


class BusinessError(Exception):
    """回复链路异常基类。

    Attributes:
        code: 机器可读错误码，取值见本模块顶部常量。
        message: 原始错误描述（只写入日志，不展示给用户）。
        http_status: 远程服务返回的状态码；非 HTTP 错误默认 400。
        extra: 其他补充字段（例如 endpoint）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)

    def log_fields(self) -> dict:
        """供结构化日志使用的字段。"""

        return {"code": self.code, "http_status": self.http_status, **self.extra}


class NetworkError(BusinessError):
    """请求没有拿到任何响应：连接失败、DNS 错误、读写超时等。"""

    def __init__(self, message: str, **extra):
        super().__init__(NETWORK_ERROR, message, http_status=0, **extra)


class ApiError(BusinessError):
    """远程服务返回非 2xx 状态，或响应体不是 {"response": 非空字符串}。"""


class RateLimitError(ApiError):
    """远程服务限流（HTTP 429）。只做单次尝试，不做重试。"""

    def __init__(self, message: str = "reply service rate limit", **extra):
        super().__init__(RATE_LIMIT, message, http_status=429, **extra)


class ValidationError(BusinessError):
    """回复来源配置不完整，例如未设置 remote_endpoint。"""
