"""
异常定义
"""
from typing import Optional


class CertCheckError(Exception):
    """证书检查错误基类"""

    def __init__(self, message: str, hostname: Optional[str] = None, port: Optional[int] = None):
        super().__init__(message)
        self.hostname = hostname
        self.port = port


class HostConnectionError(CertCheckError, ConnectionError):
    """
    主机连接失败

    包括DNS解析失败、连接被拒绝、TLS握手失败和超时。原始异常保存在 __cause__ 中。
    """

    def __init__(self, message: str, hostname: Optional[str] = None, port: Optional[int] = None,
                 error_type: str = "network"):
        super().__init__(message, hostname=hostname, port=port)
        self.error_type = error_type


class MalformedCertificateError(CertCheckError, ValueError):
    """证书有效期字段无法解析"""
