"""
错误处理服务
"""
import asyncio
import socket
import ssl
from datetime import datetime, timezone
from typing import Any, Dict, List
import logging

from ..exceptions import CertCheckError, HostConnectionError
from ..models import ResolvedHost


class NetworkErrorHandler:
    """网络错误处理器"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def classify_error(self, error: BaseException) -> str:
        """
        判断传输层错误类型

        Args:
            error: 异常对象

        Returns:
            str: dns / refused / timeout / tls / network
        """
        if isinstance(error, HostConnectionError):
            return error.error_type
        # socket.gaierror 和 socket.timeout 都是 OSError 的子类，需要先判断
        if isinstance(error, (socket.gaierror, UnicodeError)):
            return 'dns'
        if isinstance(error, (asyncio.TimeoutError, socket.timeout, TimeoutError)):
            return 'timeout'
        if isinstance(error, ConnectionRefusedError):
            return 'refused'
        if isinstance(error, (ssl.SSLError, ssl.CertificateError)):
            return 'tls'
        return 'network'

    def wrap_connection_error(self, host: ResolvedHost, error: BaseException) -> HostConnectionError:
        """
        将底层异常转换为 HostConnectionError

        Args:
            host: 正在检查的主机
            error: 底层异常

        Returns:
            HostConnectionError: __cause__ 指向原始异常
        """
        error_type = self.classify_error(error)
        message = str(error) or type(error).__name__
        if error_type == 'timeout':
            message = f"连接超时: {message}"

        wrapped = HostConnectionError(
            f"{host.address} 连接失败 ({error_type}): {message}",
            hostname=host.hostname,
            port=host.port,
            error_type=error_type
        )
        wrapped.__cause__ = error
        return wrapped

    def handle_ssl_connection_error(self, hostname: str, error: BaseException) -> Dict[str, Any]:
        """
        处理SSL连接错误

        Args:
            hostname: 主机名
            error: 异常对象

        Returns:
            Dict[str, Any]: 错误处理结果
        """
        cause = error.__cause__ if isinstance(error, CertCheckError) and error.__cause__ else error

        error_info = {
            'hostname': hostname,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'suggested_action': self._get_suggested_action(cause)
        }

        self.logger.warning(f"主机 {hostname} SSL连接错误: {error_info['error_message']}")

        return error_info

    def _get_suggested_action(self, error: BaseException) -> str:
        """
        获取错误的建议处理方案

        Args:
            error: 异常对象

        Returns:
            str: 建议的处理方案
        """
        error_message = str(error).lower()

        if isinstance(error, (socket.gaierror, UnicodeError)):
            return "检查主机名是否正确，DNS服务器是否可用"
        elif isinstance(error, (asyncio.TimeoutError, socket.timeout, TimeoutError)):
            return "检查网络连接，考虑增加超时时间"
        elif isinstance(error, ConnectionRefusedError):
            return "检查目标服务器是否运行，端口是否正确"
        elif isinstance(error, ssl.SSLError):
            if 'certificate verify failed' in error_message:
                return "证书验证失败，可能是自签名证书或证书链问题"
            elif 'handshake failure' in error_message:
                return "SSL握手失败，检查SSL/TLS版本兼容性"
            else:
                return "SSL连接问题，检查服务器SSL配置"
        elif isinstance(error, ValueError):
            return "证书有效期字段无法解析，检查服务器证书"
        elif 'network is unreachable' in error_message:
            return "网络不可达，检查网络连接和路由"
        else:
            return "检查网络连接和服务器状态"

    def get_error_statistics(self, error_list: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        获取错误统计信息

        Args:
            error_list: handle_ssl_connection_error 返回的错误信息列表

        Returns:
            Dict[str, Any]: 错误统计
        """
        if not error_list:
            return {
                'total_errors': 0,
                'error_types': {},
                'most_common_error': None,
                'most_common_error_count': 0
            }

        error_types = {}
        for error_info in error_list:
            error_type = error_info.get('error_type', 'Unknown')
            error_types[error_type] = error_types.get(error_type, 0) + 1

        most_common_error = max(error_types.items(), key=lambda x: x[1])

        return {
            'total_errors': len(error_list),
            'error_types': error_types,
            'most_common_error': most_common_error[0],
            'most_common_error_count': most_common_error[1]
        }
