"""
TLS主机检查服务
"""
import asyncio
import ssl
from typing import Any, Dict, Optional
import logging

from ..exceptions import HostConnectionError
from ..interfaces import HostCheckerInterface
from ..models import GlobalConfig, ResolvedHost
from .error_handler import NetworkErrorHandler


class HostChecker(HostCheckerInterface):
    """TLS主机检查器实现"""

    def __init__(self, config: GlobalConfig, ssl_context: Optional[ssl.SSLContext] = None):
        """
        初始化主机检查器

        Args:
            config: 全局配置，使用其中的超时时间
            ssl_context: 自定义SSL上下文，默认使用系统信任库
        """
        self.config = config
        self.ssl_context = ssl_context or ssl.create_default_context()
        self.logger = logging.getLogger(__name__)
        self.error_handler = NetworkErrorHandler()

    async def fetch_certificate(self, host: ResolvedHost) -> Dict[str, Any]:
        """
        连接主机并获取对端证书，不重试

        Args:
            host: 解析后的主机描述

        Returns:
            dict: getpeercert() 格式的证书

        Raises:
            HostConnectionError: DNS、连接、握手失败或超时
        """
        self.logger.debug(f"开始连接 {host.address}")

        try:
            cert = await asyncio.wait_for(
                self._get_peer_certificate(host),
                timeout=self.config.timeout_seconds
            )
        except (OSError, asyncio.TimeoutError, UnicodeError) as e:
            # 非法主机名（空标签或标签过长）在IDNA编码时抛出 UnicodeError
            raise self.error_handler.wrap_connection_error(host, e) from e

        if not cert:
            raise HostConnectionError(
                f"无法获取主机 {host.address} 的SSL证书",
                hostname=host.hostname,
                port=host.port,
                error_type='tls'
            )

        return cert

    async def _get_peer_certificate(self, host: ResolvedHost) -> Dict[str, Any]:
        reader, writer = await asyncio.open_connection(
            host.hostname,
            host.port,
            ssl=self.ssl_context,
            server_hostname=host.hostname
        )

        try:
            cert = writer.get_extra_info('peercert')

            writer.write(self._build_request(host))
            await writer.drain()
            # 等待响应状态行，确认会话完整建立
            status_line = await reader.readline()
            self.logger.debug(f"{host.address} 响应: {status_line.decode('latin-1').strip()}")
        finally:
            writer.close()
            await self._wait_closed(writer)

        return cert

    @staticmethod
    def _build_request(host: ResolvedHost) -> bytes:
        lines = [f"{host.method} / HTTP/1.1", f"Host: {host.hostname}"]
        lines.extend(f"{name}: {value}" for name, value in host.headers.items())
        lines.append("Connection: close")
        return ("\r\n".join(lines) + "\r\n\r\n").encode('latin-1')

    async def _wait_closed(self, writer: asyncio.StreamWriter):
        try:
            await writer.wait_closed()
        except (OSError, ssl.SSLError) as e:
            # 证书已取得，关闭阶段的错误不影响结果
            self.logger.debug(f"关闭连接时发生错误: {e}")
