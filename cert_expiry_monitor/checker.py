"""
证书过期检查入口
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union
import logging

from .exceptions import CertCheckError
from .interfaces import HostCheckerInterface
from .models import CheckResult, GlobalConfig, HostOutcome, ResolvedHost
from .services.certificate_parser import CertificateFieldParser
from .services.expiry_calculator import compute_expiry
from .services.host_config import HostConfigResolver, HostInput
from .services.logger import LoggerService
from .services.ssl_checker import HostChecker

# 兼容 camelCase 配置键名
_CONFIG_ALIASES = {
    'timeout_ms': ('timeout_ms', 'timeoutMs', 'timeout'),
    'default_port': ('default_port', 'defaultPort'),
    'default_alert_window_days': ('default_alert_window_days', 'defaultAlertWindowDays'),
    'user_agent': ('user_agent', 'userAgent'),
}


def build_global_config(config: Union[GlobalConfig, Mapping[str, Any], None] = None) -> GlobalConfig:
    """
    将调用方配置与默认值合并为 GlobalConfig

    Args:
        config: GlobalConfig、配置字典或 None

    Returns:
        GlobalConfig: 不可变的全局配置
    """
    if config is None:
        return GlobalConfig()
    if isinstance(config, GlobalConfig):
        return config

    values = {}
    for field_name, aliases in _CONFIG_ALIASES.items():
        for alias in aliases:
            if config.get(alias) is not None:
                values[field_name] = config[alias]
                break
    return GlobalConfig(**values)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CertExpiryChecker:
    """
    并发检查多个主机的SSL证书过期状态

    Example:
        checker = CertExpiryChecker({'defaultAlertWindowDays': 14})
        results = asyncio.run(checker.check_hosts([{'hostname': 'www.example.com'}]))
    """

    def __init__(self, config: Union[GlobalConfig, Mapping[str, Any], None] = None,
                 host_checker: Optional[HostCheckerInterface] = None,
                 clock: Callable[[], datetime] = _utc_now,
                 logger_service: Optional[LoggerService] = None):
        """
        Args:
            config: 全局配置，未指定的字段使用默认值
            host_checker: TLS检查器，默认使用 HostChecker
            clock: 返回当前UTC时间的函数
            logger_service: 可选的日志服务，用于记录每个主机的检查结果
        """
        self.config = build_global_config(config)
        self.resolver = HostConfigResolver(self.config)
        self.host_checker = host_checker or HostChecker(self.config)
        self.parser = CertificateFieldParser()
        self.clock = clock
        self.logger_service = logger_service
        self.logger = logging.getLogger(__name__)

    async def check_hosts(self, hosts: Iterable[HostInput]) -> List[CheckResult]:
        """
        检查全部主机，任一主机失败则整体失败

        Args:
            hosts: 主机列表

        Returns:
            List[CheckResult]: 与输入顺序一致的检查结果

        Raises:
            HostConnectionError: 任一主机连接失败
            MalformedCertificateError: 任一主机证书有效期无法解析
        """
        resolved = self.resolver.resolve(hosts)
        self._log_start(resolved)

        tasks = [asyncio.ensure_future(self.check_host(host)) for host in resolved]
        if not tasks:
            self._log_end()
            return []

        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            # 首个失败或调用方取消时，取消其余仍在进行的检查并等待其结束
            await self._cancel_pending(tasks)
            self._log_end()

        failed = [task for task in tasks if task in done and task.exception() is not None]
        if failed:
            raise failed[0].exception()

        return [task.result() for task in tasks]

    @staticmethod
    async def _cancel_pending(tasks: List["asyncio.Future"]):
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def check_hosts_settled(self, hosts: Iterable[HostInput]) -> List[HostOutcome]:
        """
        检查全部主机，每个主机的错误单独返回

        Args:
            hosts: 主机列表

        Returns:
            List[HostOutcome]: 与输入顺序一致，成功时含 result，失败时含 error
        """
        resolved = self.resolver.resolve(hosts)
        self._log_start(resolved)

        results = await asyncio.gather(
            *(self.check_host(host) for host in resolved),
            return_exceptions=True
        )

        outcomes = []
        for host, result in zip(resolved, results):
            if isinstance(result, CertCheckError):
                outcomes.append(HostOutcome(host=host, error=result))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(HostOutcome(host=host, result=result))

        self._log_end()
        return outcomes

    async def check_host(self, host: ResolvedHost) -> CheckResult:
        """
        检查单个已解析的主机

        Args:
            host: 解析后的主机描述

        Returns:
            CheckResult: 检查结果
        """
        try:
            raw = await self.host_checker.fetch_certificate(host)
            result = self.build_result(raw, host)
        except CertCheckError as e:
            if self.logger_service:
                self.logger_service.log_error(host.hostname, e)
            else:
                self.logger.warning(f"主机 {host.address} 检查失败: {e}")
            raise

        if self.logger_service:
            self.logger_service.log_check_result(result)
        return result

    def build_result(self, raw: Dict[str, Any], host: ResolvedHost) -> CheckResult:
        """
        由原始证书构建检查结果

        Args:
            raw: getpeercert() 格式的证书
            host: 解析后的主机描述

        Returns:
            CheckResult: 检查结果
        """
        details, valid_from, valid_to = self.parser.parse(raw)

        return CheckResult(
            host=host,
            details=details,
            valid_from=valid_from,
            valid_to=valid_to,
            expiry=compute_expiry(valid_to, self.clock(), host.alert_window_days)
        )

    def _log_start(self, resolved: List[ResolvedHost]):
        if self.logger_service:
            self.logger_service.log_check_start(len(resolved))
        else:
            self.logger.info(f"开始SSL证书检查，共 {len(resolved)} 个主机")

    def _log_end(self):
        if self.logger_service:
            self.logger_service.log_check_end()
