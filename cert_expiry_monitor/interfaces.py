"""
服务接口定义
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .models import CheckResult, HostSpec, ResolvedHost


class HostListLoaderInterface(ABC):
    """主机列表加载器接口"""

    @abstractmethod
    def get_hosts(self) -> List[HostSpec]:
        """获取主机列表"""
        pass

    @abstractmethod
    def validate_hostname(self, hostname: str) -> bool:
        """验证主机名格式"""
        pass


class HostCheckerInterface(ABC):
    """TLS主机检查器接口"""

    @abstractmethod
    async def fetch_certificate(self, host: ResolvedHost) -> Dict[str, Any]:
        """完成TLS握手并返回对端证书"""
        pass


class NotificationServiceInterface(ABC):
    """通知服务接口"""

    @abstractmethod
    def send_expiry_notification(self, results: List[CheckResult]) -> bool:
        """发送证书过期通知"""
        pass

    @abstractmethod
    def format_notification_content(self, results: List[CheckResult]) -> str:
        """格式化通知内容"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_check_start(self, host_count: int):
        """记录检查开始"""
        pass

    @abstractmethod
    def log_check_result(self, result: CheckResult):
        """记录证书检查结果"""
        pass

    @abstractmethod
    def log_error(self, hostname: str, error: Exception):
        """记录错误信息"""
        pass
