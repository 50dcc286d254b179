"""
数据模型定义
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, List

VERSION = "1.0.0"
DEFAULT_USER_AGENT = f"SSL Certificate Expiry Checker {VERSION}"


@dataclass(frozen=True)
class GlobalConfig:
    """检查器全局配置（构造后不可变）"""
    timeout_ms: int = 5000
    default_port: int = 443
    default_alert_window_days: int = 30
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass
class HostSpec:
    """调用方提供的单个主机检查请求"""
    hostname: str
    port: Optional[int] = None
    alert_window_days: Optional[int] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class ResolvedHost:
    """合并全局默认值后的主机检查描述"""
    hostname: str
    port: int
    alert_window_days: int
    headers: Dict[str, str]
    method: str = "GET"

    @property
    def address(self) -> str:
        return f"{self.hostname}:{self.port}"


@dataclass(frozen=True)
class SubjectDetails:
    org: Optional[str] = None
    common_name: Optional[str] = None
    alt_name: Optional[str] = None


@dataclass(frozen=True)
class IssuerDetails:
    org: Optional[str] = None
    common_name: Optional[str] = None


@dataclass(frozen=True)
class CertificateDetails:
    """证书主体与颁发者信息"""
    subject: SubjectDetails
    issuer: IssuerDetails


@dataclass(frozen=True)
class ExpiryStatus:
    """证书过期状态"""
    days: int
    milliseconds: int
    is_expired: bool
    is_in_alert_window: bool


@dataclass(frozen=True)
class CheckResult:
    """单个主机的证书检查结果"""
    host: ResolvedHost
    details: CertificateDetails
    valid_from: datetime
    valid_to: datetime
    expiry: ExpiryStatus

    @property
    def hostname(self) -> str:
        return self.host.hostname

    @property
    def needs_attention(self) -> bool:
        """已过期或处于告警窗口内"""
        return self.expiry.is_expired or self.expiry.is_in_alert_window


@dataclass
class HostOutcome:
    """单个主机的检查结果或错误"""
    host: ResolvedHost
    result: Optional[CheckResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class MonitorReport:
    """定时监控执行结果统计"""
    total_hosts: int
    successful_checks: int
    failed_checks: int
    alert_hosts: List[CheckResult]
    expired_hosts: List[CheckResult]
    errors: List[str] = field(default_factory=list)
    execution_time: float = 0.0
