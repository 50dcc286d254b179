"""
主机配置管理服务
"""
import os
import re
from typing import Any, Iterable, List, Mapping, Optional, Union
import logging

from ..interfaces import HostListLoaderInterface
from ..models import GlobalConfig, HostSpec, ResolvedHost

HostInput = Union[HostSpec, Mapping[str, Any], str]


class HostConfigResolver:
    """将全局默认配置与主机级覆盖配置合并"""

    def __init__(self, config: GlobalConfig):
        self.config = config

    def resolve(self, hosts: Iterable[HostInput]) -> List[ResolvedHost]:
        """
        生成与输入顺序一致的主机检查描述列表

        Args:
            hosts: HostSpec、字典或主机名字符串

        Returns:
            List[ResolvedHost]: 解析后的主机列表
        """
        return [self.resolve_one(host) for host in hosts]

    def resolve_one(self, host: HostInput) -> ResolvedHost:
        spec = to_host_spec(host)

        # 端口 0 无法连接，与未设置同等对待
        port = spec.port if spec.port else self.config.default_port
        alert_window_days = (
            spec.alert_window_days
            if spec.alert_window_days is not None
            else self.config.default_alert_window_days
        )
        user_agent = spec.user_agent or self.config.user_agent

        return ResolvedHost(
            hostname=spec.hostname,
            port=port,
            alert_window_days=alert_window_days,
            headers={'User-Agent': user_agent},
            method='GET'
        )


def to_host_spec(host: HostInput) -> HostSpec:
    """
    将调用方输入统一转换为 HostSpec

    支持 HostSpec 实例、字典（兼容 camelCase 键名）以及纯主机名字符串。
    """
    if isinstance(host, HostSpec):
        spec = host
    elif isinstance(host, str):
        spec = HostSpec(hostname=host)
    elif isinstance(host, Mapping):
        spec = HostSpec(
            hostname=host.get('hostname'),
            port=host.get('port'),
            alert_window_days=_pick(host, 'alert_window_days', 'alertWindowDays'),
            user_agent=_pick(host, 'user_agent', 'userAgent')
        )
    else:
        raise TypeError(f"不支持的主机配置类型: {type(host).__name__}")

    if not spec.hostname or not isinstance(spec.hostname, str):
        raise ValueError("主机名不能为空")

    return spec


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


class HostListLoader(HostListLoaderInterface):
    """从环境变量加载待检查的主机列表"""

    def __init__(self, env_var_name: str = "HOSTS"):
        """
        初始化主机列表加载器

        Args:
            env_var_name: 环境变量名称，默认为"HOSTS"
        """
        self.env_var_name = env_var_name
        self.logger = logging.getLogger(__name__)

        # 主机名格式验证正则表达式
        self.hostname_pattern = re.compile(
            r'^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$'
        )

    def get_hosts(self) -> List[HostSpec]:
        """
        从环境变量获取主机列表（逗号分隔，支持 host:port）

        Returns:
            List[HostSpec]: 主机列表
        """
        hosts_str = os.getenv(self.env_var_name, "")

        if not hosts_str.strip():
            self.logger.warning(f"环境变量 {self.env_var_name} 为空")
            return []

        hosts = []
        for entry in hosts_str.split(','):
            entry = entry.strip()
            if not entry:
                continue

            spec = self.parse_entry(entry)
            if spec is None:
                self.logger.warning(f"跳过无效主机: {entry}")
                continue
            hosts.append(spec)

        self.logger.info(f"成功加载 {len(hosts)} 个主机")
        return hosts

    def parse_entry(self, entry: str) -> Optional[HostSpec]:
        """
        解析单个主机条目

        Args:
            entry: 形如 "https://example.com:8443/path" 的字符串

        Returns:
            Optional[HostSpec]: 无效时返回 None
        """
        entry = entry.strip()

        # 移除协议前缀
        if entry.startswith('https://'):
            entry = entry[8:]
        elif entry.startswith('http://'):
            entry = entry[7:]

        # 移除路径部分
        entry = entry.split('/')[0]

        port = None
        if ':' in entry:
            entry, port_str = entry.rsplit(':', 1)
            if not port_str.isdigit() or not 0 < int(port_str) <= 65535:
                return None
            port = int(port_str)

        hostname = entry.strip().lower()
        if not self.validate_hostname(hostname):
            return None

        return HostSpec(hostname=hostname, port=port)

    def validate_hostname(self, hostname: str) -> bool:
        """
        验证主机名格式

        Args:
            hostname: 要验证的主机名

        Returns:
            bool: 主机名是否有效
        """
        if not hostname or not isinstance(hostname, str):
            return False

        if len(hostname) > 253:
            return False

        return bool(self.hostname_pattern.match(hostname))
