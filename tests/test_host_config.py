"""
主机配置管理测试
"""
import pytest
import os
from unittest.mock import patch

from cert_expiry_monitor.services.host_config import HostConfigResolver, HostListLoader, to_host_spec
from cert_expiry_monitor.models import GlobalConfig, HostSpec, DEFAULT_USER_AGENT


class TestHostConfigResolver:
    """主机配置合并测试类"""

    def setup_method(self):
        self.config = GlobalConfig()
        self.resolver = HostConfigResolver(self.config)

    def test_defaults_applied(self):
        """测试使用全局默认值"""
        host = self.resolver.resolve_one(HostSpec(hostname="www.example.com"))

        assert host.hostname == "www.example.com"
        assert host.port == 443
        assert host.alert_window_days == 30
        assert host.headers == {'User-Agent': DEFAULT_USER_AGENT}
        assert host.method == "GET"

    def test_per_host_overrides(self):
        """测试主机级覆盖配置"""
        host = self.resolver.resolve_one({
            'hostname': 'www.example.com',
            'port': 1234,
            'alertWindowDays': 5,
            'userAgent': 'Example user agent'
        })

        assert host.port == 1234
        assert host.alert_window_days == 5
        assert host.headers['User-Agent'] == 'Example user agent'

    def test_custom_global_config(self):
        resolver = HostConfigResolver(GlobalConfig(
            timeout_ms=6000, default_port=8080, default_alert_window_days=10, user_agent='My user agent'
        ))

        host = resolver.resolve_one("www.example.com")

        assert host.port == 8080
        assert host.alert_window_days == 10
        assert host.headers['User-Agent'] == 'My user agent'

    def test_preserves_length_and_order(self):
        """测试输出长度和顺序与输入一致"""
        hostnames = ["c.example.com", "a.example.com", "b.example.com", "a.example.com"]

        resolved = self.resolver.resolve(hostnames)

        assert [h.hostname for h in resolved] == hostnames

    def test_empty_list(self):
        assert self.resolver.resolve([]) == []

    def test_zero_port_falls_back_to_default(self):
        host = self.resolver.resolve_one(HostSpec(hostname="example.com", port=0))
        assert host.port == 443

    def test_zero_alert_window_is_honored(self):
        """测试显式设置为0的告警窗口不会被默认值覆盖"""
        host = self.resolver.resolve_one(HostSpec(hostname="example.com", alert_window_days=0))
        assert host.alert_window_days == 0

    def test_empty_user_agent_falls_back_to_default(self):
        host = self.resolver.resolve_one(HostSpec(hostname="example.com", user_agent=""))
        assert host.headers['User-Agent'] == DEFAULT_USER_AGENT

    def test_input_spec_not_mutated(self):
        spec = HostSpec(hostname="example.com")

        self.resolver.resolve_one(spec)

        assert spec.port is None
        assert spec.alert_window_days is None

    def test_hostname_copied_verbatim(self):
        """测试主机名不做DNS格式校验"""
        host = self.resolver.resolve_one("not_a valid..name")
        assert host.hostname == "not_a valid..name"

    @pytest.mark.parametrize("bad_input", [{'port': 443}, {'hostname': ''}, ""])
    def test_missing_hostname_rejected(self, bad_input):
        with pytest.raises(ValueError):
            to_host_spec(bad_input)

    def test_unsupported_type_rejected(self):
        with pytest.raises(TypeError):
            to_host_spec(42)


class TestHostListLoader:
    """主机列表加载器测试类"""

    def setup_method(self):
        self.loader = HostListLoader()

    @patch.dict(os.environ, {'HOSTS': 'example.com,test.org:8443,invalid..host,https://sub.example.com/path'})
    def test_get_hosts_from_env(self):
        """测试从环境变量获取主机"""
        hosts = self.loader.get_hosts()

        assert hosts == [
            HostSpec(hostname='example.com'),
            HostSpec(hostname='test.org', port=8443),
            HostSpec(hostname='sub.example.com'),
        ]

    @patch.dict(os.environ, {'HOSTS': '  '})
    def test_get_hosts_empty(self):
        assert self.loader.get_hosts() == []

    @patch.dict(os.environ, {'CERT_HOSTS': 'Example.COM'})
    def test_custom_env_var(self):
        loader = HostListLoader(env_var_name='CERT_HOSTS')
        assert loader.get_hosts() == [HostSpec(hostname='example.com')]

    @pytest.mark.parametrize("entry", ["example.com:0", "example.com:99999", "example.com:abc", "-bad.com"])
    def test_parse_entry_invalid(self, entry):
        assert self.loader.parse_entry(entry) is None

    def test_validate_hostname(self):
        assert self.loader.validate_hostname("sub.example.com") is True
        assert self.loader.validate_hostname("a" * 254) is False
        assert self.loader.validate_hostname("") is False
        assert self.loader.validate_hostname("192.168.1.1") is False
