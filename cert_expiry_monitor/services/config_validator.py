"""
配置加载与验证服务
"""
import os
import re
from typing import Any, Dict, Optional
import logging

from ..models import GlobalConfig, DEFAULT_USER_AGENT
from .host_config import HostListLoader


class ConfigValidator:
    """配置验证器"""

    # 环境变量 -> (GlobalConfig字段, 默认值)
    GLOBAL_CONFIG_ENV_VARS = {
        'CHECK_TIMEOUT_MS': ('timeout_ms', 5000),
        'DEFAULT_PORT': ('default_port', 443),
        'DEFAULT_ALERT_WINDOW_DAYS': ('default_alert_window_days', 30),
    }

    SNS_ARN_PATTERN = re.compile(r'^arn:aws:sns:[a-z0-9-]+:\d{12}:[a-zA-Z0-9_-]+$')

    def __init__(self, host_loader: Optional[HostListLoader] = None):
        self.logger = logging.getLogger(__name__)
        self.host_loader = host_loader or HostListLoader()

    def load_global_config(self) -> GlobalConfig:
        """
        从环境变量加载全局配置

        Returns:
            GlobalConfig: 未设置的字段使用默认值

        Raises:
            ValueError: 数值型环境变量格式无效
        """
        values = {}
        for var_name, (field_name, default) in self.GLOBAL_CONFIG_ENV_VARS.items():
            raw = os.getenv(var_name, '').strip()
            if not raw:
                values[field_name] = default
                continue
            try:
                values[field_name] = int(raw)
            except ValueError:
                raise ValueError(f"环境变量 {var_name} 必须是整数: {raw!r}") from None

        values['user_agent'] = os.getenv('USER_AGENT', '').strip() or DEFAULT_USER_AGENT

        return GlobalConfig(**values)

    def validate_global_config(self, config: GlobalConfig) -> Dict[str, Any]:
        """
        验证全局配置取值范围

        Args:
            config: 全局配置

        Returns:
            Dict[str, Any]: 验证结果
        """
        result = {'is_valid': True, 'errors': [], 'warnings': []}

        if config.timeout_ms <= 0:
            result['errors'].append(f"超时时间必须大于0: {config.timeout_ms}ms")
        elif config.timeout_ms < 1000:
            result['warnings'].append(f"超时时间过短: {config.timeout_ms}ms，建议至少1000ms")

        if not 0 < config.default_port <= 65535:
            result['errors'].append(f"默认端口无效: {config.default_port}")

        if config.default_alert_window_days < 0:
            result['errors'].append(f"告警窗口天数不能为负数: {config.default_alert_window_days}")

        if not config.user_agent:
            result['errors'].append("User-Agent不能为空")

        result['is_valid'] = not result['errors']
        return result

    def validate_hosts_configuration(self) -> Dict[str, Any]:
        """
        验证主机配置

        Returns:
            Dict[str, Any]: 主机配置验证结果
        """
        result = {
            'is_valid': True,
            'errors': [],
            'warnings': [],
            'total_hosts': 0,
            'valid_hosts': [],
            'invalid_hosts': []
        }

        env_var_name = self.host_loader.env_var_name
        hosts_str = os.getenv(env_var_name, '')

        if not hosts_str.strip():
            result['is_valid'] = False
            result['errors'].append(f"{env_var_name}环境变量为空")
            return result

        raw_hosts = [entry.strip() for entry in hosts_str.split(',') if entry.strip()]
        result['total_hosts'] = len(raw_hosts)

        for entry in raw_hosts:
            if self.host_loader.parse_entry(entry) is not None:
                result['valid_hosts'].append(entry)
            else:
                result['invalid_hosts'].append(entry)
                result['warnings'].append(f"主机格式无效: {entry}")

        if not result['valid_hosts']:
            result['is_valid'] = False
            result['errors'].append("没有找到有效的主机")

        return result

    def validate_sns_configuration(self) -> Dict[str, Any]:
        """
        验证SNS配置

        Returns:
            Dict[str, Any]: SNS配置验证结果
        """
        result = {
            'is_valid': True,
            'errors': [],
            'topic_arn': None,
            'arn_format_valid': False
        }

        topic_arn = os.getenv('SNS_TOPIC_ARN')

        if not topic_arn:
            result['is_valid'] = False
            result['errors'].append("SNS_TOPIC_ARN环境变量未设置")
            return result

        result['topic_arn'] = topic_arn

        if self.SNS_ARN_PATTERN.match(topic_arn):
            result['arn_format_valid'] = True
        else:
            result['is_valid'] = False
            result['errors'].append(f"SNS主题ARN格式无效: {topic_arn}")

        return result

    def validate_all_configurations(self) -> Dict[str, Any]:
        """
        验证所有配置

        Returns:
            Dict[str, Any]: 验证结果，SNS配置问题只作为警告
        """
        validation_result = {
            'is_valid': True,
            'errors': [],
            'warnings': [],
            'configurations': {}
        }

        try:
            global_config = self.load_global_config()
        except ValueError as e:
            validation_result['is_valid'] = False
            validation_result['errors'].append(str(e))
        else:
            config_validation = self.validate_global_config(global_config)
            validation_result['configurations']['global'] = config_validation
            validation_result['errors'].extend(config_validation['errors'])
            validation_result['warnings'].extend(config_validation['warnings'])

        hosts_validation = self.validate_hosts_configuration()
        validation_result['configurations']['hosts'] = hosts_validation
        validation_result['errors'].extend(hosts_validation['errors'])
        validation_result['warnings'].extend(hosts_validation['warnings'])

        sns_validation = self.validate_sns_configuration()
        validation_result['configurations']['sns'] = sns_validation
        validation_result['warnings'].extend(sns_validation['errors'])

        validation_result['is_valid'] = not validation_result['errors']
        return validation_result

    def get_configuration_summary(self) -> str:
        """
        获取配置摘要

        Returns:
            str: 配置摘要文本
        """
        validation_result = self.validate_all_configurations()

        lines = [
            "配置验证摘要",
            "=" * 30,
            "✅ 配置验证通过" if validation_result['is_valid'] else "❌ 配置验证失败"
        ]

        if validation_result['errors']:
            lines.append("\n错误:")
            for error in validation_result['errors']:
                lines.append(f"  • {error}")

        if validation_result['warnings']:
            lines.append("\n警告:")
            for warning in validation_result['warnings']:
                lines.append(f"  • {warning}")

        hosts_config = validation_result['configurations'].get('hosts', {})
        if hosts_config.get('valid_hosts'):
            lines.append(f"\n有效主机数量: {len(hosts_config['valid_hosts'])}")

        return "\n".join(lines)
