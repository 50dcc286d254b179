"""
AWS Lambda函数入口点
"""
import asyncio
import os
from datetime import datetime, timezone
from typing import Any, Dict, List

from .checker import CertExpiryChecker
from .models import GlobalConfig, HostOutcome, MonitorReport
from .services.config_validator import ConfigValidator
from .services.expiry_calculator import ExpiryCalculator
from .services.host_config import HostListLoader
from .services.logger import LoggerService
from .services.sns_notification import SNSNotificationService


class CertExpiryMonitor:
    """证书过期监控器主类"""

    def __init__(self):
        self.logger_service = LoggerService()
        self.host_loader = HostListLoader()
        self.config_validator = ConfigValidator(self.host_loader)
        self.expiry_calculator = ExpiryCalculator()

        self.config = self._load_config()
        self.checker = CertExpiryChecker(self.config, logger_service=self.logger_service)
        self.notification_service = SNSNotificationService()

        self._log_configuration()

    def _load_config(self) -> GlobalConfig:
        """
        加载并验证全局配置

        Raises:
            ValueError: 环境变量格式或取值无效
        """
        config = self.config_validator.load_global_config()

        validation = self.config_validator.validate_global_config(config)
        for warning in validation['warnings']:
            self.logger_service.logger.warning(f"配置警告: {warning}")
        if not validation['is_valid']:
            raise ValueError(f"全局配置无效: {'; '.join(validation['errors'])}")

        return config

    def _log_configuration(self):
        """记录系统配置信息"""
        self.logger_service.log_configuration_info({
            'hosts_env_var': os.getenv(self.host_loader.env_var_name, ''),
            'timeout_ms': self.config.timeout_ms,
            'default_port': self.config.default_port,
            'default_alert_window_days': self.config.default_alert_window_days,
            'user_agent': self.config.user_agent,
            'sns_topic_arn': os.getenv('SNS_TOPIC_ARN', ''),
            'log_level': self.logger_service.log_level
        })

    def execute(self) -> MonitorReport:
        """
        执行证书检查并发送通知

        Returns:
            MonitorReport: 检查结果统计
        """
        start_time = datetime.now(timezone.utc)

        hosts = self.host_loader.get_hosts()
        if not hosts:
            self.logger_service.logger.warning("没有找到要检查的主机")
            return MonitorReport(
                total_hosts=0,
                successful_checks=0,
                failed_checks=0,
                alert_hosts=[],
                expired_hosts=[],
                errors=["没有找到要检查的主机"]
            )

        outcomes = asyncio.run(self.checker.check_hosts_settled(hosts))

        results = [outcome.result for outcome in outcomes if outcome.ok]
        failures = [outcome for outcome in outcomes if not outcome.ok]
        categorized = self.expiry_calculator.categorize_results(results)

        self.logger_service.logger.info(self.expiry_calculator.get_expiry_summary(results))
        self._send_notifications(categorized, failures)

        execution_time = (datetime.now(timezone.utc) - start_time).total_seconds()
        self.logger_service.log_execution_summary()

        return MonitorReport(
            total_hosts=len(outcomes),
            successful_checks=len(results),
            failed_checks=len(failures),
            alert_hosts=categorized['alert_window'],
            expired_hosts=categorized['expired'],
            errors=[f"{outcome.host.address}: {outcome.error}" for outcome in failures],
            execution_time=execution_time
        )

    def _send_notifications(self, categorized: dict, failures: List[HostOutcome]) -> bool:
        """
        发送通知

        Args:
            categorized: 分类后的检查结果
            failures: 检查失败的主机

        Returns:
            bool: 通知是否发送成功
        """
        attention = categorized['expired'] + categorized['alert_window']
        if not attention and not failures:
            self.logger_service.logger.info("所有证书状态正常，无需发送通知")
            return True

        sent = self.notification_service.send_expiry_notification(attention, failures)
        if sent:
            self.logger_service.logger.info(f"SNS 通知发送成功，涉及主机数量: {len(attention) + len(failures)}")
        else:
            self.logger_service.logger.error(f"SNS 通知发送失败，涉及主机数量: {len(attention) + len(failures)}")
        return sent


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda函数入口点

    Args:
        event: EventBridge触发事件
        context: Lambda运行时上下文

    Returns:
        dict: 执行结果和统计信息
    """
    try:
        monitor = CertExpiryMonitor()
        report = monitor.execute()
    except Exception as e:
        LoggerService().logger.exception(f"Lambda函数执行时发生严重错误: {str(e)}")
        return {
            'statusCode': 500,
            'body': {
                'message': 'SSL Certificate Expiry Monitor encountered a critical error',
                'error': str(e),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        }

    response = {
        'statusCode': 200,
        'body': {
            'message': 'SSL Certificate Expiry Monitor executed successfully',
            'summary': {
                'total_hosts': report.total_hosts,
                'successful_checks': report.successful_checks,
                'failed_checks': report.failed_checks,
                'expired_certificates': len(report.expired_hosts),
                'alert_window_certificates': len(report.alert_hosts),
                'execution_time_seconds': report.execution_time
            },
            'expired_hosts': [result.host.address for result in report.expired_hosts],
            'alert_hosts': [result.host.address for result in report.alert_hosts],
            'errors': report.errors[:5],  # 只返回前5个错误
            'timestamp': datetime.now(timezone.utc).isoformat()
        }
    }

    if report.total_hosts == 0:
        response['statusCode'] = 500
        response['body']['message'] = 'SSL Certificate Expiry Monitor failed to execute'

    return response
