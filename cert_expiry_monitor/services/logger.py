"""
日志服务
"""
import os
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from ..interfaces import LoggerServiceInterface
from ..models import CheckResult


class LoggerService(LoggerServiceInterface):
    """日志服务实现"""

    def __init__(self, logger_name: str = "cert_expiry_monitor", log_level: Optional[str] = None):
        """
        初始化日志服务

        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')

        self.logger = logging.getLogger(logger_name)
        self._configure_logger()

        self.execution_stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            'start_time': None,
            'end_time': None,
            'total_hosts': 0,
            'successful_checks': 0,
            'failed_checks': 0,
            'errors': []
        }

    def _configure_logger(self):
        """配置日志器"""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        self.logger.setLevel(level)

        # 避免重复添加处理器
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(level)

            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            handler.setFormatter(formatter)

            self.logger.addHandler(handler)

        self.logger.propagate = False

    def log_check_start(self, host_count: int):
        """
        记录检查开始

        Args:
            host_count: 要检查的主机数量
        """
        self.execution_stats['start_time'] = datetime.now(timezone.utc)
        self.execution_stats['total_hosts'] = host_count

        self.logger.info(f"开始SSL证书检查，共 {host_count} 个主机")

    def log_check_result(self, result: CheckResult):
        """
        记录证书检查结果

        Args:
            result: 单个主机的检查结果
        """
        self.execution_stats['successful_checks'] += 1

        expiry = result.expiry
        message = (
            f"主机: {result.host.address}, "
            f"过期时间: {result.valid_to.isoformat()}, "
            f"剩余天数: {expiry.days} 天, "
            f"颁发者: {result.details.issuer.org or result.details.issuer.common_name or 'Unknown'}"
        )

        if expiry.is_expired:
            self.logger.warning(f"证书已过期 - {message}")
        elif expiry.is_in_alert_window:
            self.logger.warning(f"证书处于告警窗口({result.host.alert_window_days}天) - {message}")
        else:
            self.logger.info(f"证书正常 - {message}")

    def log_error(self, hostname: str, error: Exception):
        """
        记录错误信息

        Args:
            hostname: 主机名
            error: 异常对象
        """
        self.execution_stats['failed_checks'] += 1
        self.execution_stats['errors'].append({
            'hostname': hostname,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

        self.logger.error(f"主机 {hostname} 检查时发生错误: {type(error).__name__}: {str(error)}")
        self.logger.debug(f"主机 {hostname} 错误详情", exc_info=error)

    def log_check_end(self):
        """记录检查结束"""
        self.execution_stats['end_time'] = datetime.now(timezone.utc)

        self.logger.info(
            f"SSL证书检查完成: 总计 {self.execution_stats['total_hosts']} 个主机, "
            f"成功 {self.execution_stats['successful_checks']} 个, "
            f"失败 {self.execution_stats['failed_checks']} 个"
        )

    def log_configuration_info(self, config: Dict[str, Any]):
        """
        记录配置信息，SNS主题ARN只保留区域之外的部分

        Args:
            config: 配置信息字典
        """
        safe_config = dict(config)
        if safe_config.get('sns_topic_arn'):
            safe_config['sns_topic_arn'] = self._mask_topic_arn(safe_config['sns_topic_arn'])

        self.logger.info("系统配置信息: " + ", ".join(f"{key}={value}" for key, value in safe_config.items()))

    @staticmethod
    def _mask_topic_arn(topic_arn: str) -> str:
        parts = topic_arn.split(':')
        if len(parts) != 6:
            return "***"
        parts[3] = "***"
        return ':'.join(parts)

    def get_execution_summary(self) -> Dict[str, Any]:
        """
        获取执行摘要

        Returns:
            Dict[str, Any]: 统计数字、耗时和错误列表
        """
        stats = self.execution_stats
        started, ended = stats['start_time'], stats['end_time']
        total = stats['total_hosts']

        return {
            'start_time': started.isoformat() if started else None,
            'end_time': ended.isoformat() if ended else None,
            'duration_seconds': (ended - started).total_seconds() if started and ended else 0,
            'total_hosts': total,
            'successful_checks': stats['successful_checks'],
            'failed_checks': stats['failed_checks'],
            'success_rate': stats['successful_checks'] / total if total else 0,
            'error_count': len(stats['errors']),
            'errors': stats['errors']
        }

    def log_execution_summary(self, max_errors: int = 5):
        """
        用一行记录执行摘要，随后列出前 max_errors 个错误

        Args:
            max_errors: 最多列出的错误数量
        """
        summary = self.get_execution_summary()

        self.logger.info(
            f"执行摘要: 耗时 {summary['duration_seconds']:.2f} 秒, "
            f"{summary['successful_checks']}/{summary['total_hosts']} 个主机检查成功 "
            f"({summary['success_rate']:.1%})"
        )

        errors = summary['errors']
        for error in errors[:max_errors]:
            self.logger.info(f"  {error['hostname']}: {error['error_type']}: {error['error_message']}")
        if len(errors) > max_errors:
            self.logger.info(f"  还有 {len(errors) - max_errors} 个错误未列出")

    def reset_stats(self):
        """重置执行统计"""
        self.execution_stats = self._empty_stats()
