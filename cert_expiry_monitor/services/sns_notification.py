"""
SNS通知服务
"""
import os
import time
from datetime import datetime, timezone
from typing import List, Optional, Sequence
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..interfaces import NotificationServiceInterface
from ..models import CheckResult, HostOutcome


class SNSNotificationService(NotificationServiceInterface):
    """SNS通知服务实现"""

    RETRYABLE_ERROR_CODES = {
        'Throttling',
        'ServiceUnavailable',
        'InternalError',
        'RequestTimeout'
    }

    def __init__(self, topic_arn: Optional[str] = None, region_name: Optional[str] = None,
                 max_retries: int = 3, base_delay: float = 1.0):
        """
        初始化SNS通知服务

        Args:
            topic_arn: SNS主题ARN，如果为None则从环境变量读取
            region_name: AWS区域名称，如果为None则从ARN或AWS_REGION推断
            max_retries: 可重试错误的最大重试次数
            base_delay: 指数退避的基础延迟（秒）
        """
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')
        self.max_retries = max_retries
        self.base_delay = base_delay

        if region_name:
            self.region_name = region_name
        elif self.topic_arn and self.topic_arn.startswith('arn:aws:sns:'):
            # 从SNS ARN中提取区域
            self.region_name = self.topic_arn.split(':')[3]
        else:
            self.region_name = os.getenv('AWS_REGION', 'us-east-1')

        self.logger = logging.getLogger(__name__)
        self.sns_client = boto3.client('sns', region_name=self.region_name)

    def send_expiry_notification(self, results: List[CheckResult],
                                 failures: Sequence[HostOutcome] = ()) -> bool:
        """
        发送证书过期通知

        Args:
            results: 检查结果，只有已过期或处于告警窗口内的会被通知
            failures: 检查失败的主机

        Returns:
            bool: 发送是否成功
        """
        attention = [r for r in results if r.needs_attention]
        if not attention and not failures:
            self.logger.info("没有需要关注的证书，跳过通知发送")
            return True

        if not self.topic_arn:
            self.logger.error("SNS主题ARN未配置")
            return False

        subject = self._format_subject(attention, failures)
        message = self.format_notification_content(attention, failures)

        return self._publish_with_retry(subject, message)

    def _publish_with_retry(self, subject: str, message: str) -> bool:
        """
        发布SNS消息，仅对限流类错误重试

        Returns:
            bool: 发送是否成功
        """
        for attempt in range(self.max_retries + 1):
            try:
                response = self.sns_client.publish(
                    TopicArn=self.topic_arn,
                    Subject=subject,
                    Message=message
                )
            except ClientError as e:
                error_code = e.response['Error']['Code']
                error_message = e.response['Error']['Message']

                if error_code in self.RETRYABLE_ERROR_CODES and attempt < self.max_retries:
                    wait_time = self.base_delay * (2 ** attempt)
                    self.logger.warning(
                        f"SNS发送失败 (尝试 {attempt + 1}/{self.max_retries + 1}) - {error_code}: {error_message}，"
                        f"{wait_time:.1f}秒后重试"
                    )
                    time.sleep(wait_time)
                    continue

                self.logger.error(f"SNS发送失败 - {error_code}: {error_message}")
                return False
            except BotoCoreError as e:
                self.logger.error(f"发送SNS通知时发生错误: {str(e)}")
                return False

            self.logger.info(f"SNS通知发送成功，MessageId: {response.get('MessageId')}")
            return True

        return False

    def format_notification_content(self, results: List[CheckResult],
                                    failures: Sequence[HostOutcome] = ()) -> str:
        """
        格式化通知内容

        Args:
            results: 证书检查结果列表
            failures: 检查失败的主机

        Returns:
            str: 格式化的通知内容
        """
        if not results and not failures:
            return "所有SSL证书状态正常。"

        expired = [r for r in results if r.expiry.is_expired]
        in_window = [r for r in results if r.expiry.is_in_alert_window and not r.expiry.is_expired]

        lines = [
            "SSL证书过期监控报告",
            "=" * 30,
            f"检查时间: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')} UTC",
            ""
        ]

        if expired:
            lines.extend(["🚨 已过期证书:", ""])
            for result in expired:
                lines.extend(self._format_result(result))
                lines.append(f"  已过期: {abs(result.expiry.days)} 天")
                lines.append("")

        if in_window:
            lines.extend(["⚠️  告警窗口内证书:", ""])
            for result in in_window:
                lines.extend(self._format_result(result))
                lines.append(f"  剩余天数: {result.expiry.days} 天 (告警窗口 {result.host.alert_window_days} 天)")
                lines.append("")

        if failures:
            lines.extend(["❌ 检查失败的主机:", ""])
            for outcome in failures:
                lines.append(f"• {outcome.host.address}")
                lines.append(f"  错误: {outcome.error}")
                lines.append("")

        lines.append("此消息由SSL证书监控系统自动发送。")

        return "\n".join(lines)

    @staticmethod
    def _format_result(result: CheckResult) -> List[str]:
        issuer = result.details.issuer
        return [
            f"• {result.host.address}",
            f"  过期时间: {result.valid_to.strftime('%Y-%m-%d %H:%M:%S')}",
            f"  颁发者: {issuer.org or issuer.common_name or 'Unknown'}",
        ]

    def _format_subject(self, results: List[CheckResult], failures: Sequence[HostOutcome]) -> str:
        expired_count = len([r for r in results if r.expiry.is_expired])
        window_count = len(results) - expired_count

        if expired_count > 0:
            subject = f"🚨 SSL证书警报: {expired_count}个已过期"
            if window_count:
                subject += f", {window_count}个即将过期"
        elif window_count > 0:
            subject = f"⚠️ SSL证书提醒: {window_count}个证书即将过期"
        else:
            subject = "SSL证书状态报告"

        if failures:
            subject += f" | {len(failures)}个检查失败"
        return subject

    def test_connection(self) -> bool:
        """
        测试SNS连接

        Returns:
            bool: 连接是否成功
        """
        if not self.topic_arn:
            self.logger.error("SNS主题ARN未配置")
            return False

        try:
            self.sns_client.get_topic_attributes(TopicArn=self.topic_arn)
        except ClientError as e:
            self.logger.error(
                f"SNS连接测试失败 - {e.response['Error']['Code']}: {e.response['Error']['Message']}"
            )
            return False
        except BotoCoreError as e:
            self.logger.error(f"SNS连接测试时发生错误: {str(e)}")
            return False

        self.logger.info("SNS连接测试成功")
        return True

    def get_configuration_status(self) -> dict:
        """
        获取配置状态

        Returns:
            dict: 配置状态信息
        """
        return {
            'topic_arn_configured': bool(self.topic_arn),
            'topic_arn': self.topic_arn,
            'region_name': self.region_name,
            'configuration_valid': bool(self.topic_arn)
        }
