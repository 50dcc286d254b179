"""
SNS通知服务测试
"""
import pytest
import os
from unittest.mock import patch, MagicMock
from botocore.exceptions import ClientError
from moto import mock_aws

from cert_expiry_monitor.services.sns_notification import SNSNotificationService
from cert_expiry_monitor.services.certificate_parser import CertificateFieldParser
from cert_expiry_monitor.services.expiry_calculator import compute_expiry
from cert_expiry_monitor.services.host_config import HostConfigResolver
from cert_expiry_monitor.exceptions import HostConnectionError
from cert_expiry_monitor.models import CheckResult, GlobalConfig, HostOutcome

from conftest import FIXED_NOW, build_raw_cert


def make_result(hostname, valid_to_offset_days):
    host = HostConfigResolver(GlobalConfig()).resolve_one(hostname)
    details, valid_from, valid_to = CertificateFieldParser().parse(
        build_raw_cert(valid_to_offset_days=valid_to_offset_days)
    )
    return CheckResult(
        host=host,
        details=details,
        valid_from=valid_from,
        valid_to=valid_to,
        expiry=compute_expiry(valid_to, FIXED_NOW, host.alert_window_days)
    )


def client_error(code, message="error"):
    return ClientError({'Error': {'Code': code, 'Message': message}}, 'Publish')


class TestSNSNotificationService:
    """SNS通知服务测试类"""

    def setup_method(self):
        self.topic_arn = "arn:aws:sns:eu-west-1:123456789012:cert-alerts"

    @patch('cert_expiry_monitor.services.sns_notification.boto3')
    def test_region_from_topic_arn(self, mock_boto3):
        service = SNSNotificationService(topic_arn=self.topic_arn)

        assert service.region_name == 'eu-west-1'
        mock_boto3.client.assert_called_once_with('sns', region_name='eu-west-1')

    @patch.dict(os.environ, {'AWS_REGION': 'ap-south-1'}, clear=True)
    @patch('cert_expiry_monitor.services.sns_notification.boto3')
    def test_region_from_env_without_topic(self, mock_boto3):
        service = SNSNotificationService()

        assert service.topic_arn is None
        assert service.region_name == 'ap-south-1'
        assert service.get_configuration_status()['configuration_valid'] is False

    @patch('cert_expiry_monitor.services.sns_notification.boto3')
    def test_nothing_to_notify(self, mock_boto3):
        service = SNSNotificationService(topic_arn=self.topic_arn)

        assert service.send_expiry_notification([make_result("ok.example.com", 60)]) is True
        service.sns_client.publish.assert_not_called()

    @patch('cert_expiry_monitor.services.sns_notification.boto3')
    def test_format_notification_content(self, mock_boto3):
        """测试通知内容格式化"""
        service = SNSNotificationService(topic_arn=self.topic_arn)
        host = HostConfigResolver(GlobalConfig()).resolve_one("down.example.com")
        failure = HostOutcome(host=host, error=HostConnectionError("connection refused"))

        content = service.format_notification_content(
            [make_result("expired.example.com", -5), make_result("soon.example.com", 10)],
            [failure]
        )

        assert "🚨 已过期证书" in content
        assert "expired.example.com:443" in content
        assert "已过期: 5 天" in content
        assert "soon.example.com:443" in content
        assert "剩余天数: 10 天 (告警窗口 30 天)" in content
        assert "down.example.com:443" in content
        assert "connection refused" in content
        assert "Issuer org name" in content

    @patch('cert_expiry_monitor.services.sns_notification.boto3')
    def test_format_notification_content_empty(self, mock_boto3):
        service = SNSNotificationService(topic_arn=self.topic_arn)

        assert service.format_notification_content([]) == "所有SSL证书状态正常。"

    @patch('cert_expiry_monitor.services.sns_notification.boto3')
    def test_subject(self, mock_boto3):
        service = SNSNotificationService(topic_arn=self.topic_arn)

        subject = service._format_subject(
            [make_result("expired.example.com", -5), make_result("soon.example.com", 10)], []
        )

        assert subject == "🚨 SSL证书警报: 1个已过期, 1个即将过期"

    @patch('cert_expiry_monitor.services.sns_notification.time.sleep')
    @patch('cert_expiry_monitor.services.sns_notification.boto3')
    def test_retry_on_throttling(self, mock_boto3, mock_sleep):
        """测试限流错误重试"""
        service = SNSNotificationService(topic_arn=self.topic_arn)
        service.sns_client.publish.side_effect = [client_error('Throttling'), {'MessageId': 'abc'}]

        assert service.send_expiry_notification([make_result("soon.example.com", 10)]) is True
        assert service.sns_client.publish.call_count == 2
        mock_sleep.assert_called_once_with(1.0)

    @patch('cert_expiry_monitor.services.sns_notification.time.sleep')
    @patch('cert_expiry_monitor.services.sns_notification.boto3')
    def test_no_retry_on_auth_error(self, mock_boto3, mock_sleep):
        service = SNSNotificationService(topic_arn=self.topic_arn)
        service.sns_client.publish.side_effect = client_error('AuthorizationError')

        assert service.send_expiry_notification([make_result("soon.example.com", 10)]) is False
        assert service.sns_client.publish.call_count == 1
        mock_sleep.assert_not_called()

    @patch('cert_expiry_monitor.services.sns_notification.boto3')
    def test_missing_topic(self, mock_boto3):
        with patch.dict(os.environ, {}, clear=True):
            service = SNSNotificationService()

        assert service.send_expiry_notification([make_result("soon.example.com", 10)]) is False
        assert service.test_connection() is False

    @mock_aws
    def test_publish_with_moto(self):
        """测试通过 moto 发布到 SNS 主题"""
        import boto3

        sns = boto3.client('sns', region_name='us-east-1')
        topic_arn = sns.create_topic(Name='cert-alerts')['TopicArn']

        service = SNSNotificationService(topic_arn=topic_arn)

        assert service.test_connection() is True
        assert service.send_expiry_notification([make_result("expired.example.com", -5)]) is True

    @mock_aws
    def test_test_connection_missing_topic(self):
        service = SNSNotificationService(topic_arn="arn:aws:sns:us-east-1:123456789012:missing")

        assert service.test_connection() is False
