"""
证书过期计算服务
"""
import math
from datetime import datetime, timedelta
from typing import Dict, List

from ..models import CheckResult, ExpiryStatus

DAY_IN_MS = 86400000


def _round_half_up(value: float) -> int:
    # 四舍五入，.5 向正无穷方向取整
    return int(math.floor(value + 0.5))


def compute_expiry(valid_to: datetime, now: datetime, alert_window_days: int) -> ExpiryStatus:
    """
    计算证书过期状态

    Args:
        valid_to: 证书到期时间
        now: 当前时间（由调用方注入）
        alert_window_days: 告警窗口天数

    Returns:
        ExpiryStatus: 剩余天数、毫秒数、是否过期、是否处于告警窗口
    """
    delta_ms = (valid_to - now) / timedelta(milliseconds=1)
    days = _round_half_up(delta_ms / DAY_IN_MS)

    return ExpiryStatus(
        days=days,
        milliseconds=_round_half_up(delta_ms),
        is_expired=days <= 0,
        is_in_alert_window=days <= alert_window_days
    )


class ExpiryCalculator:
    """检查结果分类与摘要"""

    def filter_alert_window(self, results: List[CheckResult]) -> List[CheckResult]:
        """筛选处于告警窗口内但尚未过期的证书"""
        return [r for r in results if r.expiry.is_in_alert_window and not r.expiry.is_expired]

    def filter_expired(self, results: List[CheckResult]) -> List[CheckResult]:
        return [r for r in results if r.expiry.is_expired]

    def categorize_results(self, results: List[CheckResult]) -> Dict[str, List[CheckResult]]:
        """
        对检查结果进行分类

        Args:
            results: 检查结果列表

        Returns:
            dict: expired / alert_window / healthy 三类结果
        """
        return {
            'expired': self.filter_expired(results),
            'alert_window': self.filter_alert_window(results),
            'healthy': [r for r in results if not r.needs_attention]
        }

    def get_expiry_summary(self, results: List[CheckResult]) -> str:
        categorized = self.categorize_results(results)

        summary_parts = [f"总计: {len(results)} 个主机"]

        if categorized['expired']:
            summary_parts.append(f"已过期: {len(categorized['expired'])} 个")

        if categorized['alert_window']:
            summary_parts.append(f"告警窗口内: {len(categorized['alert_window'])} 个")

        if categorized['healthy']:
            summary_parts.append(f"健康: {len(categorized['healthy'])} 个")

        return ", ".join(summary_parts)
