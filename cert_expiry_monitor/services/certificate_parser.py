"""
证书字段解析服务
"""
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

from ..exceptions import MalformedCertificateError
from ..models import CertificateDetails, IssuerDetails, SubjectDetails

# getpeercert() 的时间格式：'Dec 31 23:59:59 2024 GMT'
CERT_DATE_FORMAT = '%b %d %H:%M:%S %Y %Z'

_SHORT_NAMES = {
    'O': 'organizationName',
    'CN': 'commonName',
}


class CertificateFieldParser:
    """将 getpeercert() 返回的原始证书结构转换为统一结果"""

    def parse(self, raw: Mapping[str, Any]) -> Tuple[CertificateDetails, datetime, datetime]:
        """
        解析原始证书

        Args:
            raw: SSLSocket.getpeercert() 返回的字典

        Returns:
            Tuple: (证书详情, 生效时间, 到期时间)

        Raises:
            MalformedCertificateError: 证书为空或有效期无法解析
        """
        if not raw or not isinstance(raw, Mapping):
            raise MalformedCertificateError("对端证书为空或格式无效")

        valid_from = self.parse_date(self._first(raw, 'notBefore', 'valid_from'), 'notBefore')
        valid_to = self.parse_date(self._first(raw, 'notAfter', 'valid_to'), 'notAfter')

        subject = raw.get('subject')
        issuer = raw.get('issuer')

        details = CertificateDetails(
            subject=SubjectDetails(
                org=self._get_name(subject, 'O'),
                common_name=self._get_name(subject, 'CN'),
                alt_name=self._format_alt_names(
                    self._first(raw, 'subjectAltName', 'subjectaltname')
                )
            ),
            issuer=IssuerDetails(
                org=self._get_name(issuer, 'O'),
                common_name=self._get_name(issuer, 'CN')
            )
        )

        return details, valid_from, valid_to

    def parse_date(self, value: Optional[str], field_name: str = 'date') -> datetime:
        """
        解析证书时间字符串为UTC时间

        Args:
            value: 形如 'Jun  1 12:00:00 2025 GMT' 的字符串
            field_name: 字段名，用于错误信息

        Returns:
            datetime: 带时区的UTC时间
        """
        if not value or not isinstance(value, str):
            raise MalformedCertificateError(f"证书中未找到 {field_name} 时间信息")

        try:
            parsed = datetime.strptime(value.strip(), CERT_DATE_FORMAT)
        except ValueError as e:
            raise MalformedCertificateError(f"无法解析证书 {field_name} 时间: {value!r}") from e

        return parsed.replace(tzinfo=timezone.utc)

    @staticmethod
    def _first(raw: Mapping[str, Any], *keys: str) -> Any:
        for key in keys:
            value = raw.get(key)
            if value:
                return value
        return None

    def _get_name(self, name: Any, short_name: str) -> Optional[str]:
        """从 subject/issuer 中取出指定属性，缺失时返回 None"""
        if not name:
            return None

        if isinstance(name, Mapping):
            return name.get(short_name) or name.get(_SHORT_NAMES[short_name])

        long_name = _SHORT_NAMES[short_name]
        # getpeercert 格式: ((('countryName', 'US'),), (('organizationName', 'X'),), ...)
        for rdn in name:
            for attribute in rdn:
                if len(attribute) == 2 and attribute[0] in (long_name, short_name):
                    return attribute[1]
        return None

    @staticmethod
    def _format_alt_names(alt_names: Any) -> Optional[str]:
        if not alt_names:
            return None
        if isinstance(alt_names, str):
            return alt_names
        return ", ".join(f"{kind}:{value}" for kind, value in alt_names)
