"""
测试公共夹具
"""
import pytest
from datetime import datetime, timezone, timedelta

CERT_DATE_FORMAT = '%b %d %H:%M:%S %Y GMT'

FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def build_raw_cert(now=FIXED_NOW, valid_to_offset_days=60, valid_from_offset_days=90, **overrides):
    """构造 getpeercert() 格式的证书"""
    cert = {
        'subject': (
            (('countryName', 'US'),),
            (('organizationName', 'Org name'),),
            (('commonName', 'Common name'),),
        ),
        'issuer': (
            (('countryName', 'US'),),
            (('organizationName', 'Issuer org name'),),
            (('commonName', 'Issuer common name'),),
        ),
        'subjectAltName': (('DNS', 'example.com'), ('DNS', 'www.example.com')),
        'notBefore': (now - timedelta(days=valid_from_offset_days)).strftime(CERT_DATE_FORMAT),
        'notAfter': (now + timedelta(days=valid_to_offset_days)).strftime(CERT_DATE_FORMAT),
    }
    cert.update(overrides)
    return cert


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def raw_cert():
    return build_raw_cert()
