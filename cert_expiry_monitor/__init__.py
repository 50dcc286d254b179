"""
SSL证书过期检查
"""
from .checker import CertExpiryChecker
from .exceptions import CertCheckError, HostConnectionError, MalformedCertificateError
from .models import GlobalConfig, HostSpec, CheckResult, HostOutcome, VERSION

__version__ = VERSION

__all__ = [
    'CertExpiryChecker',
    'CertCheckError',
    'HostConnectionError',
    'MalformedCertificateError',
    'GlobalConfig',
    'HostSpec',
    'CheckResult',
    'HostOutcome',
]
