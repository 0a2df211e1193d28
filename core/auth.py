from typing import Callable, Optional
from core.error_handling import log_warning

LicenseValidator = Callable[[str], bool]


def _default_validator(license_key: str) -> bool:
    return bool(license_key and license_key.strip())


def check_authorized(license_key: Optional[str] = None, validator: Optional[LicenseValidator] = None) -> bool:
    """
    Consult the license gate once. Nothing is cached between calls.

    ``license_key`` defaults to ``LICENSE_KEY`` from configuration and
    ``validator`` to a non-blank check; deployments inject their own
    validator for real key verification.
    """
    if license_key is None:
        from config import get_config
        license_key = get_config().LICENSE_KEY

    if not license_key:
        log_warning("No license key configured.", code="AUTH_LICENSE_001")
        return False

    is_valid = (validator or _default_validator)(license_key)
    if not is_valid:
        log_warning("License key rejected by validator.", code="AUTH_LICENSE_002")
    return is_valid
