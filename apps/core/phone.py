"""Kenyan mobile number normalisation (+254XXXXXXXXX)."""
import re

COUNTRY_CODE = '254'
_LOCAL_LENGTH = 9
_VALID_LOCAL_PREFIXES = ('7', '1', '20')
_MOBILE_PREFIXES = ('7', '1')
_STRIP_RE = re.compile(r'[^\d+]')


def _local_part(raw):
    cleaned = _STRIP_RE.sub('', str(raw or '').strip())
    # '+' is only meaningful in the leading position
    cleaned = cleaned[:1] + cleaned[1:].replace('+', '')

    if cleaned.startswith('+254'):
        return cleaned[4:]
    cleaned = cleaned.lstrip('+')
    if cleaned.startswith('0254'):
        return cleaned[4:]
    if cleaned.startswith('254'):
        return cleaned[3:]
    if cleaned.startswith('0'):
        return cleaned[1:]
    return cleaned


def normalize_kenyan_phone(raw):
    """Return ``+254XXXXXXXXX`` or ``None`` when ``raw`` is not a Kenyan phone number."""
    local = _local_part(raw)
    if len(local) != _LOCAL_LENGTH or not local.isdigit():
        return None
    if not local.startswith(_VALID_LOCAL_PREFIXES):
        return None
    return f'+{COUNTRY_CODE}{local}'


def is_valid_kenyan_phone(raw):
    return normalize_kenyan_phone(raw) is not None


def format_kenyan_phone(raw):
    """Display form: ``+254 712 345 678``. Unparseable input is returned unchanged."""
    normalized = normalize_kenyan_phone(raw)
    if not normalized:
        return raw
    local = normalized[4:]
    return f'+{COUNTRY_CODE} {local[:3]} {local[3:6]} {local[6:]}'


def to_msisdn(raw):
    """M-Pesa expects ``2547XXXXXXXX`` without the plus sign."""
    normalized = normalize_kenyan_phone(raw)
    return normalized[1:] if normalized else None


def significant_digits(raw):
    return re.sub(r'\D', '', str(raw or ''))


def is_kenyan_mobile(raw):
    normalized = normalize_kenyan_phone(raw)
    return bool(normalized) and normalized[4:].startswith(_MOBILE_PREFIXES)
