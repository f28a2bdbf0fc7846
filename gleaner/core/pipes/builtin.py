"""Built-in pipes.

Every pipe takes ``(value, params, context)`` and either returns the
transformed value or raises ``ValueError`` describing why the input was
rejected. The pipeline wraps those failures in ``PipeError``.
"""

import html
import re
from datetime import datetime
from urllib.parse import urljoin, urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from bs4 import BeautifulSoup

from gleaner.core.pipes.base import PipeContext, PipeFunc

_INT_RE = re.compile(r'^[+-]?\d+$')
_FLOAT_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
_SHORTHAND_RE = re.compile(r'^([\d.]+)([KMBTkmbt]?)$')
_EMAIL_RE = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')

_MULTIPLIERS = {
    'k': 1e3,
    'm': 1e6,
    'b': 1e9,
    't': 1e12,
}


def _clean_number(value: str) -> str:
    return value.strip().replace(',', '').replace('$', '')


def trim(value: str, params: list[str], context: PipeContext) -> str:
    return value.strip()


def trim_left(value: str, params: list[str], context: PipeContext) -> str:
    return value.lstrip(params[0] if params and params[0] else None)


def trim_right(value: str, params: list[str], context: PipeContext) -> str:
    return value.rstrip(params[0] if params and params[0] else None)


def lowercase(value: str, params: list[str], context: PipeContext) -> str:
    return value.lower()


def uppercase(value: str, params: list[str], context: PipeContext) -> str:
    return value.upper()


def decode(value: str, params: list[str], context: PipeContext) -> str:
    """Decode HTML entities (``&amp;`` → ``&``)."""
    return html.unescape(value)


def strip_html(value: str, params: list[str], context: PipeContext) -> str:
    """Remove markup, keeping the text."""
    if '<' not in value:
        return value.strip()
    return BeautifulSoup(value, 'lxml').get_text(separator=' ', strip=True)


def to_int(value: str, params: list[str], context: PipeContext) -> int:
    """Parse an integer after removing ``$`` and thousands separators."""
    cleaned = _clean_number(value)
    if not _INT_RE.match(cleaned):
        raise ValueError(f"cannot convert '{value}' to int")
    return int(cleaned)


def to_float(value: str, params: list[str], context: PipeContext) -> float:
    """Parse a float after removing ``$`` and thousands separators."""
    cleaned = _clean_number(value)
    if not _FLOAT_RE.match(cleaned):
        raise ValueError(f"cannot convert '{value}' to float")
    return float(cleaned)


def parse_url(value: str, params: list[str], context: PipeContext) -> str:
    """Resolve a possibly relative URL against the page's base URL.

    Absolute URLs are returned unchanged. Relative URLs need a base URL in
    the pipe context.
    """
    value = value.strip()
    if urlparse(value).scheme:
        return value
    if not context.base_url:
        raise ValueError('base URL not available to resolve relative URL')
    return urljoin(context.base_url, value)


def parse_time(value: str, params: list[str], context: PipeContext) -> datetime:
    """Parse a date with a ``strptime`` layout and optional IANA zone.

    Params:
        layout: strptime format, required
        timezone: zone name applied to naive results, defaults to UTC

    """
    if not params or not params[0]:
        raise ValueError('parsetime requires a layout parameter (e.g. parsetime:%Y-%m-%d:UTC)')
    layout = params[0]
    zone_name = params[1] if len(params) > 1 and params[1] else 'UTC'

    try:
        zone = ZoneInfo(zone_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"invalid timezone '{zone_name}'") from e

    try:
        parsed = datetime.strptime(value.strip(), layout)
    except ValueError as e:
        raise ValueError(f"cannot parse time '{value}' with layout '{layout}': {e}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed


def regex_replace(value: str, params: list[str], context: PipeContext) -> str:
    """Replace every match of a pattern.

    Params:
        pattern: regular expression
        replacement: ``re.sub`` replacement template
        flags: optional, ``i`` for case-insensitive

    """
    if len(params) < 2:
        raise ValueError('regexreplace requires pattern and replacement (e.g. regexreplace:\\d+:X)')
    pattern, replacement = params[0], params[1]
    flags = re.IGNORECASE if len(params) > 2 and 'i' in params[2] else 0

    try:
        return re.compile(pattern, flags).sub(replacement, value)
    except re.error as e:
        raise ValueError(f"invalid regex '{pattern}': {e}") from e


def _ago(count: int, unit: str) -> str:
    return f'{count} {unit} ago' if count == 1 else f'{count} {unit}s ago'


def human_duration(value: str, params: list[str], context: PipeContext) -> str:
    """Render a number of seconds as ``N seconds/minutes/hours/days ago``."""
    cleaned = value.strip()
    if not _INT_RE.match(cleaned):
        raise ValueError(f"cannot convert '{value}' to seconds")
    seconds = int(cleaned)

    if seconds < 60:
        return _ago(seconds, 'second')
    minutes = seconds // 60
    if minutes < 60:
        return _ago(minutes, 'minute')
    hours = minutes // 60
    if hours < 24:
        return _ago(hours, 'hour')
    return _ago(hours // 24, 'day')


def num_normalize(value: str, params: list[str], context: PipeContext) -> str:
    """Expand shorthand numbers such as ``1.5K`` into ``1500``.

    Plain numbers pass through with commas removed; anything else is
    returned unchanged.
    """
    cleaned = value.strip().replace(',', '')
    if _FLOAT_RE.match(cleaned):
        return cleaned

    match = _SHORTHAND_RE.match(cleaned)
    if not match:
        return value
    number, suffix = match.groups()
    try:
        amount = float(number)
    except ValueError:
        return value

    if suffix:
        amount *= _MULTIPLIERS[suffix.lower()]
    if amount.is_integer():
        return str(int(amount))
    return f'{amount:.2f}'


def extract_email(value: str, params: list[str], context: PipeContext) -> str:
    match = _EMAIL_RE.search(value)
    return match.group(0) if match else value


def validate_email(value: str, params: list[str], context: PipeContext) -> str:
    """Return the address if the whole input is an email, otherwise ''."""
    value = value.strip()
    return value if _EMAIL_RE.fullmatch(value) else ''


def validate_url(value: str, params: list[str], context: PipeContext) -> str:
    """Return the input if it is an absolute http(s) URL, otherwise ''."""
    value = value.strip()
    try:
        parsed = urlparse(value)
    except ValueError:
        return ''
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return ''
    return value


def _int_param(params: list[str], index: int, default: int, pipe: str) -> int:
    if len(params) <= index or params[index] == '':
        return default
    try:
        return int(params[index])
    except ValueError as e:
        raise ValueError(f"{pipe} parameter '{params[index]}' is not an integer") from e


def substring(value: str, params: list[str], context: PipeContext) -> str:
    """Slice the input. Params: start, end (negative or missing means to the end)."""
    start = _int_param(params, 0, 0, 'substring')
    end = _int_param(params, 1, -1, 'substring')
    if start < 0 or start >= len(value):
        return ''
    if end < 0 or end > len(value):
        end = len(value)
    return value[start:end]


def split(value: str, params: list[str], context: PipeContext) -> str:
    """Split on a delimiter (default a space) and return one part (default the first)."""
    delimiter = params[0] if params and params[0] else ' '
    index = _int_param(params, 1, 0, 'split')
    parts = value.split(delimiter)
    if 0 <= index < len(parts):
        return parts[index]
    return parts[0]


BUILTIN_PIPES: dict[str, PipeFunc] = {
    'trim': trim,
    'toint': to_int,
    'tofloat': to_float,
    'parseurl': parse_url,
    'parsetime': parse_time,
    'regexreplace': regex_replace,
    'humanduration': human_duration,
    'numnormalize': num_normalize,
    'lowercase': lowercase,
    'uppercase': uppercase,
    'decode': decode,
    'trimleft': trim_left,
    'trimright': trim_right,
    'striphtml': strip_html,
    'extractemail': extract_email,
    'validateemail': validate_email,
    'validateurl': validate_url,
    'substring': substring,
    'split': split,
}
