"""
Output file naming.

Derives a filesystem-safe MP4 file name from a caller-supplied hint.
"""
import unicodedata

from downloads.service.config import get_default_file_base, get_file_name_max_bytes
from downloads.service.constants import OUTPUT_EXTENSION


def _is_safe_char(ch):
    # Letters, digits and combining marks in any script, plus '_', '-' and spaces
    if ch in '_-':
        return True
    category = unicodedata.category(ch)
    if category == 'Cc':
        return False
    return category[0] in 'LNM' or ch.isspace()


def _truncate_utf8(text, max_bytes):
    """Cut text to at most max_bytes of UTF-8 without splitting a character"""
    return text.encode('utf-8')[:max_bytes].decode('utf-8', errors='ignore')


def derive_file_name(hint=None):
    """
    Derive a safe output file name from a hint.

    Strips path separators, quotes, shell metacharacters and control
    characters so the name can be used both on disk and inside the suggested
    fallback commands. Leading and trailing whitespace is trimmed, and the
    result is truncated so it fits VIDGRAB_FILE_NAME_MAX_BYTES (UTF-8 bytes,
    extension included).

    Args:
        hint: Optional caller-supplied name (e.g. a video title)

    Returns:
        str: Sanitized name ending in .mp4
    """
    base = ''.join(ch for ch in (hint or '') if _is_safe_char(ch)).strip()

    max_base_bytes = get_file_name_max_bytes() - len(OUTPUT_EXTENSION.encode('utf-8'))
    base = _truncate_utf8(base, max_base_bytes).rstrip()

    if not base:
        base = _truncate_utf8(get_default_file_base(), max_base_bytes) or 'video'

    return f'{base}{OUTPUT_EXTENSION}'
