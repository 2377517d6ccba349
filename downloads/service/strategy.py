"""
Download strategy detection.

Determines whether a URL can be handed back as a direct link or must be
remuxed from an HLS stream with ffmpeg.
"""

from downloads.service.constants import HLS_MARKER


def is_segmented_stream(url):
    """
    Check whether a URL points at a segmented (HLS) stream.

    This is a substring heuristic, not a manifest parse: any URL containing
    '.m3u8', including in its query string, counts as HLS.

    Args:
        url: The source URL

    Returns:
        bool: True if the URL contains '.m3u8'
    """
    return HLS_MARKER in (url or '')


def choose_download_strategy(url):
    """
    Determine the download strategy for a URL.

    Args:
        url: The source URL

    Returns:
        str: 'hls' for segmented streams that need remuxing,
             'direct' for everything the client can fetch itself
    """
    if is_segmented_stream(url):
        return 'hls'
    return 'direct'
