"""
Fallback advice for failed HLS conversions.

When ffmpeg cannot produce a file, the caller gets a fixed list of
alternative tools with ready-to-copy commands instead of a bare error.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AdvisoryEntry:
    """One recommended alternative tool"""
    tool_name: str
    description: str
    command: Optional[str] = None
    install_hint: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self):
        """Serialize for the JSON response, omitting empty fields"""
        data = {
            'name': self.tool_name,
            'description': self.description,
        }
        if self.command is not None:
            data['command'] = self.command
        if self.install_hint is not None:
            data['install'] = self.install_hint
        if self.note is not None:
            data['note'] = self.note
        return data


def build_fallback_advisory(source_url, file_name):
    """
    Build the fallback tool list for a failed conversion.

    The URL and file name are interpolated verbatim into double-quoted
    command templates. The file name is already sanitized; the URL is not,
    so a URL containing '"' yields a command a shell will not parse as
    intended. Each entry is still a separate structured record.

    Args:
        source_url: The original HLS URL
        file_name: The derived output file name

    Returns:
        list[AdvisoryEntry]: Always the same four tools, in the same order
    """
    return [
        AdvisoryEntry(
            tool_name='yt-dlp',
            description='Feature-rich video downloader that handles HLS and many other formats',
            command=f'yt-dlp "{source_url}" -o "{file_name}"',
            install_hint='pip install yt-dlp, or download from https://github.com/yt-dlp/yt-dlp/releases',
        ),
        AdvisoryEntry(
            tool_name='FFmpeg',
            description='Audio/video toolkit that can remux the stream locally',
            command=f'ffmpeg -i "{source_url}" -c copy "{file_name}"',
            install_hint='Download from https://ffmpeg.org/download.html or install with your package manager',
        ),
        AdvisoryEntry(
            tool_name='IDM (Internet Download Manager)',
            description='Download manager for Windows',
            note='Paste the link to download it directly',
        ),
        AdvisoryEntry(
            tool_name='Thunder (Xunlei)',
            description='Widely used download manager',
            note='Supports HLS stream downloads',
        ),
    ]
