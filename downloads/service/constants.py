"""
Transcoding constants.

Centralized definitions of the output format and ffmpeg arguments.
"""

# Substring that marks an HLS playlist manifest
HLS_MARKER = '.m3u8'

# Output container is always MP4 (streams are copied, not re-encoded)
OUTPUT_EXTENSION = '.mp4'
OUTPUT_MIME_TYPE = 'video/mp4'

DEFAULT_FILE_BASE = 'video'

# Seconds before a running ffmpeg process is killed
DEFAULT_TRANSCODE_TIMEOUT = 600

TIMEOUT_MESSAGE = 'conversion timed out'

# Remux HLS into MP4: copy streams, rewrap ADTS AAC, move the index to the front
FFMPEG_REMUX_ARGS = [
    '-c', 'copy',
    '-bsf:a', 'aac_adtstoasc',
    '-movflags', 'faststart',
    '-y',  # Overwrite output file
]

# Filesystem limit on a single path component, in bytes
FILESYSTEM_NAME_MAX_BYTES = 255

# Random prefix on temporary output files: '<token>_<file name>'
TEMP_TOKEN_SIZE = 21

DEFAULT_FILE_NAME_MAX_BYTES = 200
