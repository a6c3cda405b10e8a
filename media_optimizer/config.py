"""
Configuration constants for the media optimizer.
"""

# --- File Type Definitions ---
IMAGE_EXTS = {'.png', '.jpg', '.jpeg', '.gif', '.svg'}
VIDEO_EXTS = {'.mp4', '.webm', '.mkv'}

# --- Conversion Targets ---
# A file counts as converted only when a probe reports exactly these values.
TARGET_IMAGE_MIME = "image/webp"
TARGET_VIDEO_CODEC = "hevc"

IMAGE_TARGET_SUFFIX = ".webp"
VIDEO_TARGET_SUFFIX = ".hevc.mp4"

DEFAULT_WEBP_QUALITY = 80

# --- External Tools ---
# Checked once per run before anything is listed or probed.
REQUIRED_TOOLS = ("ffmpeg", "cwebp")

MIME_PROBE_CMD = ["file", "--mime-type", "-b"]
CODEC_PROBE_CMD = [
    "ffprobe", "-v", "error",
    "-select_streams", "v:0",
    "-show_entries", "stream=codec_name",
    "-of", "default=noprint_wrappers=1:nokey=1",
]

CWEBP_BIN = "cwebp"
FFMPEG_BIN = "ffmpeg"
FFMPEG_HEVC_ARGS = ["-map", "0", "-c", "copy", "-c:v", "libx265", "-tag:v", "hvc1"]

# pymediainfo reports format names, ffprobe reports codec names
MEDIAINFO_CODEC_MAP = {
    'HEVC': 'hevc',
    'AVC': 'h264',
    'VP8': 'vp8',
    'VP9': 'vp9',
    'AV1': 'av1',
    'MPEG-4 Visual': 'mpeg4',
}

# --- Output ---
DEFAULT_OUTPUT_DIR = "converted"
CATALOG_NAME = "files.db"
LOG_NAME = "optimizer.log"
