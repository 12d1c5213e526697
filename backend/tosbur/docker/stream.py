"""
Helpers for container output bodies (attach and logs).

Containers created without a TTY have their output framed by the daemon:
each frame is an 8-byte header (stream type, 3 padding bytes, big-endian
payload length) followed by the payload. TTY containers send raw bytes.
"""

import re
import struct

import httpx

MULTIPLEXED_CONTENT_TYPE = "application/vnd.docker.multiplexed-stream"

STDIN, STDOUT, STDERR = 0, 1, 2

_HEADER = struct.Struct(">BxxxL")

# Jupyter's ready banner, e.g. http://172.17.0.2:8888/lab?token=abc123
NOTEBOOK_URL_PATTERN = re.compile(
    r"http://(?:\d{1,3}\.){3}\d{1,3}:8888/lab\?token=[A-Za-z0-9_\-]+"
)


def demultiplex(content: bytes, streams: tuple[int, ...] = (STDOUT, STDERR)) -> bytes:
    """
    Strip frame headers from a multiplexed body

    Args:
        content: Raw response body
        streams: Stream types to keep

    Returns:
        Concatenated payloads of the kept streams. A truncated trailing
        frame is kept as far as it goes.
    """
    chunks = []
    offset = 0
    while offset + _HEADER.size <= len(content):
        stream_type, length = _HEADER.unpack_from(content, offset)
        offset += _HEADER.size
        payload = content[offset : offset + length]
        offset += length
        if stream_type in streams:
            chunks.append(payload)
    return b"".join(chunks)


def decode_output(response: httpx.Response) -> str:
    """Decode an attach/logs response body to text, demultiplexing if needed"""
    content_type = response.headers.get("content-type", "")
    content = response.content
    if content_type.startswith(MULTIPLEXED_CONTENT_TYPE):
        content = demultiplex(content)
    return content.decode("utf-8", errors="replace")


def find_notebook_url(text: str) -> str | None:
    """Return the first notebook URL in text, or None"""
    match = NOTEBOOK_URL_PATTERN.search(text)
    return match.group(0) if match else None
