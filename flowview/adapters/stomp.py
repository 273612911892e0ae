"""Minimal STOMP 1.2 frame codec for the event channel.

Only the frames the channel needs are covered: CONNECT, SUBSCRIBE and
DISCONNECT going out; CONNECTED, MESSAGE, RECEIPT and ERROR coming in.
A bare EOL is a heartbeat.
"""

from dataclasses import dataclass, field

from flowview.errors import FrameError

NULL = "\x00"
EOL = "\n"

SERVER_COMMANDS = {"CONNECTED", "MESSAGE", "RECEIPT", "ERROR"}

# header value escaping, STOMP 1.2 section "Value Encoding"
_ESCAPES = [("\\", "\\\\"), ("\r", "\\r"), ("\n", "\\n"), (":", "\\c")]


@dataclass
class StompFrame:
    command: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def is_heartbeat(self) -> bool:
        return self.command == ""


HEARTBEAT = StompFrame(command="")


def escape_header(value: str) -> str:
    for raw, escaped in _ESCAPES:
        value = value.replace(raw, escaped)
    return value


def unescape_header(value: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 >= len(value):
            raise FrameError("dangling escape in header value")
        nxt = value[i + 1]
        mapping = {"\\": "\\", "r": "\r", "n": "\n", "c": ":"}
        if nxt not in mapping:
            raise FrameError(f"undefined header escape: \\{nxt}")
        out.append(mapping[nxt])
        i += 2
    return "".join(out)


def encode_frame(command: str, headers: dict[str, str] | None = None, body: str = "") -> str:
    """Serialize a frame to its wire text (terminated by NULL)."""
    lines = [command]
    for key, value in (headers or {}).items():
        # STOMP 1.2: CONNECT headers are never escaped
        if command == "CONNECT":
            lines.append(f"{key}:{value}")
        else:
            lines.append(f"{escape_header(key)}:{escape_header(value)}")
    return EOL.join(lines) + EOL + EOL + body + NULL


def decode_frame(text: str) -> StompFrame:
    """Parse one frame from wire text.

    Raises:
        FrameError: the text is not a well-formed frame.
    """
    # heartbeats are bare EOLs (possibly CRLF)
    if text.strip("\r\n") == "":
        return HEARTBEAT

    text = text.lstrip("\r\n")
    if NULL not in text:
        raise FrameError("frame is not NULL-terminated")

    head, sep, body = text.partition("\n\n")
    if not sep:
        head, sep, body = text.partition("\r\n\r\n")
    if not sep:
        raise FrameError("frame has no header/body separator")

    lines = head.replace("\r\n", "\n").split("\n")
    command = lines[0].strip()
    if command not in SERVER_COMMANDS:
        raise FrameError(f"unexpected frame command: {command!r}")

    headers: dict[str, str] = {}
    for line in lines[1:]:
        if not line:
            continue
        key, colon, value = line.partition(":")
        if not colon:
            raise FrameError(f"malformed header line: {line!r}")
        key = unescape_header(key)
        # repeated headers: the first one wins
        headers.setdefault(key, unescape_header(value))

    if "content-length" in headers:
        try:
            length = int(headers["content-length"])
        except ValueError as e:
            raise FrameError("content-length is not an integer") from e
        encoded = body.encode("utf-8")
        if len(encoded) < length:
            raise FrameError("body shorter than content-length")
        body = encoded[:length].decode("utf-8", errors="replace")
    else:
        body = body.split(NULL, 1)[0]

    return StompFrame(command=command, headers=headers, body=body)


def negotiate_heartbeat(client: tuple[int, int], server_header: str | None) -> tuple[int, int]:
    """Work out (outgoing_ms, incoming_ms) from the CONNECTED heart-beat header.

    Zero on either side disables that direction.
    """
    if not server_header:
        return (0, 0)
    try:
        sx, sy = (int(part) for part in server_header.split(","))
    except ValueError:
        return (0, 0)
    cx, cy = client
    outgoing = 0 if cx == 0 or sy == 0 else max(cx, sy)
    incoming = 0 if cy == 0 or sx == 0 else max(cy, sx)
    return (outgoing, incoming)
