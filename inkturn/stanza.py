"""Read one JSON stanza from a text stream.

The stanza is expected to end with a newline, but newlines inside it are
fine: lines are accumulated until the buffer parses as a complete JSON
object. Nothing is acted on before that point.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from inkturn.errors import FatalInputError


def read_stanza(stream: Iterable[str]) -> dict[str, Any]:
    buf = ""
    for line in stream:
        buf += line
        if not buf.endswith("\n"):
            buf += "\n"

        val = buf.strip()
        if val and not val.startswith("{"):
            raise FatalInputError("stream did not begin with an open brace")

        try:
            return json.loads(buf)
        except json.JSONDecodeError:
            continue

    raise FatalInputError("stream ended without valid JSON")
