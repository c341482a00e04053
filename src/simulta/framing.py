"""Output framing and prefixing.

Turns a child's raw byte stream into display units:

    bytes -> decode_chunks -> frame_lines / frame_chunks -> decorate -> encode_units

Every unit ends with RESET_CODE followed by a newline, so styling a child
leaves unterminated never bleeds into the next unit.
"""

from __future__ import annotations

import codecs
import re
from collections.abc import AsyncIterable, AsyncIterator, Callable, Sequence

from .config import FramingPolicy

__all__ = [
    "RESET_CODE",
    "SEPARATOR",
    "decode_chunks",
    "frame_lines",
    "frame_chunks",
    "framer_for",
    "decorate",
    "encode_units",
    "resolve_prefixes",
]

RESET_CODE = "\x1b[0m"
SEPARATOR = " | "

_LINE_BREAK = re.compile(r"\r?\n")

UnitTransform = Callable[[AsyncIterable[str]], AsyncIterator[str]]


async def decode_chunks(
    chunks: AsyncIterable[bytes],
    encoding: str = "utf-8",
) -> AsyncIterator[str]:
    """Decode byte chunks incrementally.

    A multi-byte character split across two reads is held back until it is
    complete; invalid sequences are replaced.
    """
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    async for chunk in chunks:
        text = decoder.decode(chunk)
        if text:
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


async def frame_lines(texts: AsyncIterable[str]) -> AsyncIterator[str]:
    """Strict line framing: one unit per source line.

    Buffers across chunk boundaries until ``\\n`` is seen and strips a
    trailing ``\\r``. Empty source lines are kept. Unterminated text at end
    of stream is flushed as a final line.
    """
    pending: list[str] = []
    async for text in texts:
        *lines, tail = text.split("\n")
        for line in lines:
            pending.append(line)
            yield _terminate("".join(pending).removesuffix("\r"))
            pending.clear()
        if tail:
            pending.append(tail)
    if pending:
        yield _terminate("".join(pending).removesuffix("\r"))


async def frame_chunks(texts: AsyncIterable[str]) -> AsyncIterator[str]:
    """Chunk framing: one unit per decoded chunk.

    Each chunk is split on line breaks and empty fragments are dropped;
    the remaining fragments are newline-joined into a single unit. A line
    split across two chunks comes out as two units.
    """
    async for text in texts:
        fragments = [f for f in _LINE_BREAK.split(text) if f]
        if fragments:
            yield _terminate("\n".join(fragments))


def framer_for(policy: FramingPolicy) -> UnitTransform:
    if policy is FramingPolicy.CHUNK:
        return frame_chunks
    return frame_lines


def _terminate(text: str) -> str:
    return f"{text}{RESET_CODE}\n"


def decorate(prefix: str | None) -> UnitTransform:
    """Build a transform that labels framed units with ``prefix``.

    The first line of a unit gets ``prefix + SEPARATOR``; continuation
    lines of the same unit get blanks of the same width, so they line up
    under the first line's text. With no prefix, units pass through.

    Args:
        prefix: Already padded prefix, or None when prefixing is disabled

    Returns:
        Async iterator transform over framed units
    """

    async def transform(units: AsyncIterable[str]) -> AsyncIterator[str]:
        if prefix is None:
            async for unit in units:
                yield unit
            return

        continuation = " " * len(prefix)
        async for unit in units:
            lines = unit.removesuffix("\n").split("\n")
            decorated = [f"{prefix}{SEPARATOR}{lines[0]}"]
            decorated.extend(f"{continuation}{SEPARATOR}{line}" for line in lines[1:])
            yield "\n".join(decorated) + "\n"

    return transform


async def encode_units(
    units: AsyncIterable[str],
    encoding: str = "utf-8",
) -> AsyncIterator[bytes]:
    async for unit in units:
        yield unit.encode(encoding)


def resolve_prefixes(
    count: int,
    names: Sequence[str] | None = None,
    enabled: bool = False,
) -> list[str | None]:
    """Compute the display prefix of every command in a run.

    Uses the command's name when names are given, its zero-based index
    otherwise. All prefixes are padded to the widest one.

    Args:
        count: Number of commands
        names: Optional names, one per command
        enabled: Whether prefixing is on

    Returns:
        One prefix per command, all None when prefixing is off
    """
    if not enabled:
        return [None] * count

    if names is not None and len(names) != count:
        raise ValueError(f"{len(names)} names were given for {count} commands")

    values = list(names) if names is not None else [str(i) for i in range(count)]
    bracketed = [f"[{value}]" for value in values]
    width = max((len(b) for b in bracketed), default=0)
    return [b.ljust(width) for b in bracketed]
