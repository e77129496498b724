"""Decoded schedule instructions.

A schedule cell holds WARP instruction text such as

    push(F0: A -> B, #1)
    if has(F1) pull(F1: C -> B, #3)
    sleep

Only push and pull move a message across a link; everything else decodes to `Other`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

_TRANSFER_RE = re.compile(
    r"\b(?P<kind>push|pull)\s*\(\s*(?P<flow>[^\s:(),]+)\s*:\s*(?P<src>[^\s:(),]+)\s*->\s*(?P<snk>[^\s:(),]+)"
    r"\s*(?:,\s*#(?P<channel>\d+))?\s*\)"
)


@dataclass(frozen=True)
class Push:
    flow: str
    src: str
    snk: str
    channel: int | None = None


@dataclass(frozen=True)
class Pull:
    flow: str
    src: str
    snk: str
    channel: int | None = None


@dataclass(frozen=True)
class Other:
    text: str


Instruction = Union[Push, Pull, Other]
Transfer = Union[Push, Pull]


def decode_instructions(text: str) -> tuple[Instruction, ...]:
    """Decode every push/pull found in `text`; non-empty text without one is a single `Other`."""
    text = (text or "").strip()
    if not text:
        return ()
    decoded: list[Instruction] = []
    for match in _TRANSFER_RE.finditer(text):
        kind = Push if match.group("kind") == "push" else Pull
        channel = match.group("channel")
        decoded.append(
            kind(
                flow=match.group("flow"),
                src=match.group("src"),
                snk=match.group("snk"),
                channel=int(channel) if channel is not None else None,
            )
        )
    if not decoded:
        return (Other(text),)
    return tuple(decoded)


def is_transfer(instruction: Instruction) -> bool:
    return isinstance(instruction, (Push, Pull))
