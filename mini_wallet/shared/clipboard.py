"""Clipboard access for copying the wallet address from the terminal."""

from __future__ import annotations

import base64
import logging
import os
import sys
from dataclasses import dataclass
from typing import TextIO

import pyperclip

logger = logging.getLogger(__name__)


@dataclass
class CopyResult:
    success: bool
    method: str | None = None


def _osc52_sequence(text: str) -> str:
    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    sequence = f"\x1b]52;c;{payload}\x07"
    # tmux only forwards OSC sequences wrapped in a DCS passthrough.
    if os.getenv("TMUX"):
        sequence = f"\x1bPtmux;\x1b{sequence}\x1b\\"
    return sequence


def copy_with_osc52(text: str, stream: TextIO | None = None) -> bool:
    if not text:
        return False

    output = stream or sys.__stdout__ or sys.stdout
    try:
        output.write(_osc52_sequence(text))
        output.flush()
        return True
    except (OSError, ValueError) as e:
        logger.debug("OSC 52 copy failed: %s", e)
        return False


def copy_with_pyperclip(text: str) -> bool:
    if not text:
        return False

    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.debug("pyperclip copy failed: %s", e)
        return False
    return True


def copy_text(text: str, prefer_osc52: bool = False) -> CopyResult:
    methods = [("pyperclip", copy_with_pyperclip), ("osc52", copy_with_osc52)]
    if prefer_osc52:
        methods.reverse()

    for name, method in methods:
        if method(text):
            return CopyResult(success=True, method=name)

    return CopyResult(success=False)
