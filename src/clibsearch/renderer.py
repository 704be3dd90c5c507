from __future__ import annotations

import json
from typing import Any, Dict, List, TextIO

from .logger import Colors
from .registry import PackageRecord


class TextRenderer:
    HIGHLIGHT = Colors.CYAN
    TEXT = Colors.DARK_GRAY

    def __init__(self, stream: TextIO, color: bool = True) -> None:
        self.stream = stream
        self.color = color

    def _paint(self, text: str, color: str) -> str:
        if not self.color:
            return text
        return f"{color}{text}{Colors.RESET}"

    def begin(self) -> None:
        self.stream.write("\n")

    def add(self, pkg: PackageRecord) -> None:
        data = pkg.to_dict()
        self.stream.write(f"  {self._paint(data['repo'], self.HIGHLIGHT)}\n")
        self.stream.write(f"  url: {self._paint(data['href'], self.TEXT)}\n")
        self.stream.write(f"  desc: {self._paint(data['description'], self.TEXT)}\n")
        self.stream.write("\n")

    def finish(self) -> None:
        self.stream.flush()


class JsonRenderer:
    """Collects matches and writes them as one pretty-printed JSON array."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.items: List[Dict[str, Any]] = []

    def begin(self) -> None:
        self.items = []

    def add(self, pkg: PackageRecord) -> None:
        self.items.append(pkg.to_dict())

    def finish(self) -> None:
        self.stream.write(json.dumps(self.items, indent=4, ensure_ascii=False))
        self.stream.write("\n")
        self.stream.flush()


def make_renderer(options, stream: TextIO):
    if options.json:
        return JsonRenderer(stream)
    return TextRenderer(stream, color=options.color)
