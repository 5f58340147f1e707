from __future__ import annotations
from PyQt6.QtCore import QObject, pyqtSignal


def hex_preview(data: bytes, limit: int = 6) -> str:
    """First ``limit`` bytes in hex, then the last byte and total length."""
    head = " ".join(f"{b:02X}" for b in data[:limit])
    if len(data) <= limit:
        return head
    return f"{head} .. {data[-1]:02X} ({len(data)} bytes)"


class AppLogger(QObject):
    message_logged = pyqtSignal(str, str)  # category, message

    def log(self, category: str, message: str) -> None:
        print(f"[{category}] {message}", flush=True)
        self.message_logged.emit(category, message)

    def sysex(self, message: str) -> None:
        self.log("SYSEX", message)

    def codec(self, message: str) -> None:
        self.log("CODEC", message)

    def generate(self, message: str) -> None:
        self.log("GENERATE", message)

    def general(self, message: str) -> None:
        self.log("GENERAL", message)
