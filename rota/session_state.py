"""Privilege flag persisted locally across runs.

This is a UI mode switch, not a security control.
"""

from __future__ import annotations

import json
from pathlib import Path

from .config import RotaConfig


class SessionState:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.privileged = False
        self.load()

    def load(self) -> None:
        if not self.path.exists():
            self.privileged = False
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            print(f"[WARN] Ignoring unreadable session state: {self.path}")
            data = {}
        self.privileged = bool(data.get("privileged", False)) if isinstance(data, dict) else False

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"privileged": self.privileged}), encoding="utf-8")

    def login(self, password: str, cfg: RotaConfig) -> bool:
        if password != cfg.admin_password:
            return False
        self.privileged = True
        self.save()
        return True

    def logout(self) -> None:
        self.privileged = False
        self.save()
