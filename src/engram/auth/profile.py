"""Signed-in user profile, read from the work config."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Profile:
    name: str = ""
    email: str = ""
    avatar: Optional[str] = None
    verified: bool = False

    @classmethod
    def from_config(cls, cfg: Optional[dict]) -> "Profile":
        section = (cfg or {}).get("profile") or {}
        return cls(
            name=str(section.get("name") or ""),
            email=str(section.get("email") or ""),
            avatar=section.get("avatar"),
            verified=bool(section.get("verified", False)),
        )

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.email:
            return self.email.split("@", 1)[0]
        return "Anonymous"

    @property
    def initials(self) -> str:
        parts = self.display_name.replace(".", " ").replace("_", " ").split()
        if not parts:
            return "?"
        if len(parts) == 1:
            return parts[0][:2].upper()
        return (parts[0][0] + parts[-1][0]).upper()
