from abc import ABC, abstractmethod
from typing import Iterable

from textual.widget import Widget

from engram.editor.engine import Engine


class View(ABC):
    name: str

    @abstractmethod
    def render(self, engine: Engine) -> Iterable[Widget]: ...
