from typing import Protocol


class CodeWrapper(Protocol):
    def __call__(self, code: str) -> str: ...
