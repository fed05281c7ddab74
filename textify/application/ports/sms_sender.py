from typing import Protocol


class SMSSender(Protocol):
    def send(self, body: str, from_: str, to: str) -> str:
        ...
