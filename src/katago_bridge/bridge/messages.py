from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class TextMessage:
    content: str


@dataclass(frozen=True)
class CloseMessage:
    code: Optional[int] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class OtherMessage:
    kind: str
    data: object = None


Message = Union[TextMessage, CloseMessage, OtherMessage]
