"""CSS-selector access to fetched HTML."""

from __future__ import annotations

from typing import List, Optional, Protocol

from bs4 import BeautifulSoup
from bs4.element import Tag


class ElementHandle(Protocol):
    def attribute(self, name: str) -> Optional[str]: ...

    def select_one(self, selector: str) -> Optional["ElementHandle"]: ...


class DocumentHandle(Protocol):
    def select(self, selector: str) -> List[ElementHandle]: ...

    def select_one(self, selector: str) -> Optional[ElementHandle]: ...


class PageParser(Protocol):
    def parse(self, html: str) -> DocumentHandle: ...


class SoupElement:
    __slots__ = ("tag",)

    def __init__(self, tag: Tag) -> None:
        self.tag = tag

    def attribute(self, name: str) -> Optional[str]:
        v = self.tag.get(name)
        if v is None:
            return None
        # bs4 returns multi-valued attributes (class, rel) as lists
        if isinstance(v, list):
            return " ".join(v)
        return str(v)

    def select_one(self, selector: str) -> Optional["SoupElement"]:
        node = self.tag.select_one(selector)
        return SoupElement(node) if node is not None else None

    def select(self, selector: str) -> List["SoupElement"]:
        return [SoupElement(n) for n in self.tag.select(selector)]


class SoupDocument(SoupElement):
    pass


class SoupParser:
    def __init__(self, features: str = "html.parser") -> None:
        self.features = features

    def parse(self, html: str) -> SoupDocument:
        return SoupDocument(BeautifulSoup(html or "", self.features))
