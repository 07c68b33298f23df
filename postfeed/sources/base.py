from enum import Enum
from typing import TypedDict, Optional, List, Union


class EntryKind(str, Enum):
    LOCAL_STANDALONE = "local_standalone"
    LOCAL_SERIES = "local_series"
    EXTERNAL_STANDALONE = "external_standalone"
    EXTERNAL_SERIES = "external_series"


class SeriesPart(TypedDict, total=False):
    slug: str
    title: str
    published: Optional[str]   # ISO date, None for drafts
    output: str                # compiled HTML, detail view only


class StandalonePost(TypedDict, total=False):
    kind: str
    slug: str
    title: str
    description: str
    published: Optional[str]
    output: str


class Series(TypedDict, total=False):
    kind: str
    slug: str
    title: str
    description: str
    published: Optional[str]   # first part's date
    parts: List[SeriesPart]


class ExternalStandalonePost(TypedDict, total=False):
    kind: str
    title: str
    description: str
    published: Optional[str]
    source: str                # platform name, e.g. "Dev.to"
    url: str


class ExternalSeriesPart(TypedDict, total=False):
    title: str
    url: str
    published: Optional[str]


class ExternalSeries(TypedDict, total=False):
    kind: str
    title: str
    description: str
    source: str
    parts: List[ExternalSeriesPart]


RawEntry = Union[StandalonePost, Series, ExternalStandalonePost, ExternalSeries]
