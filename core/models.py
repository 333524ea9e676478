from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

# Upstream record ids are short numeric or hex strings. Checked at the route
# boundary before an id is sent upstream.
RECORD_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"


@dataclass
class PlaceRef:
    name: str
    dimension: Optional[str] = None  # detail query only
    type: Optional[str] = None  # detail query only


@dataclass
class EpisodeRef:
    id: str
    name: str
    air_date: str = ""  # detail query only
    code: str = ""  # upstream field "episode", e.g. S01E01


@dataclass
class Character:
    id: str
    name: str
    status: str
    species: str
    type: str
    gender: str
    origin: PlaceRef
    location: PlaceRef
    image: str
    episodes: list[EpisodeRef] = field(default_factory=list)
    created: str = ""


@dataclass
class Launch:
    id: str
    mission_name: str
    launch_date_utc: Optional[str]
    launch_success: Optional[bool]  # None = unknown / upcoming
    rocket_name: str
    mission_patch_small: Optional[str] = None
    # Detail query only
    rocket_type: Optional[str] = None
    launch_site: Optional[str] = None
    details: Optional[str] = None
    mission_patch: Optional[str] = None
    article_link: Optional[str] = None
    video_link: Optional[str] = None


@dataclass
class ListPage(Generic[T]):
    """One fetched page of a dataset. Never merged with another page.

    total_pages is None when the upstream source gives no authoritative total.
    """

    items: list[T]
    page: int
    total_pages: Optional[int] = None

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        if self.total_pages is None:
            return True
        return self.page < self.total_pages
