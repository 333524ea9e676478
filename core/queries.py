"""
core/queries.py -- GraphQL query catalog and response parsers.

Four query documents for two unrelated public datasets:
  - characters (Rick and Morty API): page-based list with a total page count,
    plus fetch-by-id with extended origin/location/episode fields.
  - launches (SpaceX API): limit/offset list with no total count, plus
    fetch-by-id with site, rocket type, details, and links.

The field sets are upstream contracts. The parsers below read exactly these
fields and map them onto the dataclasses in core/models.py. A response that
does not match the contract raises ValueError; the caller decides how to
surface it.

Layer rule: no imports from api/, web/, gate/, or cache/.
"""

from typing import Any, Optional

from core.models import Character, EpisodeRef, Launch, ListPage, PlaceRef

GET_CHARACTERS = """
query GetCharacters($page: Int!) {
  characters(page: $page) {
    info {
      count
      pages
      next
      prev
    }
    results {
      id
      name
      status
      species
      type
      gender
      origin {
        name
      }
      location {
        name
      }
      image
      episode {
        id
        name
      }
      created
    }
  }
}
"""

GET_CHARACTER_BY_ID = """
query GetCharacterById($id: ID!) {
  character(id: $id) {
    id
    name
    status
    species
    type
    gender
    origin {
      name
      dimension
      type
    }
    location {
      name
      dimension
      type
    }
    image
    episode {
      id
      name
      air_date
      episode
    }
    created
  }
}
"""

GET_LAUNCHES = """
query GetLaunches($limit: Int!, $offset: Int!) {
  launches(limit: $limit, offset: $offset) {
    id
    mission_name
    launch_date_utc
    launch_success
    rocket {
      rocket_name
    }
    links {
      mission_patch_small
    }
  }
}
"""

GET_LAUNCH_BY_ID = """
query GetLaunchById($id: ID!) {
  launch(id: $id) {
    id
    mission_name
    launch_date_utc
    launch_success
    details
    rocket {
      rocket_name
      rocket_type
    }
    launch_site {
      site_name_long
    }
    links {
      mission_patch
      article_link
      video_link
    }
  }
}
"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _field(obj: Any, key: str) -> Any:
    if not isinstance(obj, dict) or key not in obj:
        raise ValueError(f"Response is missing field '{key}'.")
    return obj[key]


def _text(obj: dict, key: str) -> str:
    value = obj.get(key)
    return "" if value is None else str(value)


def _nested(obj: dict, key: str) -> dict:
    value = obj.get(key)
    return value if isinstance(value, dict) else {}


def _place(raw: Any) -> PlaceRef:
    raw = raw if isinstance(raw, dict) else {}
    return PlaceRef(
        name=_text(raw, "name") or "unknown",
        dimension=raw.get("dimension"),
        type=raw.get("type"),
    )


def _character(raw: Any) -> Character:
    if not isinstance(raw, dict):
        raise ValueError("Character record is not an object.")
    episodes = [
        EpisodeRef(
            id=_text(ep, "id"),
            name=_text(ep, "name"),
            air_date=_text(ep, "air_date"),
            code=_text(ep, "episode"),
        )
        for ep in (raw.get("episode") or [])
        if isinstance(ep, dict)
    ]
    return Character(
        id=str(_field(raw, "id")),
        name=_text(raw, "name"),
        status=_text(raw, "status"),
        species=_text(raw, "species"),
        type=_text(raw, "type"),
        gender=_text(raw, "gender"),
        origin=_place(raw.get("origin")),
        location=_place(raw.get("location")),
        image=_text(raw, "image"),
        episodes=episodes,
        created=_text(raw, "created"),
    )


def _launch(raw: Any) -> Launch:
    if not isinstance(raw, dict):
        raise ValueError("Launch record is not an object.")
    rocket = _nested(raw, "rocket")
    links = _nested(raw, "links")
    site = _nested(raw, "launch_site")
    return Launch(
        id=str(_field(raw, "id")),
        mission_name=_text(raw, "mission_name"),
        launch_date_utc=raw.get("launch_date_utc"),
        launch_success=raw.get("launch_success"),
        rocket_name=_text(rocket, "rocket_name"),
        mission_patch_small=links.get("mission_patch_small"),
        rocket_type=rocket.get("rocket_type"),
        launch_site=site.get("site_name_long"),
        details=raw.get("details"),
        mission_patch=links.get("mission_patch"),
        article_link=links.get("article_link"),
        video_link=links.get("video_link"),
    )


# ---------------------------------------------------------------------------
# Variables builders
# ---------------------------------------------------------------------------


def character_page_variables(page: int) -> dict[str, Any]:
    return {"page": page}


def launch_page_variables(page: int, page_size: int) -> dict[str, Any]:
    """Translate a 1-based page number into the upstream limit/offset pair."""
    return {"limit": page_size, "offset": (page - 1) * page_size}


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def parse_character_page(data: dict, page: int) -> ListPage[Character]:
    """Build a ListPage from a GetCharacters response.

    A page past the end comes back as an empty results list (or a null
    characters object); both produce an empty page, not an error.
    """
    payload = _field(data, "characters") or {}
    info = payload.get("info") or {}
    results = payload.get("results") or []
    pages = info.get("pages")
    return ListPage(
        items=[_character(r) for r in results],
        page=page,
        total_pages=max(1, int(pages)) if pages else 1,
    )


def parse_character(data: dict) -> Optional[Character]:
    """Return the Character from a GetCharacterById response, None if not found."""
    raw = _field(data, "character")
    return None if raw is None else _character(raw)


def parse_launch_page(data: dict, page: int) -> ListPage[Launch]:
    results = _field(data, "launches") or []
    return ListPage(items=[_launch(r) for r in results], page=page, total_pages=None)


def parse_launch(data: dict) -> Optional[Launch]:
    raw = _field(data, "launch")
    return None if raw is None else _launch(raw)
