from pydantic import BaseModel, ConfigDict, Field

from tvloo import __version__


ADDON_ID = "com.tvloo.iptv"
ADDON_NAME = "TVLoo"
ADDON_DESCRIPTION = "IPTV addon for Stremio - Play M3U playlists with EPG support"
ADDON_LOGO = "https://upload.wikimedia.org/wikipedia/commons/thumb/5/5a/TV_icon_2.svg/200px-TV_icon_2.svg.png"
CATALOG_ID = "tvloo-channels"
CONTENT_TYPE = "tv"


class StremioModel(BaseModel):
    """Base for payloads serialized with Stremio's camelCase keys"""
    model_config = ConfigDict(populate_by_name=True)


class CatalogExtra(StremioModel):
    name: str
    is_required: bool = Field(False, alias="isRequired")


class CatalogDefinition(StremioModel):
    type: str = CONTENT_TYPE
    id: str = CATALOG_ID
    name: str
    extra: list[CatalogExtra] = Field(default_factory=list)


class Manifest(StremioModel):
    """Addon manifest advertised to the host"""
    id: str = ADDON_ID
    version: str = __version__
    name: str = ADDON_NAME
    description: str = ADDON_DESCRIPTION
    logo: str = ADDON_LOGO
    resources: list[str] = Field(default_factory=lambda: ["catalog", "meta", "stream"])
    types: list[str] = Field(default_factory=lambda: [CONTENT_TYPE])
    catalogs: list[CatalogDefinition]
    id_prefixes: list[str] = Field(alias="idPrefixes")


class MetaPreview(StremioModel):
    """Channel as shown in catalogs and detail pages"""
    id: str
    type: str = CONTENT_TYPE
    name: str
    poster: str
    poster_shape: str = Field("square", alias="posterShape")
    background: str
    logo: str
    description: str


class BehaviorHints(StremioModel):
    not_web_ready: bool = Field(True, alias="notWebReady")


class Stream(StremioModel):
    name: str = ADDON_NAME
    title: str
    url: str
    behavior_hints: BehaviorHints = Field(default_factory=BehaviorHints, alias="behaviorHints")


class CatalogResponse(BaseModel):
    metas: list[MetaPreview] = Field(default_factory=list)


class MetaResponse(BaseModel):
    meta: MetaPreview | None = None


class StreamResponse(BaseModel):
    streams: list[Stream] = Field(default_factory=list)


class CacheStatsResponse(BaseModel):
    """Snapshot of one source cache"""
    has_cached_data: bool
    item_count: int = Field(..., description="Channels in the playlist or channel keys in the guide")
    cache_age: float | None = Field(None, description="Seconds since the last successful refresh")
    cache_expired: bool


class HealthResponse(BaseModel):
    status: str
    version: str
    playlist: CacheStatsResponse
    guide: CacheStatsResponse | None = None
