from typing import Iterable, Mapping, Optional, Protocol, Tuple, Union

from didledger.config import Settings, settings as default_settings


class IdentityResolver(Protocol):
    def resolve(self, identity: Union[bytes, str]) -> str:
        ...


class MarkerIdentityResolver:
    """Attributes a caller to an organization by searching its identity bytes for known markers.

    Markers are checked in the order given; the first one found wins. Callers that match
    no marker are attributed to `unknown_label`.
    """

    def __init__(self, markers: Union[Mapping[str, str], Iterable[Tuple[str, str]]], unknown_label: str = "unknown"):
        items = markers.items() if isinstance(markers, Mapping) else markers
        self._markers = tuple((marker.encode("utf-8"), label) for marker, label in items if marker)
        self.unknown_label = unknown_label

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "MarkerIdentityResolver":
        settings = settings or default_settings
        return cls(
            [(org.msp_id, org.name) for org in settings.organizations],
            unknown_label=settings.unknown_organization,
        )

    def resolve(self, identity: Union[bytes, str, None]) -> str:
        if not identity:
            return self.unknown_label
        if isinstance(identity, str):
            identity = identity.encode("utf-8")
        for marker, label in self._markers:
            if marker in identity:
                return label
        return self.unknown_label
