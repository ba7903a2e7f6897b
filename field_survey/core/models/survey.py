"""
Survey record: a named point sequence with cached metrics.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .point import GeoPoint, new_point_id, now_ms
from .sequence import PointSequence


@dataclass
class Survey:
    """
    A field survey.

    Attributes:
        id: Unique identifier
        name: Human-readable name
        points: Ordered working boundary
        created: Creation time (ms since epoch)
        updated: Last modification time (ms since epoch)
        is_staking: Survey was captured in staking mode
        area: Cached area in square meters (refreshed on save)
        perimeter: Cached perimeter in meters (refreshed on save)
    """

    id: str = field(default_factory=new_point_id)
    name: str = "Untitled Survey"
    points: PointSequence = field(default_factory=PointSequence)
    created: int = field(default_factory=now_ms)
    updated: int = field(default_factory=now_ms)
    is_staking: bool = False
    area: Optional[float] = None
    perimeter: Optional[float] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Survey ID cannot be empty")
        self.id = str(self.id)

    def touch(self) -> None:
        self.updated = now_ms()

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize survey to dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "id": self.id,
            "name": self.name,
            "points": [p.to_dict() for p in self.points],
            "created": self.created,
            "updated": self.updated,
            "isStaking": self.is_staking,
            "area": self.area,
            "perimeter": self.perimeter,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Survey":
        """
        Create a Survey from a strict dictionary (as written by :meth:`to_dict`).

        Stored derived fields are kept verbatim.
        """
        points = [GeoPoint.from_dict(p) for p in data.get("points", [])]
        return cls(
            id=str(data["id"]),
            name=data.get("name", "Untitled Survey"),
            points=PointSequence(points, derive=False),
            created=int(data.get("created") or now_ms()),
            updated=int(data.get("updated") or now_ms()),
            is_staking=bool(data.get("isStaking", False)),
            area=data.get("area"),
            perimeter=data.get("perimeter"),
        )

    def __repr__(self) -> str:
        return f"Survey({self.id}, '{self.name}', {len(self.points)} points)"
