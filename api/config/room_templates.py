"""
Stock room photographs offered in the AI preview, by room category.

Products whose room is not listed fall back to the General set.
"""
from typing import Dict, List

DEFAULT_ROOM = "General"

ROOM_TEMPLATES: Dict[str, List[str]] = {
    "Living Room": [
        "https://images.unsplash.com/photo-1583847268964-b28dc8f51f92?q=80&w=1200",
        "https://images.unsplash.com/photo-1618221195710-dd6b41faaea6?q=80&w=1200",
        "https://images.unsplash.com/photo-1600210492486-724fe5c67fb0?q=80&w=1200",
        "https://images.unsplash.com/photo-1554995207-c18c203602cb?q=80&w=1200",
    ],
    "Bedroom": [
        "https://images.unsplash.com/photo-1616594111721-396b16601f08?q=80&w=1200",
        "https://images.unsplash.com/photo-1540518614846-7eba43376461?q=80&w=1200",
        "https://images.unsplash.com/photo-1522771739844-6a9f6d5f14af?q=80&w=1200",
        "https://images.unsplash.com/photo-1505691938895-1758d7eaa511?q=80&w=1200",
    ],
    "Dining Room": [
        "https://images.unsplash.com/photo-1617806118233-18e1db208fa0?q=80&w=1200",
        "https://images.unsplash.com/photo-1520699049698-cdf2f7105bc5?q=80&w=1200",
        "https://images.unsplash.com/photo-1556912177-f547c12dd0ee?q=80&w=1200",
        "https://images.unsplash.com/photo-1604014237800-1c9102c219da?q=80&w=1200",
    ],
    DEFAULT_ROOM: [
        "https://images.unsplash.com/photo-1493809842364-78817add7ffb?q=80&w=1200",
        "https://images.unsplash.com/photo-1484154218962-a197022b5858?q=80&w=1200",
        "https://images.unsplash.com/photo-1615529328331-f8917597711f?q=80&w=1200",
        "https://images.unsplash.com/photo-1513519247388-193ad513d746?q=80&w=1200",
    ],
}


def templates_for_room(room: str) -> List[str]:
    """Template URLs for a room category, or the General set"""
    return list(ROOM_TEMPLATES.get(room, ROOM_TEMPLATES[DEFAULT_ROOM]))
