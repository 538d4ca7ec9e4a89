"""
Pydantic schemas for AI room preview endpoints
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from services.staging_session import StagingStage


class CreateSessionRequest(BaseModel):
    """Open the AI preview for a product"""
    product_id: int


class SelectTemplateRequest(BaseModel):
    url: str


class ElementRectSchema(BaseModel):
    """Bounding rect of the rendered room image, in client pixels"""
    left: float
    top: float
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class PlaceMarkerRequest(BaseModel):
    """Click over the rendered room image"""
    client_x: float
    client_y: float
    rect: ElementRectSchema

    class Config:
        json_schema_extra = {
            "example": {
                "client_x": 412.0,
                "client_y": 288.5,
                "rect": {"left": 100.0, "top": 80.0, "width": 800.0, "height": 600.0},
            }
        }


class PointerRequest(BaseModel):
    """Pointer position for pan gestures"""
    client_x: float
    client_y: float


class MarkerSchema(BaseModel):
    x: float
    y: float


class PanSchema(BaseModel):
    x: float = 0.0
    y: float = 0.0


class SessionStateResponse(BaseModel):
    """Snapshot of a staging session"""
    session_id: str
    product_id: int
    stage: StagingStage
    room_image: Optional[str] = None
    marker: Optional[MarkerSchema] = None
    marker_style: Optional[Dict[str, str]] = None
    result_image: Optional[str] = None
    is_processing: bool = False
    error: Optional[str] = None
    focused_view: bool = False
    pan: PanSchema = PanSchema()
    transform: str
    transform_origin: str
    templates: List[str] = []


class SharePayloadResponse(BaseModel):
    """Payload for the client's native share surface"""
    title: str
    text: str
    filename: str
    mime_type: str
    data: str  # base64 PNG
