"""
Staging session: the per-product state machine behind the AI room preview.

    SELECTING_ROOM --select_template/upload_file--> PLACING_MARKER
    PLACING_MARKER --back--> SELECTING_ROOM
    PLACING_MARKER --process (is_processing while in flight)--> SHOWING_RESULT
    SHOWING_RESULT --retry_position--> PLACING_MARKER

Failed compositions leave the session in PLACING_MARKER with a single
user-facing error message. Actions the current stage does not accept are
ignored and reported as False.
"""
import asyncio
import base64
import io
import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from PIL import Image, UnidentifiedImageError

from config.room_templates import templates_for_room
from core.config import settings
from core.exceptions import UPLOAD_FAILURE_MESSAGE, USER_FAILURE_MESSAGE, PreviewError, UploadReadError
from schemas.products import ProductSchema
from services import result_actions
from services.coordinate_mapper import ElementRect, Marker, make_marker, pointer_to_marker, transform_origin
from services.google_ai_service import GoogleAIStudioService, google_ai_service
from services.viewport import Pan, ViewportController

logger = logging.getLogger(__name__)


class StagingStage(str, Enum):
    """Workflow stages of a staging session"""

    SELECTING_ROOM = "selecting_room"
    PLACING_MARKER = "placing_marker"
    SHOWING_RESULT = "showing_result"


class StagingSession:
    """One AI room-preview attempt for one product"""

    def __init__(
        self,
        product: ProductSchema,
        composer: Optional[GoogleAIStudioService] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.product = product
        self.composer = composer or google_ai_service
        self.templates: List[str] = templates_for_room(product.room)

        self.stage = StagingStage.SELECTING_ROOM
        self.room_image: Optional[str] = None
        self.marker: Optional[Marker] = None
        self.result_image: Optional[str] = None
        self.is_processing = False
        self.error: Optional[str] = None
        self.viewport = ViewportController()
        self.closed = False
        self._inflight: Optional[asyncio.Future] = None
        self.last_accessed = datetime.now()

        logger.info(f"[{self.session_id[:8]}] Staging session opened for '{product.name}' ({product.room})")

    # ------------------------------------------------------------------
    # Room selection
    # ------------------------------------------------------------------

    def _accepts_room_selection(self) -> bool:
        return not self.closed and not self.is_processing and self.stage == StagingStage.SELECTING_ROOM

    def _set_room(self, image: str):
        self.room_image = image
        self.marker = None
        self.result_image = None
        self.error = None
        self.viewport.reset()
        self.stage = StagingStage.PLACING_MARKER

    def select_template(self, url: str) -> bool:
        """Use one of the stock room photos offered for this product's room."""
        if not self._accepts_room_selection():
            return False
        if url not in self.templates:
            logger.warning(f"[{self.session_id[:8]}] Rejected template not offered for {self.product.room}: {url}")
            return False

        self._set_room(url)
        logger.info(f"[{self.session_id[:8]}] Template selected: {url}")
        return True

    async def upload_file(self, file: Any) -> bool:
        """
        Read an uploaded room photo into a data URI and move to marker placement.

        `file` only needs an async `read()` (FastAPI's UploadFile fits). On any
        read or validation failure the session stays in SELECTING_ROOM.
        """
        if not self._accepts_room_selection():
            return False
        self.error = None

        try:
            data = await file.read()
            data_uri = self._to_data_uri(data)
        except UploadReadError as e:
            logger.warning(f"[{self.session_id[:8]}] Upload rejected: {e}")
            self.error = UPLOAD_FAILURE_MESSAGE
            return False
        except Exception as e:
            logger.error(f"[{self.session_id[:8]}] Upload read failed: {e}", exc_info=True)
            self.error = UPLOAD_FAILURE_MESSAGE
            return False

        # A template picked while reading is replaced (last write wins), but a
        # flow that has already moved on to processing or a result is not
        if self.closed or self.is_processing or self.stage == StagingStage.SHOWING_RESULT:
            logger.info(f"[{self.session_id[:8]}] Discarding upload that finished after the room was used")
            return False

        self._set_room(data_uri)
        logger.info(f"[{self.session_id[:8]}] Room photo uploaded ({len(data)} bytes)")
        return True

    @staticmethod
    def _to_data_uri(data: bytes) -> str:
        if not data:
            raise UploadReadError("Uploaded file is empty")
        if len(data) > settings.max_file_size:
            raise UploadReadError(f"Uploaded file is {len(data)} bytes, limit is {settings.max_file_size}")

        try:
            with Image.open(io.BytesIO(data)) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
            raise UploadReadError(f"Uploaded file is not a readable image: {e}") from e

        mime_type = Image.MIME.get(image_format or "", "")
        if mime_type not in settings.allowed_image_types:
            raise UploadReadError(f"Unsupported image type: {mime_type or image_format}")

        return f"data:{mime_type};base64,{base64.b64encode(data).decode()}"

    def back(self) -> bool:
        """Return to room selection, discarding the room image and marker."""
        if self.closed or self.is_processing or self.stage != StagingStage.PLACING_MARKER:
            return False
        self.room_image = None
        self.marker = None
        self.error = None
        self.stage = StagingStage.SELECTING_ROOM
        return True

    # ------------------------------------------------------------------
    # Marker placement
    # ------------------------------------------------------------------

    def place_marker(self, x: float, y: float) -> bool:
        """Place (or move) the marker, in percentages of the room image."""
        if self.closed or self.is_processing or self.stage != StagingStage.PLACING_MARKER or self.room_image is None:
            return False
        self.marker = make_marker(x, y)
        return True

    def place_marker_at_pointer(self, client_x: float, client_y: float, rect: ElementRect) -> bool:
        """Place the marker from a click over the rendered room image."""
        marker = pointer_to_marker(client_x, client_y, rect)
        return self.place_marker(marker.x, marker.y)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    async def process(self) -> bool:
        """
        Send room, product and marker to the generative service.

        Returns True when a result is shown. No-op (False) without a room and
        marker, outside PLACING_MARKER, or while a request is already in flight.
        """
        if self.closed or self.is_processing or self.stage != StagingStage.PLACING_MARKER:
            return False
        if self.room_image is None or self.marker is None:
            return False

        self.is_processing = True
        self.error = None
        self._inflight = asyncio.ensure_future(
            self.composer.compose(self.room_image, self.product.primary_image, self.product.name, self.marker)
        )

        try:
            result = await self._inflight
        except asyncio.CancelledError:
            if self.closed:
                logger.info(f"[{self.session_id[:8]}] Composition cancelled by close")
                return False
            raise
        except PreviewError as e:
            logger.warning(f"[{self.session_id[:8]}] AI staging failed: {type(e).__name__}: {e}")
            self.error = USER_FAILURE_MESSAGE
            return False
        except Exception as e:
            logger.error(f"[{self.session_id[:8]}] AI staging error: {e}", exc_info=True)
            self.error = USER_FAILURE_MESSAGE
            return False
        finally:
            self.is_processing = False
            self._inflight = None

        if self.closed:
            logger.info(f"[{self.session_id[:8]}] Discarding result for closed session")
            return False

        self.result_image = result
        self.viewport.reset()
        self.stage = StagingStage.SHOWING_RESULT
        logger.info(f"[{self.session_id[:8]}] Preview ready")
        return True

    def retry_position(self) -> bool:
        """Discard the result and marker, keep the room, and re-mark."""
        if self.closed or self.stage != StagingStage.SHOWING_RESULT:
            return False
        self.result_image = None
        self.marker = None
        self.error = None
        self.viewport.reset()
        self.stage = StagingStage.PLACING_MARKER
        return True

    # ------------------------------------------------------------------
    # Result view
    # ------------------------------------------------------------------

    def toggle_focus(self) -> Optional[bool]:
        if self.closed or self.stage != StagingStage.SHOWING_RESULT:
            return None
        return self.viewport.toggle_focus()

    def start_pan(self, client_x: float, client_y: float) -> bool:
        if self.closed or self.stage != StagingStage.SHOWING_RESULT:
            return False
        return self.viewport.start_drag(client_x, client_y) is not None

    def move_pan(self, client_x: float, client_y: float) -> Pan:
        return self.viewport.move_drag(client_x, client_y)

    def end_pan(self):
        self.viewport.end_drag()

    def save(self, download_dir: Optional[str] = None) -> Optional[result_actions.PreviewFile]:
        if self.result_image is None:
            return None
        return result_actions.save(self.result_image, self.product.handle, download_dir)

    async def share(self, target: Optional[result_actions.ShareTarget] = None) -> Optional[result_actions.ShareOutcome]:
        if self.result_image is None:
            return None
        return await result_actions.share(self.result_image, self.product.name, self.product.handle, target)

    def share_payload(self) -> Optional[result_actions.SharePayload]:
        if self.result_image is None:
            return None
        return result_actions.build_share_payload(self.result_image, self.product.name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self):
        """Discard the session; cancel any in-flight composition."""
        if self.closed:
            return
        self.closed = True
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self.viewport.reset()
        logger.info(f"[{self.session_id[:8]}] Staging session closed")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "product_id": self.product.product_id,
            "stage": self.stage,
            "room_image": self.room_image,
            "marker": self.marker.to_dict() if self.marker else None,
            "marker_style": self.marker.css_position() if self.marker else None,
            "result_image": self.result_image,
            "is_processing": self.is_processing,
            "error": self.error,
            "focused_view": self.viewport.focused,
            "pan": {"x": self.viewport.pan.x, "y": self.viewport.pan.y},
            "transform": self.viewport.transform(),
            "transform_origin": transform_origin(self.marker),
            "templates": self.templates,
        }
