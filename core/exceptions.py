from typing import Any, Dict, Optional

class BizError(Exception):
    """
    通用业务异常
    """
    def __init__(
        self,
        message: str,
        code: int = 400,
        payload: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.payload = payload or {}
        super().__init__(self.message)

class UnsupportedCoordTypeError(BizError):
    """
    不支持的坐标系名称 (仅支持 wgs84 / gcj02 / bd09)
    """
    def __init__(self, coord_type: Any):
        super().__init__(
            message=f"coord_type must be wgs84, gcj02 or bd09, got {coord_type!r}",
            code=400,
            payload={"coord_type": str(coord_type)}
        )
