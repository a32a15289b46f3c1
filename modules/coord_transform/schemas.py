from typing import Literal, Sequence, Tuple
from pydantic import BaseModel, ConfigDict, Field

CoordType = Literal["wgs84", "gcj02", "bd09"]


class Coordinate(BaseModel):
    """
    坐标点（经纬度，十进制度）
    不携带坐标系标记，由调用方根据所用转换函数区分 wgs84 / gcj02 / bd09
    """

    model_config = ConfigDict(frozen=True)

    lng: float = Field(..., description="经度")
    lat: float = Field(..., description="纬度")

    @classmethod
    def from_pair(cls, pair: Sequence[float]) -> "Coordinate":
        return cls(lng=float(pair[0]), lat=float(pair[1]))

    def as_tuple(self) -> Tuple[float, float]:
        return self.lng, self.lat
