import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from core.exceptions import UnsupportedCoordTypeError

from .schemas import Coordinate

logger = logging.getLogger(__name__)

# 克拉索夫斯基椭球参数
A = 6378245.0  # 长半轴
EE = 0.00669342162296594323  # 偏心率平方

X_PI = math.pi * 3000.0 / 180.0

# BD-09 相对 GCJ-02 的固定平移
BD_LNG_OFFSET = 0.0065
BD_LAT_OFFSET = 0.006

# GCJ-02 -> WGS84 迭代反算：最大修正次数、收敛阈值（度，约1米）
MAX_ITER = 10
THRESHOLD = 0.00001

COORD_TYPES = ("wgs84", "gcj02", "bd09")

Converter = Callable[[float, float], Coordinate]


def _sin(x):
    # math.sin 对 inf 抛 ValueError，这里与浮点语义保持一致返回 nan
    return math.nan if math.isinf(x) else math.sin(x)


def _cos(x):
    return math.nan if math.isinf(x) else math.cos(x)


def out_of_china(lng, lat):
    """
    判断坐标点是否在中国范围（粗略矩形）之外
    """
    return lng < 72.004 or lng > 137.8347 or lat < 0.8293 or lat > 55.8271


def transform_lat(lng, lat):
    """
    计算纬度偏移量的辅助函数
    """
    ret = -100.0 + 2.0 * lng + 3.0 * lat + 0.2 * lat * lat + 0.1 * lng * lat + 0.2 * math.sqrt(abs(lng))
    ret += (20.0 * _sin(6.0 * lng * math.pi) + 20.0 * _sin(2.0 * lng * math.pi)) * 2.0 / 3.0
    ret += (20.0 * _sin(lat * math.pi) + 40.0 * _sin(lat / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (160.0 * _sin(lat / 12.0 * math.pi) + 320 * _sin(lat * math.pi / 30.0)) * 2.0 / 3.0
    return ret


def transform_lng(lng, lat):
    """
    计算经度偏移量的辅助函数
    """
    ret = 300.0 + lng + 2.0 * lat + 0.1 * lng * lng + 0.1 * lng * lat + 0.1 * math.sqrt(abs(lng))
    ret += (20.0 * _sin(6.0 * lng * math.pi) + 20.0 * _sin(2.0 * lng * math.pi)) * 2.0 / 3.0
    ret += (20.0 * _sin(lng * math.pi) + 40.0 * _sin(lng / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (150.0 * _sin(lng / 12.0 * math.pi) + 300.0 * _sin(lng * math.pi / 30.0)) * 2.0 / 3.0
    return ret


def _wgs84_to_gcj02(lng: float, lat: float) -> Tuple[float, float]:
    if out_of_china(lng, lat):
        # 若坐标点不在中国范围内，直接返回原坐标
        return lng, lat

    # 计算转换偏移量
    dlat = transform_lat(lng - 105.0, lat - 35.0)
    dlng = transform_lng(lng - 105.0, lat - 35.0)

    # 将纬度转换为弧度
    radlat = lat / 180.0 * math.pi
    magic = _sin(radlat)
    magic = 1 - EE * magic * magic
    sqrtmagic = math.sqrt(magic)

    # 计算经度和纬度的偏移量
    dlat = (dlat * 180.0) / ((A * (1 - EE)) / (magic * sqrtmagic) * math.pi)
    dlng = (dlng * 180.0) / (A / sqrtmagic * _cos(radlat) * math.pi)

    return lng + dlng, lat + dlat


def wgs84_to_gcj02(lng: float, lat: float) -> Coordinate:
    """
    将WGS84坐标系转换为GCJ-02坐标系（火星坐标系）
    :param lng: WGS84坐标系的经度
    :param lat: WGS84坐标系的纬度
    :return: 转换后的GCJ-02坐标
    """
    gcj_lng, gcj_lat = _wgs84_to_gcj02(lng, lat)
    return Coordinate(lng=gcj_lng, lat=gcj_lat)


def gcj02_to_bd09(lng: float, lat: float) -> Coordinate:
    """
    将GCJ-02坐标系转换为BD-09坐标系（百度坐标系），不做境外判断
    """
    z = math.sqrt(lng * lng + lat * lat) + 0.00002 * _sin(lat * X_PI)
    theta = math.atan2(lat, lng) + 0.000003 * _cos(lng * X_PI)
    return Coordinate(
        lng=z * _cos(theta) + BD_LNG_OFFSET,
        lat=z * _sin(theta) + BD_LAT_OFFSET,
    )


def bd09_to_gcj02(lng: float, lat: float) -> Coordinate:
    """
    将BD-09坐标系转换为GCJ-02坐标系

    近似解析反算，与 gcj02_to_bd09 往返存在微小残差，公式保持原样不做修正。
    """
    x = lng - BD_LNG_OFFSET
    y = lat - BD_LAT_OFFSET
    z = math.sqrt(x * x + y * y) - 0.00002 * _sin(y * X_PI)
    theta = math.atan2(y, x) - 0.000003 * _cos(x * X_PI)
    return Coordinate(lng=z * _cos(theta), lat=z * _sin(theta))


def gcj02_to_wgs84(
    lng: float,
    lat: float,
    max_iter: int = MAX_ITER,
    threshold: float = THRESHOLD,
) -> Coordinate:
    """
    将GCJ-02坐标系反推为WGS84坐标系（迭代法）。

    以镜像法估算初值，随后按残差逐次修正；达到阈值或最大迭代次数即停止，
    不收敛时返回最后一次的估算值，不抛出异常。

    :param lng: GCJ-02 坐标系的经度
    :param lat: GCJ-02 坐标系的纬度
    :param max_iter: 最大迭代次数，默认 10
    :param threshold: 收敛阈值（度），默认 0.00001
    :return: 反推后的 WGS84 坐标
    """
    if out_of_china(lng, lat):
        return Coordinate(lng=lng, lat=lat)

    # 初始估算（镜像法）
    tmp_lng, tmp_lat = _wgs84_to_gcj02(lng, lat)
    guess_lng = lng * 2 - tmp_lng
    guess_lat = lat * 2 - tmp_lat

    for _ in range(max_iter):
        calc_lng, calc_lat = _wgs84_to_gcj02(guess_lng, guess_lat)
        d_lng = calc_lng - lng
        d_lat = calc_lat - lat
        if abs(d_lng) < threshold and abs(d_lat) < threshold:
            break
        guess_lng -= d_lng
        guess_lat -= d_lat
    else:
        logger.debug(
            "gcj02_to_wgs84 not converged after %d steps for (%s, %s)",
            max_iter, lng, lat,
        )

    return Coordinate(lng=guess_lng, lat=guess_lat)


def wgs84_to_bd09(lng: float, lat: float) -> Coordinate:
    """WGS84 -> GCJ-02 -> BD-09"""
    gcj = wgs84_to_gcj02(lng, lat)
    return gcj02_to_bd09(gcj.lng, gcj.lat)


def bd09_to_wgs84(lng: float, lat: float) -> Coordinate:
    """BD-09 -> GCJ-02 -> WGS84"""
    gcj = bd09_to_gcj02(lng, lat)
    return gcj02_to_wgs84(gcj.lng, gcj.lat)


def _point_lng_lat(point: Any) -> Tuple[float, float]:
    if isinstance(point, Mapping):
        return point["lng"], point["lat"]
    if isinstance(point, (list, tuple)):
        return point[0], point[1]
    return point.lng, point.lat


def batch_convert(points: Iterable[Any], convert_fn: Converter) -> List[Coordinate]:
    """
    批量转换坐标，保持顺序与数量一致。

    points 中的元素可以是 Coordinate、任何带 lng/lat 属性的对象、{"lng", "lat"} 字典，
    或 (lng, lat) 二元组；
    convert_fn 抛出的异常直接向上传递。
    """
    results: List[Coordinate] = []
    for point in points:
        lng, lat = _point_lng_lat(point)
        results.append(convert_fn(lng, lat))
    return results


def _identity(lng: float, lat: float) -> Coordinate:
    return Coordinate(lng=lng, lat=lat)


_CONVERTERS: Dict[Tuple[str, str], Converter] = {
    ("wgs84", "gcj02"): wgs84_to_gcj02,
    ("wgs84", "bd09"): wgs84_to_bd09,
    ("gcj02", "wgs84"): gcj02_to_wgs84,
    ("gcj02", "bd09"): gcj02_to_bd09,
    ("bd09", "wgs84"): bd09_to_wgs84,
    ("bd09", "gcj02"): bd09_to_gcj02,
}


def normalize_coord_type(coord_type: Optional[str]) -> str:
    text = str(coord_type or "").strip().lower()
    if text not in COORD_TYPES:
        raise UnsupportedCoordTypeError(coord_type)
    return text


def get_converter(from_type: str, to_type: str) -> Converter:
    """
    按坐标系名称获取单点转换函数，同名坐标系返回恒等转换。
    """
    src = normalize_coord_type(from_type)
    dst = normalize_coord_type(to_type)
    if src == dst:
        return _identity
    return _CONVERTERS[(src, dst)]


def convert(lng: float, lat: float, from_type: str, to_type: str) -> Coordinate:
    return get_converter(from_type, to_type)(lng, lat)
