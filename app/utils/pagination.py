"""
커서(Keyset) 페이지네이션 유틸리티

offset 방식은 새 글이 추가되면 페이지가 밀리면서 중복/누락이 생깁니다.
(created_at, id) 조합을 커서로 사용하면 목록이 바뀌어도 다음 페이지가 안정적입니다.

커서 형식: urlsafe base64( {"t": "<ISO 시각>", "id": "<id>"} )
"""

import base64
import binascii
import json
import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple, Union

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query

from app.core.exceptions import ValidationException

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 50


def clamp_limit(
    limit: Optional[Union[int, str]],
    default: int = DEFAULT_LIMIT,
    maximum: int = MAX_LIMIT
) -> int:
    """
    요청한 limit을 [1, maximum] 범위로 맞춥니다.

    범위를 벗어난 값은 에러 대신 가장 가까운 값으로 보정합니다.
    (limit=0 → 1, limit=999 → maximum, 없거나 숫자가 아니면 default)
    """
    if limit is None:
        return default
    if isinstance(limit, str):
        try:
            limit = int(limit.strip())
        except ValueError:
            return default
    return max(1, min(limit, maximum))


def encode_cursor(created_at: datetime, item_id: str) -> str:
    """마지막 아이템의 (시각, id)로 불투명한 커서 문자열을 만듭니다."""
    raw = json.dumps({"t": created_at.isoformat(), "id": item_id}, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    """
    커서 문자열을 (시각, id)로 되돌립니다.

    Raises:
        ValidationException: 형식이 잘못된 커서 (400)
    """
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
        created_at = datetime.fromisoformat(payload["t"])
        item_id = payload["id"]
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as e:
        logger.info(f"Invalid cursor rejected: {cursor[:40]!r} ({e})")
        raise ValidationException(message="유효하지 않은 커서입니다", field="cursor", reason="invalid_format")

    if not isinstance(item_id, str) or not item_id:
        raise ValidationException(message="유효하지 않은 커서입니다", field="cursor", reason="invalid_format")

    return created_at, item_id


def paginate(
    query: Query,
    model: Any,
    cursor: Optional[str],
    limit: int,
    time_attr: str = "created_at",
    descending: bool = True
) -> Tuple[List[Any], Optional[str]]:
    """
    (time_attr, id) 기준 keyset 페이지네이션을 적용합니다.

    limit + 1개를 조회해서 다음 페이지가 있는지 판단하고,
    있으면 이번 페이지 마지막 아이템으로 다음 커서를 만듭니다.

    Args:
        query: 필터가 적용된 단일 모델 쿼리
        model: 정렬 기준 컬럼을 가진 모델 클래스
        cursor: 이전 응답의 nextCursor (첫 페이지는 None)
        limit: 페이지 크기 (clamp_limit 적용 후 값)
        time_attr: 정렬 기준 시각 컬럼 이름
        descending: True면 최신순

    Returns:
        (아이템 리스트, 다음 커서 또는 None)
    """
    time_col = getattr(model, time_attr)
    id_col = model.id

    if cursor:
        cursor_time, cursor_id = decode_cursor(cursor)
        if descending:
            query = query.filter(or_(
                time_col < cursor_time,
                and_(time_col == cursor_time, id_col < cursor_id)
            ))
        else:
            query = query.filter(or_(
                time_col > cursor_time,
                and_(time_col == cursor_time, id_col > cursor_id)
            ))

    if descending:
        query = query.order_by(time_col.desc(), id_col.desc())
    else:
        query = query.order_by(time_col.asc(), id_col.asc())

    rows = query.limit(limit + 1).all()
    has_more = len(rows) > limit
    rows = rows[:limit]

    next_cursor = None
    if has_more and rows:
        last = rows[-1]
        next_cursor = encode_cursor(getattr(last, time_attr), last.id)

    return rows, next_cursor
