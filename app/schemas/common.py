# ============================================
# app/schemas/common.py - 공통 응답 형식
# ============================================
# 모든 라우터가 사용하는 성공 응답 envelope과 커서 페이지 형식입니다.
# ============================================

from typing import Optional


def success_response(data=None, message: Optional[str] = None) -> dict:
    """
    성공 응답 envelope을 만듭니다.

    [응답 형식]
    {
        "success": true,
        "data": { ... },
        "message": "성공 메시지"
    }

    에러 응답은 app/core/exceptions.py의 RunnersClubException이 만듭니다.
    """
    return {"success": True, "data": data, "message": message}


def cursor_page(items: list, next_cursor: Optional[str]) -> dict:
    """
    커서 페이지 data 부분을 만듭니다.

    [응답 형식]
    {
        "items": [ ... ],
        "nextCursor": "eyJ0Ijoi..."   # 마지막 페이지면 null
    }
    """
    return {"items": items, "nextCursor": next_cursor}
