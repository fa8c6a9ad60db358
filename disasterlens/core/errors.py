"""
Domain errors for DisasterLens.

Store adapters translate backend failures into these exceptions;
the HTTP layer maps them onto status codes.
"""


class StoreError(Exception):
    """저장소 오류 기본 클래스"""


class StoreUnavailableError(StoreError):
    """저장소에 접근할 수 없음 (폴백 대상)"""


class NotFoundError(StoreError):
    """요청한 ID의 엔티티가 없음"""

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id
