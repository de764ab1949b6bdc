from __future__ import annotations


class OrderError(Exception):
    """주문 파이프라인 실패의 공통 부모.

    - status_code: 응답 HTTP 코드
    - public_message: 호출자에게 그대로 노출되는 메시지
    """
    status_code = 500
    public_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        if message is not None:
            self.public_message = message


class CallerInputError(OrderError):
    status_code = 400
    public_message = "Invalid request body"


class NonPositiveTotalError(CallerInputError):
    public_message = "Order total must be greater than zero"


class OrderTotalTooLargeError(CallerInputError):
    public_message = "Order total exceeds the maximum allowed amount"


class CatalogInconsistencyError(OrderError):
    status_code = 400
    public_message = "Item not available"


class RateLimitError(OrderError):
    status_code = 429
    public_message = "Too many requests"


class AuthenticationError(OrderError):
    status_code = 401
    public_message = "Unauthorized"

    def __init__(self, reason: str | None = None) -> None:
        # reason은 로그용. 응답에는 항상 "Unauthorized"만 노출
        super().__init__()
        self.reason = reason


class PersistenceError(OrderError):
    status_code = 500
    public_message = "Failed to create order"


class ConfigurationError(OrderError):
    status_code = 500
    public_message = "Internal error"

    def __init__(self, reason: str | None = None) -> None:
        # 서버 설정 문제. 응답에는 상세 내용을 노출하지 않음
        super().__init__()
        self.reason = reason


class RestaurantClosedError(OrderError):
    status_code = 400
    public_message = "Restaurant is currently closed"


class CatalogUnavailableError(OrderError):
    status_code = 500
    public_message = "Restaurant not found"


class OrderNotFoundError(OrderError):
    status_code = 404
    public_message = "order not found"
