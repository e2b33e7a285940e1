"""
온에어 엔진 예외.

ValidationError 는 잘못된 참조/입력. 상태는 절대 바뀌지 않은 채로 호출 측에 그대로 전달된다.
"""


class OnAirError(Exception):
    """온에어 엔진 공통 기본 예외"""


class ValidationError(OnAirError):
    """알 수 없는 참조, 잘못된 입력. HTTP 400 으로 메시지를 그대로 반환."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
