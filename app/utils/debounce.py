"""Debounce / throttle utilities for recalculation requests.

가격 입력 필드처럼 짧은 시간에 연속으로 발생하는 이벤트를
asyncio 이벤트 루프의 타이머로 묶어서 한 번만 실행합니다.

주요 기능:
- debounce: 마지막 호출 후 wait_ms 가 지나면 실행 (trailing)
- debounce(immediate=True): 유휴 구간의 첫 호출만 즉시 실행 (leading)
- throttle: 구간(limit_ms) 안에서는 첫 호출만 실행, 나머지는 버림

사용 예시:
    recalculate = debounce(update_totals, 300)

    # 키 입력마다 호출해도 마지막 호출 300ms 후 한 번만 실행됨
    recalculate(form_data)
"""

import asyncio
import logging
import threading
from typing import Any, Callable, Optional

from app.exceptions import SchedulerError

logger = logging.getLogger(__name__)


def check_callable(fn: Any, name: str = "fn") -> None:
    """콜백 인자 검증 (호출 가능한 객체가 아니면 즉시 TypeError)."""
    if not callable(fn):
        raise TypeError(f"{name} must be callable, got {type(fn).__name__}")


def check_duration(value: Any, name: str) -> None:
    """밀리초 단위 대기 시간 검증."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be a number of milliseconds, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must not be negative: {value}")


def resolve_loop(loop: Optional[asyncio.AbstractEventLoop]) -> asyncio.AbstractEventLoop:
    """주입된 루프 또는 현재 실행 중인 루프를 반환합니다."""
    if loop is not None:
        return loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise SchedulerError(
            "타이머를 예약할 이벤트 루프가 없습니다",
            details={"error": str(e)},
        ) from e


def on_loop_thread(loop: asyncio.AbstractEventLoop) -> bool:
    """
    현재 스레드에서 loop 의 타이머를 직접 다뤄도 되는지 여부.

    loop 가 다른 스레드에서 실행 중이면 False 이며, 이때는
    loop.call_soon_threadsafe() 로 넘겨야 합니다.
    """
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        # 아직 실행 전인 루프는 어느 스레드에서 예약해도 됨
        return not loop.is_running()


class Debouncer:
    """
    디바운스된 함수 래퍼.

    래퍼 하나는 idle / pending(타이머 핸들) 두 상태만 가집니다.
    - 호출: 대기 중인 타이머를 취소하고 새 타이머 예약 (pending)
    - 타이머 만료: 함수 실행 후 idle
    - cancel(): 타이머 취소 후 idle

    상태 변경은 항상 루프 스레드에서 일어납니다. 루프가 주입된 래퍼를 다른
    스레드에서 호출하면 call_soon_threadsafe() 로 루프 스레드에 넘기므로,
    이 경우 leading 실행도 호출한 스레드가 아닌 루프 스레드에서 곧 실행됩니다.
    루프가 주입되지 않았다면 루프 스레드에서만 호출할 수 있습니다.

    Attributes:
        wait_ms: 디바운스 대기 시간 (밀리초)
        immediate: True 이면 leading-edge 모드
    """

    def __init__(
        self,
        fn: Callable[..., Any],
        wait_ms: float,
        immediate: bool = False,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        check_callable(fn)
        check_duration(wait_ms, "wait_ms")

        self.fn = fn
        self.wait_ms = wait_ms
        self.immediate = immediate
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        """예약된 타이머가 있는지 여부."""
        return self._handle is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        loop = resolve_loop(self._loop)
        if on_loop_thread(loop):
            self._schedule(loop, args, kwargs)
        else:
            loop.call_soon_threadsafe(self._schedule, loop, args, kwargs)

    def cancel(self) -> bool:
        """
        대기 중인 실행을 취소합니다.
        다른 스레드에서 호출하면 취소는 루프 스레드에서 곧 처리됩니다.

        Returns:
            취소할 타이머가 있었는지 여부
        """
        if self._handle is None:
            return False
        if self._loop is not None and not on_loop_thread(self._loop):
            self._loop.call_soon_threadsafe(self._cancel_handle)
        else:
            self._cancel_handle()
        return True

    def _schedule(self, loop: asyncio.AbstractEventLoop, args: tuple, kwargs: dict) -> None:
        # 유휴 구간의 첫 호출일 때만 leading 실행
        call_now = self.immediate and self._handle is None

        if self._handle is not None:
            self._handle.cancel()

        self._handle = loop.call_later(self.wait_ms / 1000, self._later, args, kwargs)

        if call_now:
            self.fn(*args, **kwargs)

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _later(self, args: tuple, kwargs: dict) -> None:
        self._handle = None
        if not self.immediate:
            self.fn(*args, **kwargs)

    def __repr__(self) -> str:
        state = "pending" if self.pending else "idle"
        return f"<Debouncer {getattr(self.fn, '__name__', self.fn)!s} wait_ms={self.wait_ms} {state}>"


class Throttler:
    """
    드롭 방식 스로틀 래퍼.

    구간을 여는 호출만 실행되고, 구간 안의 호출은 인자째 버려집니다.
    구간이 끝난 뒤 뒤늦게 실행해 주지 않습니다 (trailing 없음).
    """

    def __init__(
        self,
        fn: Callable[..., Any],
        limit_ms: float,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        check_callable(fn)
        check_duration(limit_ms, "limit_ms")

        self.fn = fn
        self.limit_ms = limit_ms
        self._loop = loop
        self._window_started_at: Optional[float] = None
        self._lock = threading.Lock()

    def in_window(self, now: float) -> bool:
        """now(루프 시각, 초) 가 현재 스로틀 구간 안에 있는지 여부."""
        if self._window_started_at is None:
            return False
        return now - self._window_started_at < self.limit_ms / 1000

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        loop = resolve_loop(self._loop)
        now = loop.time()

        # 여러 스레드가 동시에 호출해도 구간을 여는 호출은 하나뿐
        with self._lock:
            if self.in_window(now):
                logger.debug(f"[Throttler] 구간 내 호출 무시: {getattr(self.fn, '__name__', self.fn)}")
                return
            previous = self._window_started_at
            self._window_started_at = now

        try:
            self.fn(*args, **kwargs)
        except Exception:
            # 함수가 실패하면 구간을 열지 않은 것으로 되돌립니다
            with self._lock:
                if self._window_started_at == now:
                    self._window_started_at = previous
            raise

    def reset(self) -> None:
        """스로틀 구간을 즉시 닫습니다."""
        with self._lock:
            self._window_started_at = None


def debounce(
    fn: Callable[..., Any],
    wait_ms: float,
    immediate: bool = False,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> Debouncer:
    """
    fn 을 디바운스한 래퍼를 반환합니다.

    Args:
        fn: 실행할 함수
        wait_ms: 마지막 호출 후 기다릴 시간 (밀리초)
        immediate: True 이면 첫 호출을 즉시 실행하고 구간 내 나머지를 억제
        loop: 타이머를 예약할 이벤트 루프. None 이면 호출 시점의 실행 중인 루프

    Returns:
        Debouncer 인스턴스 (호출 가능)
    """
    return Debouncer(fn, wait_ms, immediate=immediate, loop=loop)


def throttle(
    fn: Callable[..., Any],
    limit_ms: float,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> Throttler:
    """fn 이 limit_ms 구간마다 최대 한 번만 실행되도록 감싼 래퍼를 반환합니다."""
    return Throttler(fn, limit_ms, loop=loop)


def create_debounced_input(
    set_value: Callable[[Any], Any],
    delay_ms: float = 300,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> Debouncer:
    """폼 입력 값 setter 를 디바운스합니다 (마지막 입력만 반영)."""
    return debounce(set_value, delay_ms, loop=loop)
