"""Recalculation scheduler for pricing calculators.

계산 채널(키)별 디바운스 래퍼 캐시와, 여러 계산 요청을 한 번의
플러시로 묶는 배치 관리자를 제공합니다.

채널 기본 지연 (밀리초):
- team_costs: 500
- tax_calculations: 300
- budget_calculations: 400
- roi_analysis: 600
- variable_impact: 400
- scenario_calculations: 700

사용 예시:
    with CalculationScheduler.create() as scheduler:
        calcs = scheduler.service_desk_calculations()
        calcs.calculate_team_costs(team_data, on_result)

        scheduler.batch.add_to_batch("taxes", refresh_summary)
"""

import asyncio
import logging
import threading
import weakref
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional

from app.config import Settings, get_settings
from app.utils.debounce import Debouncer, check_callable, check_duration, on_loop_thread, resolve_loop

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationChannel:
    """이름이 붙은 재계산 스트림."""
    key: str
    attribute: str  # ServiceDeskCalculations 의 필드명
    delay_ms: int


CALCULATION_CHANNELS: tuple[CalculationChannel, ...] = (
    CalculationChannel("team_costs", "calculate_team_costs", 500),
    CalculationChannel("tax_calculations", "calculate_taxes", 300),
    CalculationChannel("budget_calculations", "calculate_budget", 400),
    CalculationChannel("roi_analysis", "calculate_roi", 600),
    CalculationChannel("variable_impact", "calculate_variable_impact", 400),
    CalculationChannel("scenario_calculations", "calculate_scenarios", 700),
)


class DebouncedCalculationManager:
    """
    키별 디바운스 래퍼 레지스트리.

    키마다 처음 등록된 함수와 지연 시간이 유지됩니다. 같은 키로 다시
    요청하면 새 fn / delay_ms 는 무시되고 캐시된 래퍼가 반환됩니다.

    clear() / clear_function() 은 캐시에서만 제거합니다. 이미 반환된
    래퍼의 타이머는 래퍼 자신이 소유하므로 계속 동작합니다.
    """

    def __init__(
        self,
        default_delay_ms: int = 300,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        check_duration(default_delay_ms, "default_delay_ms")
        self.default_delay_ms = default_delay_ms
        self._loop = loop
        self._debounced_functions: dict[str, Debouncer] = {}
        # 지금까지 만든 모든 래퍼 (cancel_all 용)
        self._created: "weakref.WeakSet[Debouncer]" = weakref.WeakSet()
        self._lock = threading.Lock()

    def get_debounced_function(
        self,
        key: str,
        fn: Callable[..., Any],
        delay_ms: Optional[int] = None,
    ) -> Debouncer:
        """
        키에 해당하는 디바운스 래퍼를 생성하거나 캐시에서 가져옵니다.

        Args:
            key: 계산 채널 이름 (예: "team_costs")
            fn: 실행할 계산 함수 (첫 등록 시에만 사용)
            delay_ms: 디바운스 지연. None 이면 default_delay_ms

        Returns:
            키에 묶인 Debouncer
        """
        with self._lock:
            debounced = self._debounced_functions.get(key)
            if debounced is None:
                delay = self.default_delay_ms if delay_ms is None else delay_ms
                debounced = Debouncer(fn, delay, loop=self._loop)
                self._debounced_functions[key] = debounced
                self._created.add(debounced)
                logger.debug(f"[DebouncedCalculationManager] 채널 등록: {key} ({delay}ms)")
            return debounced

    def has_function(self, key: str) -> bool:
        """키에 캐시된 래퍼가 있는지 여부."""
        with self._lock:
            return key in self._debounced_functions

    @property
    def keys(self) -> list[str]:
        """등록된 채널 키 목록."""
        with self._lock:
            return list(self._debounced_functions)

    def clear(self) -> None:
        """캐시된 래퍼를 모두 제거합니다."""
        with self._lock:
            self._debounced_functions.clear()

    def clear_function(self, key: str) -> None:
        """특정 키의 래퍼를 캐시에서 제거합니다."""
        with self._lock:
            self._debounced_functions.pop(key, None)

    def cancel_all(self) -> int:
        """
        이 관리자가 만든 모든 래퍼의 대기 중인 실행을 취소합니다.

        Returns:
            취소된 타이머 수
        """
        with self._lock:
            wrappers = list(self._created)
        return sum(1 for debounced in wrappers if debounced.cancel())


class BatchCalculationManager:
    """
    배치 계산 관리자.

    add_to_batch() 호출마다 계산 유형 라벨을 대기 집합에 넣고 공용 플러시
    타이머를 다시 시작합니다. 타이머가 만료되면 라벨이 몇 개든 콜백을 한 번
    실행하고 대기 집합을 비웁니다.
    """

    def __init__(
        self,
        batch_delay_ms: int = 100,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        check_duration(batch_delay_ms, "batch_delay_ms")
        self.batch_delay_ms = batch_delay_ms
        self._loop = loop
        self._pending_updates: set[str] = set()
        self._batch_handle: Optional[asyncio.TimerHandle] = None
        self._lock = threading.Lock()

    @property
    def pending_updates(self) -> frozenset[str]:
        """플러시를 기다리는 계산 유형 라벨."""
        with self._lock:
            return frozenset(self._pending_updates)

    @property
    def pending(self) -> bool:
        """플러시 타이머가 예약되어 있는지 여부."""
        return self._batch_handle is not None

    def add_to_batch(self, calculation_type: str, callback: Callable[[], Any]) -> None:
        """
        계산 유형을 배치에 추가하고 플러시 타이머를 다시 시작합니다.
        다른 스레드에서 호출하면 타이머 재시작은 루프 스레드로 넘깁니다.
        """
        check_callable(callback, "callback")
        loop = resolve_loop(self._loop)

        with self._lock:
            self._pending_updates.add(calculation_type)

        if on_loop_thread(loop):
            self._restart_timer(loop, callback)
        else:
            loop.call_soon_threadsafe(self._restart_timer, loop, callback)

        logger.debug(f"[BatchCalculationManager] 배치 추가: {calculation_type}")

    def clear_batch(self) -> None:
        """콜백을 실행하지 않고 타이머와 대기 집합을 비웁니다."""
        with self._lock:
            self._pending_updates.clear()

        if self._loop is not None and not on_loop_thread(self._loop):
            self._loop.call_soon_threadsafe(self._cancel_timer)
        else:
            self._cancel_timer()

    def _restart_timer(self, loop: asyncio.AbstractEventLoop, callback: Callable[[], Any]) -> None:
        with self._lock:
            if self._batch_handle is not None:
                self._batch_handle.cancel()

            self._batch_handle = loop.call_later(
                self.batch_delay_ms / 1000, self._execute_batch, callback
            )

    def _cancel_timer(self) -> None:
        with self._lock:
            if self._batch_handle is not None:
                self._batch_handle.cancel()
                self._batch_handle = None

    def _execute_batch(self, callback: Callable[[], Any]) -> None:
        # 콜백 안에서 add_to_batch 를 다시 호출할 수 있도록 먼저 집합을 교체
        with self._lock:
            labels = self._pending_updates
            self._pending_updates = set()
            self._batch_handle = None

        if labels:
            logger.debug(f"[BatchCalculationManager] 배치 실행: {sorted(labels)}")
            callback()


@dataclass(frozen=True)
class ServiceDeskCalculations:
    """서비스 데스크 가격 계산기의 채널별 디바운스 래퍼 묶음.

    각 래퍼는 (data, callback) 으로 호출하며, 계산 결과가 callback 으로 전달됩니다.
    """
    calculate_team_costs: Debouncer
    calculate_taxes: Debouncer
    calculate_budget: Debouncer
    calculate_roi: Debouncer
    calculate_variable_impact: Debouncer
    calculate_scenarios: Debouncer


def _pass_through(data: Any) -> Any:
    return data


def _run_calculation(
    calculator: Callable[[Any], Any],
    data: Any,
    callback: Callable[[Any], Any],
) -> None:
    callback(calculator(data))


def create_debounced_calculations(
    manager: DebouncedCalculationManager,
    calculators: Optional[dict[str, Callable[[Any], Any]]] = None,
) -> ServiceDeskCalculations:
    """
    여섯 개 계산 채널을 manager 에 등록하고 래퍼 묶음을 반환합니다.

    Args:
        manager: 래퍼를 캐시할 관리자
        calculators: 채널 키 -> 계산 함수. 없는 채널은 입력을 그대로 전달

    Note:
        채널은 처음 등록한 계산 함수로 고정됩니다. 같은 manager 로 다시
        호출하면 calculators 인자는 무시되고 기존 래퍼가 반환됩니다.
    """
    calculators = calculators or {}
    unknown = set(calculators) - {channel.key for channel in CALCULATION_CHANNELS}
    if unknown:
        raise KeyError(f"알 수 없는 계산 채널: {sorted(unknown)}")

    wrappers = {}
    for channel in CALCULATION_CHANNELS:
        calculator = calculators.get(channel.key, _pass_through)
        check_callable(calculator, f"calculators[{channel.key!r}]")
        wrappers[channel.attribute] = manager.get_debounced_function(
            channel.key,
            partial(_run_calculation, calculator),
            channel.delay_ms,
        )
    return ServiceDeskCalculations(**wrappers)


class CalculationScheduler:
    """
    재계산 스케줄링 컨텍스트.

    디바운스 레지스트리와 배치 관리자를 하나의 수명 주기로 묶습니다.
    create() 로 만들고 dispose() 로 대기 중인 타이머를 모두 정리합니다.
    """

    def __init__(
        self,
        default_delay_ms: int = 300,
        batch_delay_ms: int = 100,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.calculations = DebouncedCalculationManager(default_delay_ms, loop=loop)
        self.batch = BatchCalculationManager(batch_delay_ms, loop=loop)
        self.disposed = False

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> "CalculationScheduler":
        """설정값(지연 시간)으로 스케줄러를 생성합니다."""
        settings = settings or get_settings()
        return cls(
            default_delay_ms=settings.default_debounce_delay_ms,
            batch_delay_ms=settings.batch_delay_ms,
            loop=loop,
        )

    def service_desk_calculations(
        self,
        calculators: Optional[dict[str, Callable[[Any], Any]]] = None,
    ) -> ServiceDeskCalculations:
        """이 스케줄러에 서비스 데스크 계산 채널을 등록합니다."""
        return create_debounced_calculations(self.calculations, calculators)

    def dispose(self) -> None:
        """대기 중인 모든 실행을 취소하고 캐시를 비웁니다."""
        cancelled = self.calculations.cancel_all()
        self.calculations.clear()
        self.batch.clear_batch()
        self.disposed = True
        logger.info(f"[CalculationScheduler] 종료: 대기 중이던 계산 {cancelled}개 취소")

    def __enter__(self) -> "CalculationScheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


# 싱글톤 인스턴스
_calculation_scheduler: Optional[CalculationScheduler] = None


def get_calculation_scheduler() -> CalculationScheduler:
    """CalculationScheduler 싱글톤 인스턴스 반환."""
    global _calculation_scheduler
    if _calculation_scheduler is None or _calculation_scheduler.disposed:
        _calculation_scheduler = CalculationScheduler.create()
    return _calculation_scheduler
