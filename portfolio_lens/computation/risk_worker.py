"""
Background risk worker.

Runs risk analyses on a daemon thread fed by a request queue. Every
submission gets a monotonically increasing sequence number; a response is
only published when its sequence number is still the latest one issued,
so a slow, superseded computation can never overwrite a newer result.
"""

from typing import Callable, Optional, Tuple
import logging
import queue
import threading

from ..models.data_models import RiskRequest, RiskResponse
from ..portfolio.snapshot import PortfolioSnapshot
from ..portfolio.windowing import filter_to_window
from ..services.risk_service import (
    DEFAULT_RISK_FREE_RATE, DEFAULT_VAR_CONFIDENCE, handle_risk_request
)

logger = logging.getLogger(__name__)

_STOP = object()

WorkItem = Tuple[RiskRequest, Optional[str], bool]


class RiskWorker:
    """
    Always-on worker computing risk metrics off the caller's thread.

    Usage:
        worker = RiskWorker(on_result=print)
        worker.start()
        sequence = worker.submit(snapshot, "Market", period="1Y")
        response = worker.wait_for(sequence, timeout=5)
        worker.stop()
    """

    def __init__(self, on_result: Optional[Callable[[RiskResponse], None]] = None,
                 risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
                 confidence: float = DEFAULT_VAR_CONFIDENCE):
        """
        Initialize the worker.

        Args:
            on_result: Called with every fresh (non-stale) response
            risk_free_rate: Monthly risk-free rate for alpha and Sharpe
            confidence: Historical VaR confidence level
        """
        self.on_result = on_result
        self.risk_free_rate = risk_free_rate
        self.confidence = confidence

        self._queue: "queue.Queue" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._condition = threading.Condition()
        self._sequence = 0
        self._completed = 0
        self._latest_response: Optional[RiskResponse] = None
        self._discarded = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def latest_sequence(self) -> int:
        with self._condition:
            return self._sequence

    @property
    def latest_response(self) -> Optional[RiskResponse]:
        """Most recent response that was not superseded when it finished."""
        with self._condition:
            return self._latest_response

    @property
    def discarded_count(self) -> int:
        with self._condition:
            return self._discarded

    def start(self) -> None:
        """Start the background thread."""
        if self.is_running:
            return

        self._thread = threading.Thread(target=self._run_loop, name="risk-worker", daemon=True)
        self._thread.start()
        logger.info("RiskWorker started")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop after the queued requests have been drained."""
        if self._thread is None:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("RiskWorker stopped")

    def submit(self, snapshot: PortfolioSnapshot, benchmark_name: str = "Market",
               period: Optional[str] = None, exact_ytd: bool = False) -> int:
        """
        Queue a risk analysis and return its sequence number.

        Args:
            snapshot: Portfolio snapshot to analyse
            benchmark_name: Benchmark to compare against
            period: Optional lookback period applied before the analysis
            exact_ytd: Use calendar months for a ``YTD`` period
        """
        with self._condition:
            self._sequence += 1
            request = RiskRequest(snapshot=snapshot, benchmark_name=benchmark_name, sequence=self._sequence)
        self._queue.put((request, period, exact_ytd))
        logger.debug(f"Queued risk request {request.sequence} ({benchmark_name}, period={period})")
        return request.sequence

    def wait_for(self, sequence: int, timeout: Optional[float] = None) -> Optional[RiskResponse]:
        """
        Block until request ``sequence`` has been processed.

        Returns:
            The response for ``sequence``, or None if it was superseded or
            the timeout expired
        """
        with self._condition:
            self._condition.wait_for(lambda: self._completed >= sequence, timeout=timeout)
            response = self._latest_response
        if response is not None and response.sequence == sequence:
            return response
        return None

    def _is_stale(self, sequence: int) -> bool:
        with self._condition:
            return sequence != self._sequence

    def _process(self, item: WorkItem) -> RiskResponse:
        request, period, exact_ytd = item
        if period:
            try:
                request = RiskRequest(
                    snapshot=filter_to_window(request.snapshot, period, exact_ytd),
                    benchmark_name=request.benchmark_name,
                    sequence=request.sequence,
                )
            except ValueError as e:
                logger.error(f"Risk request {request.sequence} has an invalid period: {e}")
                return RiskResponse(sequence=request.sequence, error_message=f"Error in risk calculation: {e}")
        return handle_risk_request(request, self.risk_free_rate, self.confidence)

    def _publish(self, response: RiskResponse) -> bool:
        with self._condition:
            self._completed = max(self._completed, response.sequence)
            fresh = response.sequence == self._sequence
            if fresh:
                self._latest_response = response
            else:
                self._discarded += 1
            self._condition.notify_all()

        if not fresh:
            logger.debug(f"Discarded stale risk response {response.sequence}")
        return fresh

    def _run_loop(self) -> None:
        """Background request loop."""
        while True:
            item = self._queue.get()
            if item is _STOP:
                break

            request = item[0]
            if self._is_stale(request.sequence):
                # Superseded before it started, skip the computation
                self._publish(RiskResponse(sequence=request.sequence, error_message="Superseded"))
                continue

            try:
                response = self._process(item)
            except Exception as e:
                logger.error(f"Risk request {request.sequence} could not be processed: {e}", exc_info=True)
                response = RiskResponse(sequence=request.sequence, error_message=f"Error in risk calculation: {e}")

            if self._publish(response) and self.on_result:
                try:
                    self.on_result(response)
                except Exception as e:
                    logger.error(f"RiskWorker callback failed: {e}", exc_info=True)
