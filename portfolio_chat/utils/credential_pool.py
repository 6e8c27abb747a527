"""
Credential pool with round-robin selection, rate-limit cooldowns, quarantine and periodic health checks.

One pool instance is shared by every chat session, so all counter updates happen under a lock.
Calls to the provider itself run outside the lock.
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar

from botocore.exceptions import ClientError

from ..models.core import Credential
from .config import CredentialPoolConfig
from .config import config as app_config
from .logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

MINUTE_SECONDS = 60.0
DAY_SECONDS = 24 * 60 * 60.0

# Bedrock error codes that do not always carry the matching HTTP status
_ERROR_CODE_STATUS = {
    'ThrottlingException': 429,
    'TooManyRequestsException': 429,
    'ServiceQuotaExceededException': 429,
    'AccessDeniedException': 403,
    'UnrecognizedClientException': 403,
    'InvalidSignatureException': 403,
    'ExpiredTokenException': 403,
    'InternalServerException': 500,
    'ServiceUnavailableException': 503,
    'ModelNotReadyException': 503,
}


class CredentialConfigError(Exception):
    """Raised when the pool is created without any credential."""
    pass


class CredentialExhaustedError(Exception):
    """Raised when no usable credential shows up within the wait timeout."""
    pass


def get_status_code(error: BaseException) -> Optional[int]:
    """Extract an HTTP-style status code from a provider error.

    Args:
        error: Exception raised by a provider call

    Returns:
        Status code, or None when the error carries none (timeouts, connection errors, ...)
    """
    if isinstance(error, ClientError):
        error_code = error.response.get('Error', {}).get('Code', '')
        if error_code in _ERROR_CODE_STATUS:
            return _ERROR_CODE_STATUS[error_code]
        status = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
        if status:
            return int(status)

    for attribute in ('status_code', 'status'):
        value = getattr(error, attribute, None)
        if isinstance(value, int):
            return value
    return None


class CredentialPool:
    """Set of interchangeable credentials with health and usage tracking."""

    def __init__(self,
                 secrets: List[str],
                 pool_config: Optional[CredentialPoolConfig] = None,
                 health_probe: Optional[Callable[[Credential], bool]] = None,
                 clock: Callable[[], float] = time.time,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the pool.

        Args:
            secrets: Configured credential secrets, one credential per entry
            pool_config: CredentialPoolConfig, uses the global config if None
            health_probe: Trivial provider call used to re-check quarantined credentials
            clock: Time source in seconds
            sleep: Sleep function used while waiting for a credential

        Raises:
            CredentialConfigError: If no secret is given
        """
        if not secrets:
            raise CredentialConfigError(
                f'No credentials configured. Set {app_config.credential_pool.credential_prefix}1 and up')

        self.config = pool_config or app_config.credential_pool
        self.health_probe = health_probe
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.RLock()
        self._cursor = 0
        self._health_thread = None
        self._stop_event = threading.Event()

        now = clock()
        self.credentials = [
            Credential(id=f'key_{index + 1}', secret=secret, last_daily_reset=now) for index, secret in enumerate(secrets)
        ]

        logger.info(f'Initialized credential pool with {len(self.credentials)} credentials')

    def _reset_windows(self, now: float) -> None:
        for credential in self.credentials:
            if now - credential.last_daily_reset >= DAY_SECONDS:
                credential.daily_request_count = 0
                credential.last_daily_reset = now
            if now - credential.window_started_at >= MINUTE_SECONDS:
                credential.minute_request_count = 0
                credential.window_started_at = now

    def _is_available(self, credential: Credential, now: float) -> bool:
        if not credential.is_healthy:
            return False
        if credential.daily_request_count >= self.config.requests_per_day:
            return False
        if credential.rate_limit_reset_at > now:
            return False
        if credential.minute_request_count >= self.config.requests_per_minute:
            if now - credential.last_used_at < MINUTE_SECONDS:
                return False
        return True

    def select_credential(self) -> Optional[Credential]:
        """
        Pick the next usable credential.

        Round-robin over healthy credentials that are under their daily quota, outside any
        rate-limit cooldown and under the per-minute threshold. When none qualifies, the healthy
        credential idle for longest is returned instead.

        Returns:
            Selected Credential, or None if no credential is healthy
        """
        with self._lock:
            now = self._clock()
            self._reset_windows(now)

            total = len(self.credentials)
            for offset in range(total):
                index = (self._cursor + offset) % total
                credential = self.credentials[index]
                if self._is_available(credential, now):
                    self._cursor = (index + 1) % total
                    return credential

            healthy = [credential for credential in self.credentials if credential.is_healthy]
            if not healthy:
                return None

            logger.warning('No available credentials, falling back to the longest idle healthy one')
            return min(healthy, key=lambda credential: credential.last_used_at)

    def _wait_for_credential(self) -> Credential:
        started = self._clock()
        while True:
            credential = self.select_credential()
            if credential is not None:
                return credential
            if self._clock() - started >= self.config.wait_timeout:
                raise CredentialExhaustedError(
                    f'Timeout waiting for available credential after {self.config.wait_timeout}s')
            self._sleep(self.config.poll_interval)

    def _record_usage(self, credential: Credential, success: bool) -> None:
        now = self._clock()
        credential.last_used_at = now
        credential.request_count += 1
        credential.minute_request_count += 1
        credential.daily_request_count += 1

        if success:
            return

        credential.error_count += 1
        if (credential.request_count >= self.config.min_requests_for_disable
                and credential.error_rate > self.config.error_rate_threshold):
            credential.is_healthy = False
            logger.warning(f'Credential {credential.id} disabled due to high error rate: {credential.error_rate * 100:.1f}%')

    def _handle_failure(self, credential: Credential, error: BaseException) -> None:
        with self._lock:
            self._record_usage(credential, success=False)
            status = get_status_code(error)

            if status == 429:
                credential.rate_limit_reset_at = self._clock() + self.config.cooldown_seconds
                logger.info(f'Credential {credential.id} rate limited, cooling down for {self.config.cooldown_seconds}s')
            elif status in (401, 403):
                credential.is_healthy = False
                logger.error(f'Credential {credential.id} disabled due to auth error ({status})')
            elif status is not None and status >= 500:
                logger.info(f'Server error ({status}) with credential {credential.id}, will retry')

    def execute_with_retry(self, operation: Callable[[Credential], T], max_retries: Optional[int] = None) -> T:
        """
        Run an operation with automatic credential rotation.

        Args:
            operation: Callable receiving the selected Credential
            max_retries: Number of attempts (uses config default if None)

        Returns:
            Result of the first successful operation call

        Raises:
            ValueError: If max_retries is less than 1
            CredentialExhaustedError: If no credential becomes available within the wait timeout
            Exception: The last operation error once all attempts failed
        """
        if max_retries is None:
            max_retries = self.config.max_retries
        if max_retries < 1:
            raise ValueError(f'max_retries must be at least 1, got {max_retries}')
        last_error = None

        for attempt in range(max_retries):
            credential = self._wait_for_credential()

            try:
                logger.debug(f'Provider call attempt {attempt + 1}/{max_retries} with credential {credential.id}')
                result = operation(credential)
            except Exception as e:
                last_error = e
                logger.warning(f'Provider call failed with credential {credential.id} '
                               f'(attempt {attempt + 1}/{max_retries}): {e}')
                self._handle_failure(credential, e)
                continue

            with self._lock:
                self._record_usage(credential, success=True)
            return result

        if last_error is None:
            raise CredentialExhaustedError('All credentials exhausted')
        raise last_error

    def run_health_check(self) -> int:
        """
        Probe every quarantined credential once and re-enable the ones that answer.

        Returns:
            Number of credentials re-enabled
        """
        if self.health_probe is None:
            return 0

        with self._lock:
            disabled = [credential for credential in self.credentials if not credential.is_healthy]

        restored = 0
        for credential in disabled:
            try:
                healthy = self.health_probe(credential)
            except Exception as e:
                logger.info(f'Credential {credential.id} still unhealthy: {e}')
                continue

            if not healthy:
                logger.info(f'Credential {credential.id} still unhealthy')
                continue

            with self._lock:
                credential.is_healthy = True
                credential.error_count = 0
                credential.request_count = 0
                credential.minute_request_count = 0
            restored += 1
            logger.info(f'Credential {credential.id} re-enabled after health check')

        return restored

    def _health_loop(self) -> None:
        while not self._stop_event.wait(self.config.health_check_interval):
            try:
                self.run_health_check()
            except Exception as e:
                logger.error(f'Credential health check failed: {e}')

    def start_health_checks(self) -> None:
        """Start the periodic health check on a daemon thread."""
        if self._health_thread is not None and self._health_thread.is_alive():
            return
        self._stop_event.clear()
        self._health_thread = threading.Thread(target=self._health_loop, name='credential-health-check', daemon=True)
        self._health_thread.start()
        logger.info(f'Started credential health checks every {self.config.health_check_interval}s')

    def stop_health_checks(self) -> None:
        """Stop the periodic health check."""
        self._stop_event.set()
        if self._health_thread is not None:
            self._health_thread.join(timeout=1.0)
            self._health_thread = None

    def get_key_stats(self) -> List[Dict[str, Any]]:
        """Per-credential usage statistics, secrets excluded."""
        with self._lock:
            return [{
                'id': credential.id,
                'isHealthy': credential.is_healthy,
                'requestCount': credential.request_count,
                'errorCount': credential.error_count,
                'dailyRequestCount': credential.daily_request_count,
                'errorRate': f'{credential.error_rate * 100:.1f}%',
            } for credential in self.credentials]

    def get_healthy_key_count(self) -> int:
        with self._lock:
            return sum(1 for credential in self.credentials if credential.is_healthy)
