# =============================================================================
# osca_core/offline/connection_manager.py
# Connection Status Detection and Offline Simulation
# =============================================================================
"""
ConnectionManager - reports whether Supabase is reachable.

Features:
- Injectable reachability probe (default: TCP check of public DNS, then the
  Supabase host, all within one timeout budget)
- Re-check throttled to one probe per interval; the page calls refresh()
  on every rerun, there is no background thread
- Manual "simulate offline" override; the effective state is always
  offline while it is on
- Callbacks on effective-state changes (the manager never syncs by itself)
"""

from __future__ import annotations
import socket
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional
from urllib.parse import urlparse

from osca_core.logging import get_logger

logger = get_logger(__name__)

Probe = Callable[[], bool]


class ConnectionStatus(Enum):
    """Connection status states."""
    ONLINE = "online"           # Internet + Supabase
    OFFLINE = "offline"         # No connectivity
    DEGRADED = "degraded"       # Internet OK but Supabase unavailable
    CHECKING = "checking"       # Currently checking status
    UNKNOWN = "unknown"         # Initial state


@dataclass
class ConnectionState:
    """Current connection state with metadata."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    internet_available: bool = False
    supabase_available: bool = False
    simulate_offline: bool = False
    last_check: Optional[datetime] = None
    last_online: Optional[datetime] = None
    consecutive_failures: int = 0
    error_message: Optional[str] = None

    @property
    def effective_online(self) -> bool:
        return False if self.simulate_offline else self.status == ConnectionStatus.ONLINE


def tcp_reachable(host: str, port: int, timeout: float) -> bool:
    """True when a TCP connection to host:port can be opened."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


class ConnectionManager:
    """
    Connectivity monitor for one dashboard session.

    Usage:
        manager = ConnectionManager(supabase_url=settings.supabase_url)
        manager.refresh()
        if manager.effective_online:
            # talk to Supabase
        else:
            # write to the local store
    """

    PUBLIC_HOSTS = (
        ("8.8.8.8", 53),          # Google DNS
        ("1.1.1.1", 53),          # Cloudflare DNS
        ("208.67.222.222", 53),   # OpenDNS
    )

    def __init__(
        self,
        supabase_url: str = "",
        internet_probe: Optional[Probe] = None,
        supabase_probe: Optional[Probe] = None,
        timeout: float = 5.0,
        check_interval: float = 30.0,
    ):
        self.supabase_url = supabase_url
        self.timeout = timeout
        self.check_interval = check_interval
        self._internet_probe = internet_probe or self._check_internet
        self._supabase_probe = supabase_probe or self._check_supabase
        self._state = ConnectionState()
        self._callbacks: List[Callable[[ConnectionState], None]] = []
        self._deadline = 0.0

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        """Raw reachability, ignoring the simulation override."""
        return self._state.status == ConnectionStatus.ONLINE

    @property
    def simulate_offline(self) -> bool:
        return self._state.simulate_offline

    @simulate_offline.setter
    def simulate_offline(self, enabled: bool) -> None:
        self.set_simulate_offline(enabled)

    @property
    def effective_online(self) -> bool:
        """The state sync logic consumes: simulation wins when enabled."""
        return self._state.effective_online

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def check_connection(self) -> ConnectionState:
        """
        Probe reachability now and update state.

        Returns:
            Updated ConnectionState
        """
        was_online = self.effective_online
        old_status = self._state.status
        self._state.status = ConnectionStatus.CHECKING
        self._state.last_check = datetime.now()
        self._deadline = time.monotonic() + self.timeout

        internet_ok = self._run_probe(self._internet_probe)
        supabase_ok = internet_ok and self._run_probe(self._supabase_probe)
        self._state.internet_available = internet_ok
        self._state.supabase_available = supabase_ok

        if internet_ok and supabase_ok:
            self._state.status = ConnectionStatus.ONLINE
            self._state.last_online = datetime.now()
            self._state.consecutive_failures = 0
            self._state.error_message = None
        elif internet_ok:
            self._state.status = ConnectionStatus.DEGRADED
            self._state.consecutive_failures += 1
        else:
            self._state.status = ConnectionStatus.OFFLINE
            self._state.consecutive_failures += 1

        if old_status != self._state.status:
            logger.info(f"Connection status changed: {old_status.value} -> {self._state.status.value}")
        # The first probe sets the baseline; only later flips are reported
        if old_status != ConnectionStatus.UNKNOWN and was_online != self.effective_online:
            self._notify_callbacks()

        return self._state

    def refresh(self, force: bool = False) -> ConnectionState:
        """Re-check when the last probe is older than the check interval."""
        last = self._state.last_check
        if force or last is None or datetime.now() - last >= timedelta(seconds=self.check_interval):
            return self.check_connection()
        return self._state

    def set_simulate_offline(self, enabled: bool) -> None:
        """Toggle the offline simulation used for demonstration and testing."""
        enabled = bool(enabled)
        if enabled == self._state.simulate_offline:
            return
        was_online = self.effective_online
        self._state.simulate_offline = enabled
        logger.info(f"Offline simulation {'enabled' if enabled else 'disabled'}")
        if was_online != self.effective_online:
            self._notify_callbacks()

    def _run_probe(self, probe: Probe) -> bool:
        try:
            return bool(probe())
        except Exception as e:
            self._state.error_message = str(e)
            logger.debug(f"Connectivity probe failed: {e}")
            return False

    def _remaining(self) -> float:
        """Seconds left of the current check's budget."""
        return self._deadline - time.monotonic()

    def _check_internet(self) -> bool:
        for host, port in self.PUBLIC_HOSTS:
            remaining = self._remaining()
            if remaining <= 0:
                self._state.error_message = "Connection check timed out"
                return False
            if tcp_reachable(host, port, remaining):
                return True
        return False

    def _check_supabase(self) -> bool:
        if not self.supabase_url:
            # Nothing configured to reach
            self._state.error_message = "Supabase URL not configured"
            return False
        parsed = urlparse(self.supabase_url)
        if not parsed.hostname:
            return False
        remaining = self._remaining()
        if remaining <= 0:
            self._state.error_message = "Connection check timed out"
            return False
        return tcp_reachable(parsed.hostname, parsed.port or 443, remaining)

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    def register_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """Register a callback for effective online/offline transitions."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in self._callbacks:
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in connection callback: {e}")

    def get_status_display(self) -> dict:
        """Get status information for UI display."""
        return {
            "status": self._state.status.value,
            "is_online": self.is_online,
            "effective_online": self.effective_online,
            "simulate_offline": self._state.simulate_offline,
            "internet": self._state.internet_available,
            "supabase": self._state.supabase_available,
            "last_check": self._state.last_check.isoformat() if self._state.last_check else None,
            "last_online": self._state.last_online.isoformat() if self._state.last_online else None,
            "failures": self._state.consecutive_failures,
            "error": self._state.error_message,
        }
