from __future__ import annotations

import random
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Tuple

from .adaptive import AdaptiveWeightEngine
from .exchange import render_cq, render_exchange
from .fields import FieldComparison, compare_field, format_annotations
from .matching import DEFAULT_MATCHER, MatchResult, StringMatcher
from .modes import Mode, ModeConfig, get_mode_config, parse_mode
from .pool import StationPool
from .stations import Station, StationGenerator, your_station
from .timing import AudioEngine, Clock, MonotonicClock, TimingScheduler

if TYPE_CHECKING:
    from .callsign_pool import CallerRecord
    from .config import AppConfig

REPEAT_REQUESTS = frozenset({"?", "AGN", "AGN?"})
SLOW_DOWN_REQUEST = "QRS"


class SessionState(str, Enum):
    IDLE = "IDLE"
    CALLING = "CALLING"
    AWAITING_SUBMISSION = "AWAITING_SUBMISSION"
    EVALUATING = "EVALUATING"
    REPEATING = "REPEATING"
    EXCHANGING = "EXCHANGING"
    AWAITING_EXCHANGE_CONFIRMATION = "AWAITING_EXCHANGE_CONFIRMATION"
    LOGGING = "LOGGING"


@dataclass
class SessionConfig:
    mode: str = "single"
    # Chance that one more station joins after a logged contact.
    join_probability: float = 0.4
    # Chance that one more station joins when CQ is called over a running pileup.
    cq_join_probability: float = 1.0
    qrs_step: int = 6
    qrs_floor: int = 5
    reply_gap_s: float = 0.5
    unsure_ack: str = "RR"
    unsure_ack_gap_s: float = 0.25


@dataclass(frozen=True)
class LoggedContact:
    number: int
    callsign: str
    wpm_label: str
    attempts: int
    duration_s: float
    extra_info: str
    fields: Tuple[FieldComparison, ...]
    mode: str
    timestamp_utc: str


ContactListener = Callable[[LoggedContact], None]


class SessionController:
    """Runs one training session: CQ, pileup, matching, exchange and logging.

    Every command returns ``None``; outcomes are read from the session
    attributes, ``contacts`` and ``logs``. Commands that would start audio are
    ignored while the shared audio lock is still in the future.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        audio: AudioEngine,
        clock: Optional[Clock] = None,
        generator: Optional[StationGenerator] = None,
        matcher: Optional[StringMatcher] = None,
        weights: Optional[AdaptiveWeightEngine] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.rng = rng or random.Random()
        self.clock = clock or MonotonicClock()
        self.weights = weights or AdaptiveWeightEngine()
        self.generator = generator or StationGenerator(
            config.stations,
            config.callsigns,
            self.weights,
            rng=self.rng,
        )
        self.matcher = matcher or DEFAULT_MATCHER
        self.scheduler = TimingScheduler(audio, self.clock)
        self.pool = StationPool(
            self.generator,
            min_stations=config.stations.min_stations,
            max_stations=config.stations.max_stations,
            rng=self.rng,
        )
        self.mode = parse_mode(config.session.mode) or Mode.SINGLE
        self.state = SessionState.IDLE
        self.your_station = your_station(config.operator)

        self.active_station_handle: Optional[int] = None
        self.ready_for_exchange_confirmation = False
        self.attempts = 0
        self.contact_start_time: Optional[float] = None
        self.total_contacts = 0
        self.last_responding: List[int] = []
        self.contacts: List[LoggedContact] = []
        self.logs: List[Dict[str, str]] = []
        self._contact_listeners: List[ContactListener] = []

    @property
    def mode_config(self) -> ModeConfig:
        return get_mode_config(self.mode)

    @property
    def active_stations(self) -> List[Station]:
        return self.pool.stations

    @property
    def active_station(self) -> Optional[Station]:
        return self.pool.get(self.active_station_handle)

    @property
    def audio_locked(self) -> bool:
        return self.scheduler.is_locked()

    def add_contact_listener(self, listener: ContactListener) -> None:
        self._contact_listeners.append(listener)

    def set_callers(self, callers: Sequence[CallerRecord], source_file: Optional[str] = None) -> None:
        self.generator.set_callers(callers)
        if source_file is not None:
            self.config.callsigns.callers_file = source_file
        if callers:
            self._log("INFO", f"Loaded {len(callers)} callers.", self.state)
        else:
            self._log("INFO", "Caller list is empty; callsigns will be generated.", self.state)

    # Commands

    def call_cq(self) -> None:
        if self._rejected_by_audio_lock("CQ"):
            return
        cfg = self.mode_config
        if not cfg.multi_station and len(self.pool) > 0:
            self._log("ERR", "CQ ignored: a station is already calling.", self.state)
            return

        self.state = SessionState.CALLING
        self.your_station = your_station(self.config.operator)
        now = self.clock.now()
        cq_end = self._transmit(self.your_station, render_cq(cfg, self.your_station), now)

        if cfg.multi_station:
            if len(self.pool) == 0 and self.pool.min_stations > 0:
                added = self.pool.ensure_minimum()
                self._log("INFO", f"{len(added)} initial stations calling.", self.state)
            elif self.pool.maybe_add_one(self.config.session.cq_join_probability) is not None:
                self._log("INFO", "One more station joined the pileup.", self.state)
            if self.contact_start_time is None:
                self.contact_start_time = now
            self.last_responding = self.pool.handles
            self._respond_with(self.last_responding, cq_end)
        else:
            self._next_single_station(cq_end)
        self._settle()

    def submit(self, text: str) -> None:
        if self._rejected_by_audio_lock("Send"):
            return
        message = (text or "").strip().upper()
        if not message:
            if len(self.pool) == 0:
                self.call_cq()
            return
        if len(self.pool) == 0:
            self._log("ERR", "Send ignored: no station is calling.", self.state)
            return

        self._log("RX", message, self.state)
        self.state = SessionState.EVALUATING
        sent_end = self._transmit(self.your_station, message, self.clock.now())

        if message in REPEAT_REQUESTS:
            self._repeat(sent_end)
        elif message == SLOW_DOWN_REQUEST:
            self._slow_down(sent_end)
        else:
            self._evaluate(message, sent_end)
        self._settle()

    def confirm_exchange(self, field1: str = "", field2: str = "") -> None:
        if self._rejected_by_audio_lock("TU"):
            return
        cfg = self.mode_config
        if not cfg.show_tu_step or not self.ready_for_exchange_confirmation:
            self._log("ERR", "TU ignored: no exchange is waiting for confirmation.", self.state)
            return
        handle = self.active_station_handle
        station = self.pool.get(handle)
        if handle is None or station is None:
            self.active_station_handle = None
            self.ready_for_exchange_confirmation = False
            self._log("ERR", "TU ignored: the station being worked is gone.", self.state)
            self._settle()
            return

        values = ((field1 or "").strip(), (field2 or "").strip())
        comparisons: List[FieldComparison] = []
        if cfg.extra_info_field_key:
            comparisons.append(compare_field(cfg.extra_info_field_key, values[0], station))
        if cfg.requires_info_field2 and cfg.extra_info_field_key2:
            comparisons.append(compare_field(cfg.extra_info_field_key2, values[1], station))

        arbitrary = None
        if cfg.signoff_arbitrary_field is not None:
            arbitrary = values[cfg.signoff_arbitrary_field]
        rendered = render_exchange(cfg, self.your_station, station, arbitrary)

        gap = self.config.session.reply_gap_s
        end = self._transmit(self.your_station, rendered.your_signoff, self.clock.now() + gap)
        end = self._reply(station, rendered.their_signoff, end)
        self._log_contact(station, comparisons)
        self._finish_contact(handle, end)
        self._settle()

    def stop(self) -> None:
        self.scheduler.cancel_all()
        self.pool.clear()
        self.active_station_handle = None
        self.ready_for_exchange_confirmation = False
        self.attempts = 0
        self.contact_start_time = None
        self.last_responding = []
        self.state = SessionState.IDLE
        self._log("INFO", "Stopped; CQ re-armed.", self.state)

    def reset(self) -> None:
        self.stop()
        self.contacts.clear()
        self.total_contacts = 0
        self.weights.reset()
        self._log("INFO", "Session reset; log and mistake history cleared.", self.state)

    def change_mode(self, name: str) -> None:
        mode = parse_mode(name)
        if mode is None:
            self._log("ERR", f"Unknown mode '{name}'.", self.state)
            return
        self.mode = mode
        self.config.session.mode = mode.value
        self.reset()
        self._log("INFO", f"Mode changed to {self.mode_config.mode_name}.", self.state)

    def export_session(self) -> Dict[str, object]:
        return {
            "state": self.state.value,
            "mode": self.mode.value,
            "config": asdict(self.config),
            "active_stations": [asdict(s) for s in self.pool.stations],
            "attempts": self.attempts,
            "total_contacts": self.total_contacts,
            "contacts": [asdict(c) for c in self.contacts],
            "mistakes": dict(self.weights.snapshot()),
            "logs": self.logs,
        }

    # Submission handling

    def _repeat(self, sent_end: float) -> None:
        self.state = SessionState.REPEATING
        handles = self._relevant_handles()
        self._respond_with(handles, sent_end)
        self.last_responding = handles
        self.attempts += 1

    def _slow_down(self, sent_end: float) -> None:
        self.state = SessionState.REPEATING
        step = int(self.config.session.qrs_step)
        floor = int(self.config.session.qrs_floor)
        handles = self._relevant_handles()
        for handle in handles:
            station = self.pool.get(handle)
            if station is None:
                continue
            if station.enable_farnsworth:
                station.farnsworth_speed = min(station.wpm, max(floor, station.farnsworth_speed - step))
            else:
                station.enable_farnsworth = True
                station.farnsworth_speed = min(station.wpm, max(floor, station.wpm - step))
            self._log("INFO", f"QRS: {station.callsign} now {station.wpm_label} WPM.", self.state)
        self._respond_with(handles, sent_end)
        self.attempts += 1

    def _evaluate(self, message: str, sent_end: float) -> None:
        cfg = self.mode_config
        unsure = message.endswith("?")
        submitted = message.rstrip("?")
        results = [
            (handle, self.matcher.classify(station.callsign, submitted))
            for handle, station in zip(self.pool.handles, self.pool.stations)
        ]

        perfect = next((h for h, r in results if r is MatchResult.PERFECT), None)
        if perfect is not None:
            station = self.pool.get(perfect)
            if unsure:
                self._transmit(
                    station,
                    self.config.session.unsure_ack,
                    sent_end + self.config.session.unsure_ack_gap_s,
                )
                self.attempts += 1
                return
            self._work_station(perfect, sent_end)
            return

        partial = [h for h, r in results if r is MatchResult.PARTIAL]
        if partial:
            for handle in partial:
                self.weights.record_mistake(self.pool.get(handle).callsign, submitted)
            self._respond_with(partial, sent_end)
            self.last_responding = partial
            self.attempts += 1
            return

        if not cfg.multi_station:
            for station in self.pool.stations:
                self.weights.record_mistake(station.callsign, submitted)
        if cfg.respond_on_no_match:
            self.last_responding = self.pool.handles
            self._respond_with(self.last_responding, sent_end)
        self.attempts += 1

    def _work_station(self, handle: int, sent_end: float) -> None:
        cfg = self.mode_config
        station = self.pool.get(handle)
        self.state = SessionState.EXCHANGING
        self.attempts += 1
        rendered = render_exchange(
            cfg,
            self.your_station,
            station,
            None,
            self.config.cut_numbers.mapping(),
        )
        end = self._transmit(self.your_station, rendered.your_exchange, sent_end)
        end = self._reply(station, rendered.their_exchange, end)

        if cfg.show_tu_step:
            self.active_station_handle = handle
            self.ready_for_exchange_confirmation = True
            return

        end = self._reply(self.your_station, rendered.your_signoff, end)
        end = self._reply(station, rendered.their_signoff, end)
        self._log_contact(station, [])
        self._finish_contact(handle, end)

    def _finish_contact(self, handle: int, after: float) -> None:
        cfg = self.mode_config
        self.pool.remove(handle)
        self.active_station_handle = None
        self.ready_for_exchange_confirmation = False
        self.attempts = 0

        if not cfg.multi_station:
            self._next_single_station(after)
            return

        if len(self.pool) < self.pool.min_stations:
            added = self.pool.ensure_minimum()
            self._log("INFO", f"{len(added)} stations joined to keep the minimum.", self.state)
        elif self.pool.maybe_add_one(self.config.session.join_probability) is not None:
            self._log("INFO", "A new station joined the pileup.", self.state)
        self.last_responding = self.pool.handles
        self._respond_with(self.last_responding, after)
        self.contact_start_time = self.clock.now()

    def _next_single_station(self, after: float) -> None:
        handle = self.pool.add()
        station = self.pool.get(handle)
        self.attempts = 0
        self.last_responding = [handle]
        self.contact_start_time = self._transmit(station, station.callsign, after + self.rng.random() + 1.0)

    def _log_contact(self, station: Station, comparisons: Sequence[FieldComparison]) -> None:
        self.state = SessionState.LOGGING
        self.total_contacts += 1
        started = self.contact_start_time
        duration = 0.0 if started is None else max(self.clock.now() - started, 0.0)
        contact = LoggedContact(
            number=self.total_contacts,
            callsign=station.callsign,
            wpm_label=station.wpm_label,
            attempts=self.attempts,
            duration_s=round(duration, 2),
            extra_info=format_annotations(comparisons),
            fields=tuple(comparisons),
            mode=self.mode.value,
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
        )
        self.contacts.append(contact)
        self._log("INFO", f"QSO #{contact.number} with {contact.callsign} logged ({contact.attempts} attempts).", self.state)
        for listener in list(self._contact_listeners):
            listener(contact)

    # Audio helpers

    def _relevant_handles(self) -> List[int]:
        live = [h for h in self.last_responding if h in self.pool]
        return live or self.pool.handles

    def _respond_with(self, handles: Sequence[int], start: float) -> float:
        end = start
        for handle in handles:
            station = self.pool.get(handle)
            if station is None:
                continue
            end = self._transmit(station, station.callsign, start + station.wait)
        return end

    def _reply(self, voice: Station, text: Optional[str], after: float) -> float:
        if not (text or "").strip():
            return after
        return self._transmit(voice, text, after + self.config.session.reply_gap_s)

    def _transmit(self, voice: Station, text: Optional[str], start: float) -> float:
        end = self.scheduler.schedule(voice, text, start)
        if (text or "").strip():
            self._log("TX", f"{voice.callsign}: {text}", self.state)
        return end

    def _rejected_by_audio_lock(self, command: str) -> bool:
        if not self.scheduler.is_locked():
            return False
        self._log("REJ", f"{command} ignored: audio busy until {self.scheduler.lock_time:.2f}.", self.state)
        return True

    def _settle(self) -> None:
        if self.ready_for_exchange_confirmation:
            self.state = SessionState.AWAITING_EXCHANGE_CONFIRMATION
        elif len(self.pool) > 0:
            self.state = SessionState.AWAITING_SUBMISSION
        else:
            self.state = SessionState.IDLE

    def _log(self, level: str, message: str, state: SessionState) -> None:
        self.logs.append(
            {
                "timestamp_utc": datetime.now(timezone.utc).isoformat(),
                "level": level,
                "state": state.value,
                "message": message,
            }
        )
        if len(self.logs) > 2000:
            self.logs = self.logs[-1000:]
