from .adaptive import AdaptiveWeightEngine
from .audio import MorseAudioEngine
from .callsign_pool import CallerRecord, load_callers_file, parse_caller_lines, parse_caller_text
from .config import AppConfig, AudioRuntimeConfig, load_config, save_config
from .encoder import CWEncoder, CWEncoderConfig
from .exchange import CutNumberConfig, RenderedExchange, apply_cut_numbers, render_exchange
from .fields import FieldComparison, FieldVerdict, compare_field
from .matching import FuzzyCallsignMatcher, MatchResult, PartialMatchPolicy, classify
from .modes import MODE_CONFIGS, Mode, ModeConfig, get_mode_config
from .pool import StationPool
from .session import LoggedContact, SessionConfig, SessionController, SessionState
from .stations import Station, StationGenerator
from .timing import MonotonicClock, TimingScheduler

__all__ = [
    "AdaptiveWeightEngine",
    "MorseAudioEngine",
    "CallerRecord",
    "load_callers_file",
    "parse_caller_lines",
    "parse_caller_text",
    "AppConfig",
    "AudioRuntimeConfig",
    "load_config",
    "save_config",
    "CWEncoder",
    "CWEncoderConfig",
    "CutNumberConfig",
    "RenderedExchange",
    "apply_cut_numbers",
    "render_exchange",
    "FieldComparison",
    "FieldVerdict",
    "compare_field",
    "FuzzyCallsignMatcher",
    "MatchResult",
    "PartialMatchPolicy",
    "classify",
    "MODE_CONFIGS",
    "Mode",
    "ModeConfig",
    "get_mode_config",
    "StationPool",
    "LoggedContact",
    "SessionConfig",
    "SessionController",
    "SessionState",
    "Station",
    "StationGenerator",
    "MonotonicClock",
    "TimingScheduler",
]
