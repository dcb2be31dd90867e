from __future__ import annotations

import argparse
import json
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from cwsim.audio import MorseAudioEngine, list_output_devices
from cwsim.callsign_pool import load_callers_file
from cwsim.config import AppConfig, load_config, save_config
from cwsim.modes import Mode, parse_mode
from cwsim.session import LoggedContact, SessionController
from cwsim.timing import MonotonicClock

HELP_TEXT = (
    "Type a callsign and press Enter to send it (empty line calls CQ).\n"
    "Commands: /cq  /tu FIELD1 [FIELD2]  /stop  /reset  /mode NAME  /stats  /export  /help  /quit"
)


def _load_callers_from_config(controller: SessionController, cfg: AppConfig, log_fn) -> bool:
    path_str = (cfg.callsigns.callers_file or "").strip()
    if not path_str:
        return False
    p = Path(path_str)
    if not p.exists():
        log_fn(f"Callers file not found: {p}")
        return False
    callers = load_callers_file(p)
    controller.set_callers(callers, str(p))
    log_fn(f"Callers loaded: {len(callers)} from {p}")
    return True


def _print_devices_cli() -> int:
    print("Output devices:")
    for idx, name in list_output_devices():
        print(f"  [{idx}] {name}")
    return 0


def _print_contact(contact: LoggedContact) -> None:
    extra = f"  {contact.extra_info}" if contact.extra_info else ""
    print(
        f"LOG #{contact.number} {contact.callsign}  {contact.wpm_label} WPM  "
        f"attempts={contact.attempts}  {contact.duration_s:.1f}s{extra}"
    )


def _print_new_transmissions(controller: SessionController, seen: int, clock: MonotonicClock) -> int:
    scheduler = controller.scheduler
    if scheduler.scheduled_count < seen:
        seen = 0
    now = clock.now()
    for item in scheduler.since(seen):
        print(f"  +{item.start - now:5.1f}s  {item.callsign:<10} {item.text}")
    return scheduler.scheduled_count


def _print_stats(controller: SessionController) -> None:
    cfg = controller.mode_config
    print(f"mode: {cfg.mode_name}  state: {controller.state.value}")
    print(f"calling: {len(controller.pool)}  contacts: {controller.total_contacts}  attempts: {controller.attempts}")
    mistakes = controller.weights.snapshot()
    if mistakes:
        worst = sorted(mistakes.items(), key=lambda kv: (-kv[1], kv[0]))[:10]
        print("missed characters: " + " ".join(f"{ch}:{n}" for ch, n in worst))
    if cfg.show_tu_step:
        hint = cfg.info_field_placeholder
        if cfg.requires_info_field2:
            hint = f"{hint} {cfg.info_field2_placeholder}"
        print(f"TU fields: {hint}")


def _export(controller: SessionController) -> Path:
    out_dir = Path("logs")
    out_dir.mkdir(exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    out_file = out_dir / f"cwsim_session_{stamp}.json"
    out_file.write_text(json.dumps(controller.export_session(), indent=2), encoding="utf-8")
    return out_file


def _run_session_cli(cfg: AppConfig, cfg_path: Path, seed: Optional[int]) -> int:
    clock = MonotonicClock()
    engine = MorseAudioEngine(
        sample_rate=cfg.audio.sample_rate,
        playback=cfg.audio.playback,
        device=cfg.audio.output_device,
    )
    controller = SessionController(
        cfg,
        audio=engine,
        clock=clock,
        rng=random.Random(seed) if seed is not None else None,
    )
    controller.add_contact_listener(_print_contact)
    _load_callers_from_config(controller, cfg, print)

    print(f"{controller.mode_config.mode_name} mode. {HELP_TEXT}")
    seen = 0
    try:
        while True:
            try:
                line = input("tx> ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            busy = controller.audio_locked
            cmd, _, rest = line.partition(" ")
            cmd = cmd.lower()
            if cmd == "/quit":
                break
            if cmd == "/help":
                print(HELP_TEXT)
                continue
            if cmd == "/stats":
                _print_stats(controller)
                continue
            if cmd == "/export":
                print(f"Exported to {_export(controller)}")
                continue
            if cmd == "/stop":
                controller.stop()
                seen = 0
                print("Stopped.")
                continue
            if cmd == "/reset":
                controller.reset()
                seen = 0
                print("Reset applied.")
                continue
            if cmd == "/mode":
                if parse_mode(rest) is None:
                    print("Modes: " + ", ".join(m.value for m in Mode))
                    continue
                controller.change_mode(rest)
                save_config(cfg_path, cfg)
                seen = 0
                print(f"{controller.mode_config.mode_name} mode.")
                continue

            if busy:
                print(f"(busy for {controller.scheduler.lock_time - clock.now():.1f}s)")
                continue
            if cmd == "/cq":
                controller.call_cq()
            elif cmd == "/tu":
                fields = rest.split()
                controller.confirm_exchange(*(fields + ["", ""])[:2])
            else:
                controller.submit(line)
            seen = _print_new_transmissions(controller, seen, clock)
    finally:
        engine.close()
        save_config(cfg_path, cfg)
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="CW contact simulator / pileup trainer")
    p.add_argument("--config", default="config.yaml", help="YAML config path.")
    p.add_argument("--mode", default=None, help="Operating mode: " + ", ".join(m.value for m in Mode))
    p.add_argument("--callsign", default=None, help="Your callsign.")
    p.add_argument("--callers-file", default=None, help="CSV of CALL,NAME,STATE callers.")
    p.add_argument("--min-stations", type=int, default=None, help="Minimum stations calling.")
    p.add_argument("--max-stations", type=int, default=None, help="Maximum stations calling.")
    p.add_argument("--cut-numbers", action="store_true", help="Send exchange digits as cut numbers.")
    p.add_argument("--playback", action="store_true", help="Play the tones on the sound device.")
    p.add_argument("--output-device", type=int, default=None, help="Output device index.")
    p.add_argument("--list-devices", action="store_true", help="List audio devices and exit.")
    p.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible session.")
    return p


def _apply_cli_overrides(cfg: AppConfig, args: argparse.Namespace) -> None:
    if args.mode:
        mode = parse_mode(args.mode)
        if mode is not None:
            cfg.session.mode = mode.value
    if args.callsign:
        cfg.operator.callsign = args.callsign.upper()
    if args.callers_file:
        cfg.callsigns.callers_file = args.callers_file
    if args.min_stations is not None:
        cfg.stations.min_stations = max(0, int(args.min_stations))
    if args.max_stations is not None:
        cfg.stations.max_stations = max(1, int(args.max_stations))
    if cfg.stations.max_stations < cfg.stations.min_stations:
        cfg.stations.max_stations = cfg.stations.min_stations
    if args.cut_numbers:
        cfg.cut_numbers.enabled = True
    if args.playback:
        cfg.audio.playback = True
    if args.output_device is not None:
        cfg.audio.output_device = args.output_device


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    cfg_path = Path(args.config)
    cfg = load_config(cfg_path)
    _apply_cli_overrides(cfg, args)

    if args.list_devices:
        return _print_devices_cli()
    return _run_session_cli(cfg, cfg_path, args.seed)


if __name__ == "__main__":
    raise SystemExit(main())
