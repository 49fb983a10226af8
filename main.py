#!/usr/bin/env python3
"""
PPG Monitor – command-line driver.

Usage
-----
    python main.py [OPTIONS]

Options
-------
    --fps INT            Expected frame rate (default: 30)
    --window FLOAT       Sample window in seconds (default: 15)
    --duration FLOAT     Stop after this many seconds (default: 30)
    --camera-index INT   OpenCV camera index (default: 0)
    --roi FLOAT          Average only a centred box of this relative size
    --verbose            Debug logging

Hold a fingertip over the lens (torch on, if available) and keep still.
Ctrl-C stops early; the session summary and report are printed either way.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time

from ppg_monitor.camera import CameraSource, sample_from_frame
from ppg_monitor.config import EngineConfig
from ppg_monitor.session import SessionController

logger = logging.getLogger("ppg_monitor")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Camera PPG heart-rate monitor",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--fps", type=int, default=30,
                        help="Expected capture frame rate")
    parser.add_argument("--window", type=float, default=15.0,
                        help="Sample window in seconds")
    parser.add_argument("--duration", type=float, default=30.0,
                        help="Measurement length in seconds")
    parser.add_argument("--camera-index", type=int, default=0,
                        help="OpenCV VideoCapture index")
    parser.add_argument("--roi", type=float, default=None,
                        help="Relative size of the centred averaging box (0-1]")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig(
        sampling_frequency_hz=float(args.fps),
        buffer_duration_seconds=args.window,
        recompute_interval_frames=max(1, int(args.fps)),
    )


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s – %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = build_config(args)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    controller = SessionController(config)
    camera = CameraSource(
        fps=args.fps,
        camera_index=args.camera_index,
    )
    log_interval = max(1, args.fps)  # about once per second

    try:
        with camera:
            controller.start_measurement()
            started = time.monotonic()
            for frame in camera.frames():
                sample = sample_from_frame(frame, time.monotonic(), args.roi)
                status = controller.process_frame(sample)

                if status.frame % log_interval == 0:
                    if status.heart_rate:
                        logger.info(
                            "BPM=%d  contact=%.1f  confidence=%s",
                            status.heart_rate,
                            status.signal_quality,
                            controller.confidence.value,
                        )
                    else:
                        logger.info(
                            "Waiting for signal…  contact=%.1f  buffer=%.0f%%",
                            status.signal_quality,
                            100 * controller.state.buffer.fill_ratio,
                        )

                if time.monotonic() - started >= args.duration:
                    break
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1

    summary = controller.stop_measurement()
    report = controller.generate_report()
    print(json.dumps({"summary": summary.to_dict(), "report": report.to_dict()}, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    return run(parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
