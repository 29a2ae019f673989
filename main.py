#!/usr/bin/env python3
"""
Card Price Monitor - Main Entry Point

Runs the Flask control API. The background monitor is stopped and joined
before the process exits (Ctrl+C or SIGTERM).

Usage:
    python main.py
    python main.py --cards cards.csv
"""

import argparse
import logging
import signal
import sys


def handle_sigterm(signum, frame):
    sys.exit(0)


def main():
    parser = argparse.ArgumentParser(description="Card Price Monitor")

    parser.add_argument("--host", default="0.0.0.0", help="Web app host")
    parser.add_argument("--port", type=int, default=8080, help="Web app port")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    parser.add_argument("--cards", help="Card list CSV to start monitoring at boot")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    from config.settings import Settings
    from monitoring.scheduler import PriceMonitor
    from monitoring.tabular import load_card_list
    from webapp.app import create_app

    settings = Settings.from_env()
    monitor = PriceMonitor(settings)

    if args.cards:
        monitor.start(load_card_list(args.cards))

    app = create_app(monitor=monitor)
    signal.signal(signal.SIGTERM, handle_sigterm)

    print("Starting Card Price Monitor API...")
    print(f"Server running at: http://{args.host}:{args.port}")
    print(f"Debug mode: {'ON' if args.debug else 'OFF'}")
    try:
        app.run(host=args.host, port=args.port, debug=args.debug, use_reloader=False)
    except KeyboardInterrupt:
        pass
    finally:
        print("Waiting for the monitor to finish...")
        monitor.shutdown()
        print("Server stopped.")


if __name__ == "__main__":
    main()
