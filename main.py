"""
Gasline entry point.

The webhook transport and provider adapters are deployed separately and
call ``StateDispatcher.handle``. This entry point runs the conversation
offline against the in-memory store.

Usage:
    Console mode:  python main.py console
    Scenario mode: python main.py scenario tank
"""

import logging
import sys

from gasline.config import settings

logger = logging.getLogger(__name__)


def _run_console_mode() -> None:
    """Start the interactive offline console."""
    from console_demo import main as console_main

    console_main([])


def _run_scenario_mode(name: str) -> None:
    """Auto-play one of the scripted walkthroughs."""
    from console_demo import main as console_main

    console_main(["--scenario", name])


if __name__ == "__main__":
    logger.debug("Starting with unit price %.2f", settings.business.unit_price)
    if len(sys.argv) > 2 and sys.argv[1] == "scenario":
        _run_scenario_mode(sys.argv[2])
    elif len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        print(__doc__)
        sys.exit(1)
