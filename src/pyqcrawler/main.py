from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Routes the command line to the crawl tool, or to the classification or search
tool when the first argument is 'classify' or 'search'. A global exception
hook makes sure a fatal crash ends up in the crawl log as well as on the
terminal.
"""

import logging
import os
import sys
import traceback
from typing import Any, List, Optional

# -----------------------------------------------------------------------------
# ENVIRONMENT INITIALIZATION
# -----------------------------------------------------------------------------

# Anti-shadowing and path visibility logic
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if not getattr(sys, 'frozen', False):
    SRC_DIR = os.path.dirname(BASE_DIR)
    if SRC_DIR not in sys.path:
        sys.path.insert(0, SRC_DIR)

CLASSIFY_COMMAND = "classify"
SEARCH_COMMAND = "search"

# -----------------------------------------------------------------------------
# GLOBAL SUPERVISOR (EXCEPTION HANDLING)
# -----------------------------------------------------------------------------

def global_exception_handler(exctype: type, value: BaseException, tb: Any) -> None:
    """
    Log an unhandled exception, flush the log queue and print the trace.

    The queue is drained before printing so the crash record reaches the
    dated log files of a debug run even though the process is about to end.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    stack_trace = "".join(traceback.format_exception(exctype, value, tb))

    logging.getLogger("pyqcrawler.supervisor").critical(
        f"FATAL EXCEPTION DETECTED: {value}\n{stack_trace}"
    )

    from pyqcrawler.infra.logging import shutdown_logging
    shutdown_logging()

    print("\n" + "=" * 80, file=sys.stderr)
    print("CRITICAL ERROR (PYQCRAWLER)", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(stack_trace, file=sys.stderr)


sys.excepthook = global_exception_handler

# -----------------------------------------------------------------------------
# EXECUTION ROUTING
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Dispatch to the crawl, classification or search tool.

    Args:
        argv: Command line arguments without the program name.

    Returns:
        int: Standard process exit code.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        if args and args[0] == CLASSIFY_COMMAND:
            from pyqcrawler.interface.cli.classify_app import main as classify_main
            return classify_main(args[1:])
        if args and args[0] == SEARCH_COMMAND:
            from pyqcrawler.interface.cli.search_app import main as search_main
            return search_main(args[1:])

        from pyqcrawler.interface.cli.app import main as cli_main
        return cli_main(args)
    except Exception as e:
        global_exception_handler(type(e), e, sys.exc_info()[2])
        return 1


if __name__ == "__main__":
    sys.exit(main())
