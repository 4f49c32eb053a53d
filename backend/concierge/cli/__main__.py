"""Concierge CLI - Command Line Interface

Usage:
    # Interactive mode
    python -m concierge.cli

    # One-shot mode
    python -m concierge.cli "How do I plan an MVP?"

    # Resume an in-process session id (useful with a JSONL session log)
    python -m concierge.cli --session-id cli-1234
"""

import argparse

from concierge import __version__
from concierge.cli.terminal_ui import TerminalUI
from concierge.config import Settings, configure_logging
from concierge.core.orchestrator import AgentOrchestrator


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Advisor Concierge - multi-responder conversational assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Slash Commands (in interactive mode):
  /help        - Show available commands
  /history     - Show conversation history
  /stats       - Show orchestrator statistics
  /responders  - List registered responders
  /exit        - Exit CLI (also Ctrl+D)
        """
    )
    parser.add_argument("prompt", nargs="*", help="Optional prompt for one-shot mode")
    parser.add_argument("-s", "--session-id", help="Session ID to use")
    parser.add_argument("-m", "--model", help="Override the configured LLM model")
    parser.add_argument("--session-log-dir", help="Persist session logs as JSONL in this directory")
    parser.add_argument("--version", action="version", version=f"Advisor Concierge v{__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main():
    """Main CLI entry point"""
    args = parse_args()

    settings = Settings()
    if args.model:
        settings.llm_model = args.model
    if args.session_log_dir:
        settings.session_log_dir = args.session_log_dir
    configure_logging("DEBUG" if args.debug else "WARNING")

    ui = TerminalUI(AgentOrchestrator.from_settings(settings), session_id=args.session_id)
    try:
        if args.prompt:
            ui.execute_one_shot(" ".join(args.prompt))
        else:
            ui.start_interactive()
    except KeyboardInterrupt:
        print("\n\nExiting...")
        return 0
    finally:
        ui.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
