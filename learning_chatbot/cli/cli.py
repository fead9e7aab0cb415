"""
cli.py - interactive chat front end
Features:
- Line based conversation: every line is learnt from, then answered
- ++ commands for saving, help, topic and timing readouts
- Optional brain file restored on start and written on ++save
- Uses Rich for tables and formatting
"""

import argparse
from typing import Callable, List, Optional

# ui styling with Rich
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Prompt
from rich.markup import escape
from rich import box

from learning_chatbot.chatbot import LearningChatbot
from learning_chatbot.utils.config_manager import Config
from learning_chatbot.utils.logger_utils import Log

HELP_TEXT = (
    "At any time during the conversation, type\n"
    "   ++done    to exit without saving\n"
    "   ++save    to save the brain and exit\n"
    "   ++topics  to see what the bot thinks you are talking about\n"
    "   ++stats   to see timing stats\n"
    "   ++help    to show this again"
)


class CLI:
    """Command-line chat loop around a LearningChatbot."""
    def __init__(self,
                 bot: LearningChatbot,
                 console: Optional[Console] = None,
                 ask: Optional[Callable[[], str]] = None,
                 show_timing: bool = False):
        self.bot = bot
        self.console = console or Console()
        self._ask = ask or (lambda: Prompt.ask("[green]    You?[/green]", default="", console=self.console))
        self.show_timing = show_timing
        self.running = True
        self.saved = False

    def run(self):
        """
        Main interactive loop:
        - prompts the user for a line
        - handles ++ commands
        - otherwise learns from the line and prints the reply
        """
        self.console.rule("[bold magenta]Welcome to the Learning Chatbot[/bold magenta]")
        self.show_help()

        while self.running:
            try:
                line = self._ask()
            except (EOFError, KeyboardInterrupt):
                self._exit(save=False)
                break
            if line is None:
                self._exit(save=False)
                break

            line = line.strip()
            if line.startswith("++"):
                self.handle_command(line)
                continue
            self.turn(line)

    # COMMAND HANDLING -----------------------------------------------------------
    def handle_command(self, cmd: str):
        c = cmd.lower()

        if c == "++done":
            self._exit(save=False)
            return

        if c == "++save":
            self._exit(save=True)
            return

        if c == "++help":
            self.show_help()
            return

        if c == "++topics":
            self.show_topics()
            return

        if c == "++stats":
            self.show_stats()
            return

        self.console.print(f"[red]Unknown command:[/red] {escape(cmd)}")

    # CONVERSATION ---------------------------------------------------------------
    def turn(self, line: str) -> str:
        reply = self.bot.respond(line)
        self.console.print(f"[cyan]Chatbot?[/cyan] {escape(reply)}", highlight=False)
        if self.show_timing:
            m = self.bot.metrics
            self.console.print(
                f"[dim]learn {m.avg('ingest_time') * 1000:.1f} ms, "
                f"think {m.avg('generate_time') * 1000:.1f} ms (avg)[/dim]"
            )
        return reply

    # DISPLAY ---------------------------------------------------------------------
    def show_help(self):
        self.console.print(Panel(HELP_TEXT, title="Help", border_style="cyan", box=box.ROUNDED))

    def show_topics(self, n: int = 10):
        table = Table(title="Current Topics", box=box.SIMPLE, show_edge=False)
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Word", style="bold")
        table.add_column("Score", justify="right", style="magenta")
        for i, (word, score) in enumerate(self.bot.topics(n), 1):
            table.add_row(str(i), word, f"{score:.3f}")
        self.console.print(table)

    def show_stats(self):
        table = Table(title="Stats", box=box.MINIMAL)
        table.add_column("Metric", style="cyan")
        table.add_column("Count", justify="right")
        table.add_column("Avg (ms)", justify="right")
        table.add_row("words known", str(self.bot.brain.vocabulary_size()), "")
        table.add_row("turns", str(self.bot.turns), "")
        for key, (count, avg) in sorted(self.bot.metrics.summary().items()):
            table.add_row(key, str(count), f"{avg * 1000:.2f}")
        self.console.print(table)

    # EXIT -------------------------------------------------------------------------
    def _exit(self, save: bool):
        if save:
            if self.bot.save():
                self.saved = True
                self.console.print(f"[green]Brain saved to[/green] {self.bot.brain_file}")
            else:
                self.console.print("[red]Save failed, see the log for details.[/red]")
        self.console.rule("[red]Bye[/red]")
        self.running = False


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="learning-chatbot",
                                description="A chatbot that learns word order from what you tell it.")
    p.add_argument("brain", nargs="?", default=None,
                   help="brain file to restore from and save to")
    p.add_argument("--config", default="config.json", help="path to the JSON config file")
    p.add_argument("--seed", type=int, default=None, help="seed for reproducible replies")
    p.add_argument("--timing", action="store_true", help="show timings after each reply")
    return p


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None,
         ask: Optional[Callable[[], str]] = None) -> int:
    args = build_parser().parse_args(argv)
    console = console or Console()
    cfg = Config(args.config)
    seed = args.seed if args.seed is not None else cfg.get("seed")

    if args.brain:
        console.print(f"[dim]Using {args.brain} as brain file, if possible.[/dim]")
        bot = LearningChatbot.load(args.brain, config=cfg, seed=seed)
    else:
        bot = LearningChatbot(config=cfg, seed=seed)
    Log.write(f"[CLI] session start, {bot.brain.vocabulary_size()} words known, seed={seed}")

    cli = CLI(bot, console=console, ask=ask,
              show_timing=args.timing or bool(cfg.get("show_timing")))
    cli.run()
    Log.write(f"[CLI] session end after {bot.turns} turns")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
