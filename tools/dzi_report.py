# -*- coding: utf-8 -*-
from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape

STATUS_STYLES = {
    "ok": "[bold green]OK[/]",
    "failed": "[bold red]FAILED[/]",
    "cancelled": "[bold yellow]CANCELLED[/]",
}


class Reporter:
    """Console output for a converter run, gated by the verbose/debug flags."""

    def __init__(self, console=None, verbose=False, debug=False):
        self.console = console or Console(highlight=False)
        self.verbose_enabled = verbose or debug
        self.debug_enabled = debug

    @classmethod
    def for_config(cls, config, console=None):
        return cls(console=console, verbose=config.verbose, debug=config.debug)

    def info(self, msg):
        self.console.print(msg)

    def verbose(self, msg):
        if self.verbose_enabled:
            self.console.print(msg)

    def debug(self, msg):
        if self.debug_enabled:
            self.console.print(f"[dim]{escape(msg)}[/dim]")

    def error(self, msg):
        self.console.print(f"[bold red]❌ {escape(msg)}[/]")


def build_report_table(report):
    table = Table(title="Deep Zoom Conversion Report", box=box.ROUNDED, border_style="blue")
    table.add_column("Image", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Levels", justify="right")
    table.add_column("Tiles", justify="right")
    table.add_column("Detail", style="dim")

    for r in report.results:
        detail = str(r.descriptor) if r.ok else f"{r.error_kind}: {r.message}"
        levels = str(r.levels) if r.levels else "-"
        tiles = str(r.tiles) if r.tiles else "-"
        table.add_row(escape(r.source.name), STATUS_STYLES.get(r.status, r.status), levels, tiles, escape(detail))
    return table


def print_report(report, console):
    console.print(build_report_table(report))
    summary = f"✨ {report.succeeded} converted"
    if report.failed: summary += f", [red]{report.failed} failed[/]"
    if report.cancelled: summary += f", [yellow]{report.cancelled} cancelled[/]"
    console.print(summary)
