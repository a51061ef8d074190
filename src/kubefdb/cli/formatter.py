# src/kubefdb/cli/formatter.py
import difflib
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from kubefdb.monitor.arguments import (
    Argument,
    Concatenation,
    EnvironmentReference,
    Literal,
    ProcessNumberComputed,
)
from kubefdb.monitor.conf import MonitorConfiguration

console = Console()


def describe_argument(argument: Argument) -> str:
    """Human-readable form of a symbolic argument, e.g. --public_address=[$FDB_PUBLIC_IP]:{4499+2n}"""
    if isinstance(argument, Literal):
        return argument.value
    if isinstance(argument, Concatenation):
        return "".join(describe_argument(part) for part in argument.parts)
    if isinstance(argument, EnvironmentReference):
        return f"${argument.name}"
    if isinstance(argument, ProcessNumberComputed):
        if argument.offset:
            return f"{{{argument.offset}+{argument.multiplier}n}}"
        return "{n}" if argument.multiplier == 1 else f"{{{argument.multiplier}n}}"
    return repr(argument)


class ConfFormatter:
    """
    Renders monitor configurations, start commands and diffs for the terminal.
    """

    def __init__(self, output: Console = console):
        self.console = output

    def show_conf(self, conf: MonitorConfiguration, title: str):
        table = Table(title=title, show_lines=False, header_style="bold magenta")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Argument", style="cyan")

        for index, argument in enumerate(conf.arguments):
            table.add_row(str(index), describe_argument(argument))

        self.console.print(table)
        self.console.print(
            f"[bold white]version[/bold white] {conf.version}   "
            f"[bold white]servers[/bold white] {conf.server_count}   "
            f"[bold white]binary[/bold white] {conf.binary_path or '(monitor default)'}"
        )

    def show_document(self, text: str, language: str):
        self.console.print(Syntax(text.rstrip(), language, theme="monokai", line_numbers=False))

    def show_command(self, command: str):
        self.console.print(Panel(command, title="[bold green]Start Command[/bold green]", border_style="green"))

    def display_diff(self, current_text: str, desired_text: str, file_name: str) -> bool:
        """
        Renders a colorized diff between the running and the desired
        configuration. Returns True when they differ.
        """
        diff_list = list(difflib.unified_diff(
            current_text.splitlines(),
            desired_text.splitlines(),
            fromfile=f"current: {file_name}",
            tofile="desired",
            lineterm=""
        ))

        if not diff_list:
            self.console.print(f"[dim]No changes for {file_name}.[/dim]")
            return False

        syntax = Syntax("\n".join(diff_list), "diff", theme="monokai", line_numbers=True)
        self.console.print(Panel(syntax, title=f"Pending rollout: {file_name}", border_style="yellow"))
        return True

    def show_reports(self, reports: List[Dict[str, Any]], summary: Dict[str, Any]):
        table = Table(title="KubeFDB Report", show_lines=True, header_style="bold magenta")
        table.add_column("Class", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("Detail")

        for r in reports:
            color = "green" if r.get("success") else "red"
            detail = r.get("command") or r.get("error") or f"{r.get('argument_count', 0)} arguments"
            table.add_row(str(r.get("process_class")), f"[{color}]{r.get('status')}[/{color}]", detail)

        self.console.print(table)
        self.console.print(Panel(
            f"Total: {summary['total']}   "
            f"Successful: [green]{summary['successful']}[/green]   "
            f"Config errors: [red]{summary['config_errors']}[/red]   "
            f"Lookup errors: [red]{summary['lookup_errors']}[/red]",
            border_style="dim"
        ))

    def error(self, message: str):
        self.console.print(f"[bold red]Error:[/bold red] {message}")
