#!/usr/bin/env python3
"""
KUBEFDB CLI
-----------
Command-line front end for the configuration compiler. Reads a
FoundationDBCluster manifest and prints what a process would be started
with: the monitor configuration, the legacy start command, or a report
for every process of a pod.

Author: KubeFDB Team
Date: 2026-10-19
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from rich.logging import RichHandler

from kubefdb.cli.formatter import ConfFormatter, console
from kubefdb.client.pod_client import PodFactsClient
from kubefdb.core.engine import CompilerEngine
from kubefdb.core.errors import ConfigurationError
from kubefdb.core.models import PodFacts, ProcessClass

VERSION = "kubefdb v1.0.0"


class KubeFdbCLI:
    """
    CLI wrapper that translates user commands into Engine calls.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubefdb",
            description="KubeFDB - FoundationDB process configuration compiler",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = ConfFormatter()
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("-V", "--version", action="version", version=VERSION)
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")
        class_names = [c.value for c in ProcessClass if c != ProcessClass.GENERAL]

        # 'conf' subcommand - monitor configuration
        conf_parser = subparsers.add_parser("conf", help="Render the monitor configuration")
        conf_parser.add_argument("manifest", help="Path to a FoundationDBCluster manifest")
        conf_parser.add_argument("--class", dest="process_class", default="storage", choices=class_names)
        conf_parser.add_argument("--count", type=int, default=1, help="Processes of this class per pod")
        conf_parser.add_argument("--port-base", type=int, default=0, help="Processes of other classes placed before this one")
        conf_parser.add_argument("--format", choices=["table", "json", "yaml"], default="table")
        conf_parser.add_argument("--compare", metavar="CURRENT", help="Diff against an existing JSON configuration")

        # 'command' subcommand - legacy start command
        cmd_parser = subparsers.add_parser("command", help="Render the fdbserver start command")
        cmd_parser.add_argument("manifest", help="Path to a FoundationDBCluster manifest")
        cmd_parser.add_argument("--class", dest="process_class", default="storage", choices=class_names)
        cmd_parser.add_argument("--number", type=int, default=1, help="Process number (1-based)")
        cmd_parser.add_argument("--count", type=int, default=1, help="Processes of this class per pod")
        cmd_parser.add_argument("--port-base", type=int, default=0, help="Processes of other classes placed before this one")
        self._add_pod_args(cmd_parser)

        # 'pod' subcommand - every process of a pod
        pod_parser = subparsers.add_parser("pod", help="Render every process of a pod")
        pod_parser.add_argument("manifest", help="Path to a FoundationDBCluster manifest")
        pod_parser.add_argument("--layout", required=True, help="Processes per class, e.g. storage=2,log=1")
        self._add_pod_args(pod_parser, required=False)

    def _add_pod_args(self, parser: argparse.ArgumentParser, required: bool = True):
        parser.add_argument("--pod-ip", required=required, help="IP assigned to the pod")
        parser.add_argument("--service-ip", default="", help="Per-pod service IP")
        parser.add_argument("--node-name", default="", help="Node the pod is scheduled on")
        parser.add_argument("--process-group", default=None,
                            help="Process group ID, shared by every class (default: <class>-1 per class)")
        parser.add_argument("--env", action="append", default=[], metavar="KEY=VALUE",
                            help="Extra pod environment variable (repeatable)")

    def _pod_facts(self, args: argparse.Namespace, process_class: str) -> PodFacts:
        env: Dict[str, str] = {}
        for item in args.env:
            key, separator, value = item.partition("=")
            if not separator or not key:
                raise ConfigurationError(f"--env expects KEY=VALUE, got '{item}'")
            env[key] = value
        return PodFacts(
            process_group_id=args.process_group or f"{process_class}-1",
            pod_ip=args.pod_ip or "",
            service_ip=args.service_ip,
            node_name=args.node_name,
            env=env,
        )

    def _parse_layout(self, layout: str) -> Dict[str, int]:
        result: Dict[str, int] = {}
        for item in layout.split(","):
            name, separator, count = item.strip().partition("=")
            try:
                result[ProcessClass.parse(name.strip()).value] = int(count) if separator else 1
            except ValueError:
                raise ConfigurationError(f"Invalid layout entry '{item}'")
        return result

    def _run_conf(self, engine: CompilerEngine, args: argparse.Namespace) -> int:
        conf = engine.monitor_conf(args.process_class, args.count, args.port_base)
        exporter = engine.exporter

        if args.compare:
            current_text = Path(args.compare).read_text(encoding='utf-8-sig')
            current = exporter.load_json(current_text)
            desired_text = exporter.to_json(conf)
            if engine.has_changed(current, conf):
                self.formatter.display_diff(exporter.to_json(current), desired_text, args.compare)
                return 2
            self.formatter.display_diff(desired_text, desired_text, args.compare)
            return 0

        if args.format == "json":
            self.formatter.show_document(exporter.to_json(conf), "json")
        elif args.format == "yaml":
            self.formatter.show_document(exporter.to_yaml(conf), "yaml")
        else:
            self.formatter.show_conf(conf, f"{engine.cluster.name} / {args.process_class}")
        return 0

    def _run_command(self, engine: CompilerEngine, args: argparse.Namespace) -> int:
        client = PodFactsClient(engine.cluster, self._pod_facts(args, args.process_class))
        command = engine.start_command(args.process_class, client, args.number, args.count, args.port_base)
        self.formatter.show_command(command)
        return 0

    def _run_pod(self, engine: CompilerEngine, args: argparse.Namespace) -> int:
        layout = self._parse_layout(args.layout)
        clients = None
        if args.pod_ip:
            clients = {
                process_class: PodFactsClient(engine.cluster, self._pod_facts(args, process_class))
                for process_class in layout
            }

        reports = engine.compile_pod(layout, clients)
        summary = engine.generate_summary(reports)
        self.formatter.show_reports(reports, summary)
        return 0 if summary["successful"] == summary["total"] else 1

    def run(self, argv: Optional[List[str]] = None) -> int:
        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

        if not args.command:
            self.parser.print_help()
            return 0

        try:
            engine = CompilerEngine.from_manifest(args.manifest)
            if args.command == "conf":
                return self._run_conf(engine, args)
            if args.command == "command":
                return self._run_command(engine, args)
            return self._run_pod(engine, args)
        except (ConfigurationError, LookupError, OSError) as e:
            self.formatter.error(str(e))
            return 1


def main():
    try:
        sys.exit(KubeFdbCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
