"""
DevTrace CLI — Project bootstrap, server and scoring commands.

Commands:
- devtrace init      — Write devtrace.yaml and an empty task file
- devtrace run       — Start the HTTP API (uvicorn)
- devtrace score     — Quality score for a test status / complexity pair
- devtrace table     — Print the full quality score table
- devtrace metrics   — Dashboard metrics for the stored tasks
- devtrace list      — List stored tasks
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from devtrace.engine.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG_YAML,
    DevTraceConfig,
    load_config,
)
from devtrace.engine.errors import DevTraceError
from devtrace.records.enums import Complexity, Status, TestStatus
from devtrace.rules.quality_score import calculate_quality_score, quality_score_table

logger = logging.getLogger("devtrace.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="devtrace",
        description="DevTrace — development task tracking with quality scoring",
    )
    parser.add_argument("--config", help=f"Path to {CONFIG_FILENAME} (default: auto-discover)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # devtrace init
    init_parser = subparsers.add_parser("init", help="Create devtrace.yaml and the task file")
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing devtrace.yaml"
    )

    # devtrace run
    run_parser = subparsers.add_parser("run", help="Start the HTTP API server")
    run_parser.add_argument("--host", help="Host to bind (default: from config)")
    run_parser.add_argument("--port", type=int, help="Port to bind (default: from config)")

    # devtrace score
    score_parser = subparsers.add_parser("score", help="Quality score for one combination")
    score_parser.add_argument("test_status", help=f"One of: {', '.join(TestStatus.values())}")
    score_parser.add_argument("complexity", help=f"One of: {', '.join(Complexity.values())}")

    # devtrace table
    subparsers.add_parser("table", help="Print every quality score combination")

    # devtrace metrics
    metrics_parser = subparsers.add_parser("metrics", help="Dashboard metrics for stored tasks")
    metrics_parser.add_argument("--json", action="store_true", help="Print raw JSON")

    # devtrace list
    list_parser = subparsers.add_parser("list", help="List stored tasks")
    list_parser.add_argument("--status", help=f"Filter by status ({', '.join(Status.values())})")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config) if args.command != "init" else None
        if config is not None:
            logging.basicConfig(
                level=config.logging.level,
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )

        if args.command == "init":
            return cmd_init(args)
        elif args.command == "run":
            return cmd_run(args, config)
        elif args.command == "score":
            return cmd_score(args)
        elif args.command == "table":
            return cmd_table(args)
        elif args.command == "metrics":
            return cmd_metrics(args, config)
        elif args.command == "list":
            return cmd_list(args, config)
    except DevTraceError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    parser.print_help()
    return 0


def _service(config: DevTraceConfig):
    from devtrace.services.task_service import TaskService
    from devtrace.storage.json_store import JsonTaskStore

    return TaskService(JsonTaskStore(config.storage.path))


def cmd_init(args: argparse.Namespace) -> int:
    """Write a default devtrace.yaml and create the empty task file."""
    config_path = Path(args.config or CONFIG_FILENAME)
    if config_path.exists() and not args.force:
        print(f"{config_path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
    print(f"Wrote {config_path}")

    # storage.path is relative to the working directory, as for every other command
    config = load_config(str(config_path))
    data_path = Path(config.storage.path)

    from devtrace.storage.json_store import JsonTaskStore

    JsonTaskStore(data_path).initialize()
    print(f"Task file: {data_path}")
    return 0


def cmd_run(args: argparse.Namespace, config: DevTraceConfig) -> int:
    """Serve the API with uvicorn."""
    import uvicorn

    from devtrace.api.server import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    print(f"DevTrace API on http://{host}:{port}  (tasks: {config.storage.path})")
    uvicorn.run(create_app(config), host=host, port=port, log_level=config.logging.level.lower())
    return 0


def cmd_score(args: argparse.Namespace) -> int:
    score = calculate_quality_score(
        TestStatus.parse(args.test_status), Complexity.parse(args.complexity)
    )
    print(score)
    return 0


def cmd_table(args: argparse.Namespace) -> int:
    table = quality_score_table()
    header = f"{'':<12}" + "".join(f"{c.value:>8}" for c in Complexity)
    print(header)
    for test_status, row in table.items():
        print(f"{test_status.value:<12}" + "".join(f"{row[c]:>8}" for c in Complexity))
    return 0


def cmd_metrics(args: argparse.Namespace, config: DevTraceConfig) -> int:
    metrics = _service(config).get_metrics()
    if args.json:
        print(json.dumps(metrics.to_json_dict(), indent=2))
        return 0

    print(f"Total tasks:        {metrics.total_tasks}")
    print(f"Tested:             {metrics.tested_percentage}%")
    print(f"Avg quality score:  {metrics.avg_quality_score}")
    print(f"At risk (< 50):     {metrics.tasks_at_risk}")
    print("Status:             " + ", ".join(
        f"{status.value}={count}" for status, count in metrics.status_breakdown.items()
    ))
    print("Test coverage:      " + ", ".join(
        f"{test_status.value}={count}" for test_status, count in metrics.test_coverage.items()
    ))
    return 0


def cmd_list(args: argparse.Namespace, config: DevTraceConfig) -> int:
    status = Status.parse(args.status) if args.status else None
    tasks = _service(config).list_tasks(status=status)
    if not tasks:
        print("No tasks found.")
        return 0

    for task in tasks:
        print(
            f"[{task.quality_score:>3}] {task.task_name} — {task.developer_name} "
            f"({task.status.value}, {task.test_status.value}, {task.complexity.value})"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
