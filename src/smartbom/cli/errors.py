"""Exit codes and error rendering for the ``smartbom`` command.

A partially enriched BOM is still a successful run (exit 0).  The
remaining codes:

    1    unexpected error
    2    bad configuration or unreadable input file
    3    no component could be enriched
    130  interrupted with Ctrl+C or cancelled
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Generator, NoReturn

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from smartbom.exceptions import (
    ConfigurationError,
    InputError,
    PipelineCancelled,
    PipelineFailure,
    TemplateError,
)

EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_PIPELINE_FAILURE = 3
EXIT_INTERRUPTED = 130


def _fail(out: Console, title: str, body: str, code: int) -> NoReturn:
    out.print(Panel(f"[bold red]{escape(body)}[/bold red]", title=f"[red]{title}[/red]", border_style="red"))
    sys.exit(code)


def _failure_report(exc: PipelineFailure) -> str:
    lines = ["All components failed to process:"]
    lines.extend(f"• {record.describe()}" for record in exc.failures)
    return "\n".join(lines)


@contextmanager
def error_handler(console: Console | None = None) -> Generator[None, None, None]:
    """Turn errors escaping a CLI command into a panel and an exit code.

    Output goes to *console*, or to a fresh stderr console.
    """
    out = console or Console(stderr=True)
    try:
        yield
    except (ConfigurationError, TemplateError) as exc:
        _fail(out, "Configuration Error", str(exc), EXIT_CONFIG_ERROR)
    except InputError as exc:
        _fail(out, "Invalid Input", str(exc), EXIT_CONFIG_ERROR)
    except PipelineFailure as exc:
        _fail(out, "Enrichment Failed", _failure_report(exc), EXIT_PIPELINE_FAILURE)
    except PipelineCancelled as exc:
        out.print(
            f"\n[yellow]Cancelled: {escape(str(exc))} "
            f"({len(exc.outcomes)} component(s) finished).[/yellow]"
        )
        sys.exit(EXIT_INTERRUPTED)
    except KeyboardInterrupt:
        out.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        _fail(out, "Unexpected Error", str(exc), EXIT_GENERAL_ERROR)
