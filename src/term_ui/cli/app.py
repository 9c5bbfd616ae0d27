"""Typer CLI application for inspecting terminal capabilities and protocols."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from term_ui.log_setup import setup_logging

COLOR_MODES = {
    "mono": "MONOCHROME",
    "16": "STANDARD_16",
    "256": "EXTENDED_256",
    "rgb": "TRUE_COLOR",
}

_SIMPLE_ESCAPES = {
    "e": 0x1B,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "\\": 0x5C,
}


def unescape(text: str) -> bytes:
    r"""
    Turn a shell-friendly escaped string into raw bytes.

    Understands ``\e``, ``\n``, ``\r``, ``\t``, ``\\`` and ``\xNN``;
    everything else is encoded as UTF-8.
    """
    out = bytearray()
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\" or i + 1 >= len(text):
            out.extend(ch.encode("utf-8"))
            i += 1
            continue
        nxt = text[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt == "x" and i + 4 <= len(text):
            try:
                out.append(int(text[i + 2:i + 4], 16))
            except ValueError:
                raise ValueError(f"Invalid \\x escape at position {i}") from None
            i += 4
        else:
            out.extend(ch.encode("utf-8"))
            i += 1
    return bytes(out)


def create_app() -> typer.Typer:
    """Create and configure the CLI application."""
    app = typer.Typer(
        name="term-ui",
        help="Inspect terminal capabilities, input decoding and ANSI encoding.",
        no_args_is_help=True,
        rich_markup_mode="rich",
    )
    console = Console()

    @app.callback()
    def main(
        verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log informational messages")] = False,
        debug: Annotated[bool, typer.Option("--debug", help="Log debug messages")] = False,
    ) -> None:
        """Terminal control protocol toolkit."""
        setup_logging(verbose=verbose, debug=debug)

    @app.command()
    def caps(
        json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
        no_terminfo: Annotated[bool, typer.Option("--no-terminfo", help="Skip the infocmp query")] = False,
    ) -> None:
        """Show the capabilities detected for this terminal."""
        from term_ui.capabilities import detect

        detected = detect(query_terminfo=not no_terminfo)
        data = detected.to_dict()

        if json_output:
            print(json.dumps(data, indent=2))
            return

        table = Table(title="Terminal capabilities")
        table.add_column("Capability", style="bold")
        table.add_column("Value")
        for key, value in data.items():
            table.add_row(key, "[dim](none)[/]" if value is None else str(value))
        console.print(table)

    @app.command("platform")
    def platform_info(
        json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    ) -> None:
        """Show what the operating system offers terminal programs."""
        from term_ui.platform import current_platform

        data = current_platform().info().to_dict()
        if json_output:
            print(json.dumps(data, indent=2))
            return

        console.print(f"[bold cyan]Platform: {data['family']}[/]")
        for key, value in data.items():
            if key == "family":
                continue
            if isinstance(value, list):
                value = ", ".join(str(v) for v in value) or "(none)"
            console.print(f"  [bold]{key}:[/] {value}")

    @app.command()
    def select(
        backend: Annotated[str, typer.Option("--backend", "-b", help="auto, raw or tty")] = "auto",
    ) -> None:
        """Attempt backend selection, report the result, then restore the terminal."""
        from term_ui.backend.selector import BackendSelector, Explicit, Raw

        selector = BackendSelector()
        try:
            result = selector.select(backend)
        finally:
            selector.teardown()

        if isinstance(result, Raw):
            console.print("[green]raw[/]: raw mode started (now restored)")
        elif isinstance(result, Explicit):
            console.print(f"[yellow]explicit[/]: {result.backend} {dict(result.options)}")
        else:
            caps = result.capabilities
            console.print("[yellow]tty[/]: cooperative mode")
            for key, value in caps.to_dict().items():
                console.print(f"  [bold]{key}:[/] {value}")

    @app.command()
    def decode(
        data: Annotated[str, typer.Argument(help="Input bytes, e.g. '\\e[A' or '\\x1b[<0;5;10M'")],
        flush: Annotated[bool, typer.Option("--flush", "-f", help="Flush partial sequences at the end")] = False,
    ) -> None:
        """Decode escaped input bytes into events."""
        from term_ui.codec.decoder import InputDecoder
        from term_ui.core.events import KeyEvent

        try:
            raw = unescape(data)
        except ValueError as e:
            console.print(f"[red]{e}[/]")
            raise typer.Exit(1)

        decoder = InputDecoder()
        events = decoder.feed(raw)
        if flush:
            events.extend(decoder.flush(end_of_stream=True))

        table = Table(title=f"{len(events)} event(s)")
        table.add_column("#", justify="right")
        table.add_column("Type", style="bold")
        table.add_column("Detail")
        for i, event in enumerate(events, 1):
            detail = event.describe() if isinstance(event, KeyEvent) else repr(event)
            table.add_row(str(i), type(event).__name__, detail)
        console.print(table)
        if decoder.pending:
            console.print(f"[yellow]Pending:[/] {decoder.pending!r}")

    @app.command()
    def sgr(
        fg: Annotated[Optional[str], typer.Option("--fg", help="Foreground: name, #rrggbb, rgb(r,g,b) or 0-255")] = None,
        bg: Annotated[Optional[str], typer.Option("--bg", help="Background color")] = None,
        attr: Annotated[Optional[list[str]], typer.Option("--attr", "-a", help="Attribute (bold, italic, ...); repeatable")] = None,
        mode: Annotated[str, typer.Option("--mode", "-m", help="Color depth: mono, 16, 256 or rgb")] = "rgb",
        sample: Annotated[str, typer.Option("--sample", "-s", help="Sample text")] = "Sample text",
    ) -> None:
        """Show the escape sequence for a style at a given color depth."""
        from term_ui.codec.encoder import reset, sgr as encode_sgr
        from term_ui.core.color import ColorMode, parse_color
        from term_ui.core.style import Attribute, Style

        if mode not in COLOR_MODES:
            console.print(f"[red]Unknown color mode: {mode}[/] (use {', '.join(COLOR_MODES)})")
            raise typer.Exit(1)
        try:
            style = Style(
                fg=parse_color(fg) if fg else None,
                bg=parse_color(bg) if bg else None,
                attrs=frozenset(Attribute[a.upper()] for a in attr or []),
            )
        except KeyError as e:
            console.print(f"[red]Unknown attribute: {e.args[0].lower()}[/]")
            raise typer.Exit(1)
        except (ValueError, TypeError) as e:
            console.print(f"[red]{e}[/]")
            raise typer.Exit(1)

        sequence = encode_sgr(style, ColorMode[COLOR_MODES[mode]])
        console.print(f"[bold]Bytes:[/] {sequence!r}")
        typer.echo(sequence.decode("ascii") + sample + reset().decode("ascii"))

    @app.command()
    def keys(
        backend: Annotated[str, typer.Option("--backend", "-b", help="auto, raw or tty")] = "auto",
    ) -> None:
        """Print input events as they arrive (press q to quit)."""
        from term_ui.backend.session import TerminalSession
        from term_ui.config import TermConfig
        from term_ui.core.events import KeyEvent

        config = TermConfig.from_dict({"backend": backend, "alternate_screen": False}, TermConfig.load())
        with TerminalSession(config) as session:
            session.write(b"Press q to quit\r\n")
            session.flush()
            while True:
                event = session.read_event(timeout=0.5)
                if event is None:
                    if session.reader is not None and session.reader.eof:
                        break
                    continue
                label = event.describe() if isinstance(event, KeyEvent) else repr(event)
                session.write(f"{label}\r\n".encode("utf-8"))
                session.flush()
                if isinstance(event, KeyEvent) and label in ("q", "ctrl+c"):
                    break

    @app.command()
    def palette(
        output: Annotated[Path, typer.Argument(help="Image file to write (e.g. palette.png)")],
        steps: Annotated[int, typer.Option("--steps", help="Number of hues")] = 48,
    ) -> None:
        """Render true-color, 256 and 16-color swatches to an image."""
        from term_ui import palette as palette_module

        if not palette_module.HAS_PIL:
            console.print("[red]Palette images require Pillow. Install with: pip install term-ui[image][/]")
            raise typer.Exit(1)
        try:
            path = palette_module.render_palette(output, steps=steps)
        except ValueError as e:
            console.print(f"[red]{e}[/]")
            raise typer.Exit(1)
        console.print(f"[green]Wrote {path}[/]")

    return app
