"""
specflow watch - Live workspace dashboard.

Interactive TUI showing proposals, the primary proposal's integrity and
due maintenance. Polls the workspace tree and reloads when it changes,
at most once per debounce interval. Read-only apart from key actions,
which call the engine.
"""

import os
import time
from pathlib import Path
from typing import Callable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, VerticalScroll
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Static

from specflow.lib import graph
from specflow.lib.errors import NotFound, SpecflowError
from specflow.workflow.lifecycle import CurrentContext
from specflow.workspace import Workspace


Fingerprint = tuple[tuple[str, int, int], ...]


def workspace_fingerprint(root: Path) -> Fingerprint:
    """(relative path, mtime_ns, size) of every file under root, sorted."""
    entries = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            path = Path(dirpath) / name
            try:
                st = path.stat()
            except FileNotFoundError:
                # Deleted between listing and stat; the next poll sees it gone
                continue
            entries.append((str(path.relative_to(root)), st.st_mtime_ns, st.st_size))
    return tuple(sorted(entries))


class ChangeDebouncer:
    """Decides when a changed fingerprint should trigger a reload.

    A change seen less than ``debounce`` seconds after the previous reload
    stays pending and is reported on a later poll.
    """

    def __init__(self, debounce: float, clock: Callable[[], float] = time.monotonic):
        self.debounce = debounce
        self.clock = clock
        self.last_seen: Optional[Fingerprint] = None
        self.last_reload = float("-inf")
        self.pending = False

    def observe(self, fingerprint: Fingerprint) -> bool:
        if fingerprint != self.last_seen:
            self.last_seen = fingerprint
            self.pending = True

        if self.pending and self.clock() - self.last_reload >= self.debounce:
            self.pending = False
            self.last_reload = self.clock()
            return True
        return False


class ContentScreen(ModalScreen):
    """Full screen text viewer (dependency graph, tasks)."""

    BINDINGS = [
        Binding("q", "back", "Back"),
        Binding("escape", "back", "Back"),
    ]

    def __init__(self, content: str, title: str = "") -> None:
        super().__init__()
        self.content = content
        self.screen_title = title

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(Static(self.content, id="content-body", markup=False), id="content-scroll")
        yield Footer()

    def on_mount(self) -> None:
        if self.screen_title:
            self.title = self.screen_title

    def action_back(self) -> None:
        self.app.pop_screen()


class ConfirmModal(ModalScreen[bool]):
    """Yes/no question before a key action mutates the workspace."""

    BINDINGS = [
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Container(
            Static(self.message, id="confirm-message"),
            Static("[y]es / [n]o", id="confirm-hint"),
            id="confirm-dialog",
        )

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class ProposalsWidget(Static):
    proposals: reactive[list] = reactive(list, always_update=True)

    def render(self) -> str:
        if not self.proposals:
            return "[dim]No proposals[/dim]"

        lines = ["[bold]Proposals[/bold]"]
        for s in self.proposals:
            if s.primary:
                marker = "[green]*[/green]"
            elif s.active:
                marker = "[cyan]+[/cyan]"
            else:
                marker = " "
            progress = f"{s.tasks_done}/{s.tasks_total}" if s.tasks_total else "-"
            line = f"{marker} {s.slug:<28} {progress:>7}"
            if s.unmet:
                line += f"  [yellow]blocked by {', '.join(s.unmet)}[/yellow]"
            lines.append(line)
        return "\n".join(lines)


class IntegrityWidget(Static):
    context: reactive[Optional[CurrentContext]] = reactive(None)

    def render(self) -> str:
        if self.context is None:
            return "[dim]No active proposal[/dim]"
        if self.context.blocked:
            changed = ", ".join(self.context.mismatch.changed_files)
            return f"[bold]{self.context.slug}[/bold]: [red]changed since activation[/red] ({changed})"
        if self.context.unverified:
            return f"[bold]{self.context.slug}[/bold]: [yellow]no stored hashes[/yellow] (press a to re-activate)"
        return f"[bold]{self.context.slug}[/bold]: [green]unchanged[/green]"


class MaintenanceWidget(Static):
    items: reactive[list] = reactive(list, always_update=True)

    def render(self) -> str:
        if not self.items:
            return "[dim]No maintenance items[/dim]"

        lines = ["[bold]Maintenance[/bold]"]
        for item in self.items:
            if item.error:
                lines.append(f"  {item.slug:<28} [red]malformed[/red]")
            elif item.due:
                lines.append(f"  {item.slug:<28} [yellow]{item.due}/{item.total} due[/yellow]")
            else:
                lines.append(f"  {item.slug:<28} [green]up to date[/green]")
        return "\n".join(lines)


class WatchApp(App):
    """Workspace dashboard."""

    CSS = """
    #main-container {
        layout: vertical;
        padding: 1;
    }

    #integrity-box {
        border: solid green;
        padding: 0 1;
        height: auto;
    }

    #proposals-box {
        border: solid blue;
        padding: 0 1;
        height: 1fr;
    }

    #maintenance-box {
        border: solid yellow;
        padding: 0 1;
        height: auto;
    }

    ConfirmModal {
        align: center middle;
    }

    #confirm-dialog {
        width: auto;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: solid $warning;
    }

    #content-scroll {
        height: 1fr;
    }

    #content-body {
        padding: 1;
    }
    """

    BINDINGS = [
        Binding("a", "accept_changes", "Re-activate"),
        Binding("g", "show_graph", "Graph"),
        Binding("t", "show_tasks", "Tasks"),
        Binding("r", "reload", "Reload"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, workspace: Workspace) -> None:
        super().__init__()
        self.workspace = workspace
        self.debouncer = ChangeDebouncer(workspace.config.watch.debounce)
        self.context: Optional[CurrentContext] = None
        self._error_notified = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Container(IntegrityWidget(id="integrity"), id="integrity-box"),
            Container(ProposalsWidget(id="proposals"), id="proposals-box"),
            Container(MaintenanceWidget(id="maintenance"), id="maintenance-box"),
            id="main-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.title = f"specflow watch: {self.workspace.root}"
        self.poll_workspace()
        self.set_interval(self.workspace.config.watch.poll_interval, self.poll_workspace)

    def poll_workspace(self) -> None:
        if self.debouncer.observe(workspace_fingerprint(self.workspace.root)):
            self.refresh_data()

    def refresh_data(self) -> None:
        """Reload everything shown from the workspace."""
        try:
            proposals = self.workspace.lifecycle.list_proposals()
            items = self.workspace.maintenance.list_items()
            try:
                self.context = self.workspace.lifecycle.current_tasks()
            except NotFound:
                self.context = None
            self._error_notified = False
        except SpecflowError as e:
            if not self._error_notified:
                self.notify(f"Failed to load workspace: {e}", severity="error")
                self._error_notified = True
            return

        self.query_one("#proposals", ProposalsWidget).proposals = proposals
        self.query_one("#maintenance", MaintenanceWidget).items = items
        self.query_one("#integrity", IntegrityWidget).context = self.context

        due = sum(i.due for i in items)
        self.sub_title = f"{len(proposals)} proposal(s), {due} requirement(s) due"

    def action_reload(self) -> None:
        self.refresh_data()

    def action_accept_changes(self) -> None:
        """Re-activate the primary proposal to accept its changed documents."""
        if self.context is None or not (self.context.blocked or self.context.unverified):
            self.notify("Nothing to accept", severity="warning")
            return

        slug = self.context.slug

        def handle(confirmed: bool) -> None:
            if not confirmed:
                return
            try:
                self.workspace.lifecycle.activate(slug)
            except SpecflowError as e:
                self.notify(str(e), severity="error")
                return
            self.notify(f"Re-activated {slug}")
            self.refresh_data()

        self.push_screen(ConfirmModal(f"Accept changes to '{slug}' and refresh its hashes?"), handle)

    def action_show_graph(self) -> None:
        nodes = self.workspace.lifecycle.dependency_graph()
        self.push_screen(ContentScreen(graph.render_tree(nodes), title="Dependency graph"))

    def action_show_tasks(self) -> None:
        if self.context is None:
            self.notify("No active proposal", severity="warning")
            return
        try:
            context = self.workspace.lifecycle.current_tasks(confirm=True)
        except SpecflowError as e:
            self.notify(str(e), severity="error")
            return
        content = "\n".join(context.documents.values()) or "No implementation.md"
        self.push_screen(ContentScreen(content, title=f"Tasks: {context.slug}"))


def cmd_watch(args, workspace: Workspace) -> int:
    """Watch a workspace."""
    if not workspace.exists():
        print(f"ERROR: No workspace at {workspace.root} (run 'specflow init')")
        return 2

    app = WatchApp(workspace)
    app.run()
    return 0
