"""Human-readable output for connection, request, user and inbox results.

:func:`render_result` picks a renderer from ``_OP_RENDERERS`` by
``result.op``; anything unlisted is printed as indented key/value lines.
Request listings render as tables, a single request as a panel.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from peerlink.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from peerlink.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* for a terminal. Plain text when stdout is not a TTY."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: ids only where there are any."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "list_requests":
        items = [*result.data.get("incoming", []), *result.data.get("outgoing", [])]
    else:
        items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(_extract_id(item) for item in items if _extract_id(item))

    request_id = result.data.get("request_id")
    if request_id:
        return str(request_id)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_id(item: Any) -> str:
    if isinstance(item, dict):
        for key in ("id", "peer_id"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="peer.ok")
    op = Text(f"  {result.op}", style="peer.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="peer.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="peer.id")
    elif key == "status":
        v = Text(str(value), style=style_for_status(str(value)))
    elif key == "name":
        v = Text(str(value), style="peer.name")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _party(party: dict[str, Any] | None) -> str:
    if not party:
        return ""
    return f"{party.get('name', '')} ({party.get('id', '')})"


def _status_text(status: str) -> Text:
    return Text(status, style=style_for_status(status))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="peer.error")
    op = Text(f"  {result.op}", style="peer.op")
    code = Text(f" [{err.code}]" if err else "", style="peer.key")
    sep = Text(" — ")
    console.print(label, op, code, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render send/accept/reject/remove/mark-read results."""
    _status_line(console, result)
    mutation_keys = (
        "request_id",
        "status",
        "from_user_id",
        "to_user_id",
        "user_id",
        "peer_id",
        "notification_id",
        "edges_written",
        "edges_removed",
    )
    for key in mutation_keys:
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose and "created_at" in result.data:
        _field(console, "created_at", result.data["created_at"])


def _render_profile(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("id", "name", "role", "department"):
        val = result.data.get(key)
        if val is not None:
            _field(console, key, val)


# ── Query renderers ───────────────────────────────────────────────────


def _render_request(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a single request as a panel."""
    d = result.data
    lines = [
        f"from: {_party(d.get('sender')) or d.get('from_user_id', '')}",
        f"to: {_party(d.get('recipient')) or d.get('to_user_id', '')}",
        f"status: {d.get('status', '')}",
        f"created: {d.get('created_at', '')}",
        f"updated: {d.get('updated_at', '')}",
    ]
    console.print(
        Panel(
            "\n".join(lines),
            title=str(d.get("id", "?")),
            border_style=style_for_status(str(d.get("status", ""))) or "dim",
            expand=False,
        )
    )


def _render_connections(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Peer", style="peer.id", no_wrap=True)
    table.add_column("Name", style="peer.name")
    table.add_column("Role")
    table.add_column("Since", style="dim")
    for item in items:
        table.add_row(
            str(item.get("peer_id", "")),
            str(item.get("name", "")),
            str(item.get("role", "")),
            str(item.get("created_at", "")),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} connections")


def _request_table(items: list[dict[str, Any]], *, party_key: str, title: str) -> Table:
    party_label = "From" if party_key == "sender" else "To"
    table = Table(title=title, show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="peer.id", no_wrap=True)
    table.add_column(party_label)
    table.add_column("Sent", style="dim")
    for item in items:
        table.add_row(
            str(item.get("id", "")),
            _party(item.get(party_key)),
            str(item.get("created_at", "")),
        )
    return table


def _render_pending(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render incoming and outgoing pending requests as two tables."""
    incoming = result.data.get("incoming", [])
    outgoing = result.data.get("outgoing", [])
    if not incoming and not outgoing:
        console.print(f"No pending requests for {result.data.get('user_id', '')}")
        return
    if incoming:
        console.print(_request_table(incoming, party_key="sender", title="Incoming"))
    if outgoing:
        if incoming:
            console.print()
        console.print(_request_table(outgoing, party_key="recipient", title="Outgoing"))


def _render_history(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="peer.id", no_wrap=True)
    table.add_column("From")
    table.add_column("To")
    table.add_column("Status")
    table.add_column("Updated", style="dim")
    for item in items:
        table.add_row(
            str(item.get("id", "")),
            str(item.get("from_user_id", "")),
            str(item.get("to_user_id", "")),
            _status_text(str(item.get("status", ""))),
            str(item.get("updated_at", "")),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} requests")


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    a, b = d.get("user_id", ""), d.get("peer_id", "")
    if d.get("connected"):
        console.print(Text(f"{a} and {b} are connected", style="peer.ok"))
    else:
        console.print(f"{a} and {b} are not connected")
    pending = d.get("pending_request_id")
    if pending:
        _field(console, "pending_request_id", pending)


def _render_users(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="peer.id", no_wrap=True)
    table.add_column("Name", style="peer.name")
    table.add_column("Role")
    table.add_column("Department")
    for item in items:
        table.add_row(
            str(item.get("id", "")),
            str(item.get("name", "")),
            str(item.get("role", "")),
            str(item.get("department") or ""),
        )
    console.print(table)


def _render_notifications(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(f"No notifications for {result.data.get('user_id', '')}")
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", justify="right")
    table.add_column("", no_wrap=True)
    table.add_column("Message")
    table.add_column("Request", style="peer.id")
    if verbose:
        table.add_column("Received", style="dim")
    for item in items:
        row: list[Any] = [
            str(item.get("id", "")),
            Text("●", style="peer.unread") if not item.get("read") else "",
            str(item.get("message", "")),
            str(item.get("request_id") or ""),
        ]
        if verbose:
            row.append(str(item.get("created_at", "")))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('unread', 0)} unread")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


_OP_RENDERERS: dict[str, Any] = {
    # Requests
    "send_request": _render_mutation,
    "accept_request": _render_mutation,
    "reject_request": _render_mutation,
    "get_request": _render_request,
    "list_requests": _render_pending,
    "request_history": _render_history,
    # Connections
    "list_connections": _render_connections,
    "check_connection": _render_check,
    "remove_connection": _render_mutation,
    # Users
    "add_user": _render_profile,
    "get_user": _render_profile,
    "list_users": _render_users,
    # Inbox
    "list_notifications": _render_notifications,
    "mark_read": _render_mutation,
}
