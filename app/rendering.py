# Plain-text rendering of account snapshots for the terminal front end

from typing import Optional

from services.account_monitor.models import AccountSnapshot, PollingState


def format_currency(amount: float, currency: str = "USD") -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}{abs(amount):,.2f} {currency}"


def format_percentage(value: float) -> str:
    return f"{value:.2f}%"


def format_snapshot(snapshot: AccountSnapshot) -> str:
    """Multi-line account summary."""
    cur = snapshot.currency
    lines = [
        f"Account {snapshot.account_number} ({snapshot.account_name}) @ {snapshot.server_name}",
        f"  Balance      {format_currency(snapshot.balance, cur)}",
        f"  Equity       {format_currency(snapshot.equity, cur)}",
        f"  Profit       {format_currency(snapshot.profit, cur)}",
        f"  Margin       {format_currency(snapshot.margin, cur)}",
        f"  Free margin  {format_currency(snapshot.free_margin, cur)}",
        f"  Margin level {format_percentage(snapshot.margin_level)}",
        f"  Leverage     1:{snapshot.leverage:g}",
    ]
    return "\n".join(lines)


def format_status_line(state: PollingState) -> str:
    connection = "connected" if state.connected else "DISCONNECTED"
    updated = state.last_updated.strftime("%H:%M:%S") if state.last_updated else "never"
    live = "live" if state.active else "paused"
    return f"[{connection} | {live} | updates: {state.update_count} | last: {updated}]"


def format_update(snapshot: Optional[AccountSnapshot], state: PollingState) -> str:
    if snapshot is None:
        return f"{format_status_line(state)}\n  Connection lost; retrying on next tick"
    return f"{format_status_line(state)}\n{format_snapshot(snapshot)}"
