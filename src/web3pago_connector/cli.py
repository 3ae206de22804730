"""Connector Command Line Interface.

Provides operational tools for:
- Inspecting persisted authorizations
- Inspecting pending payment-app transactions
- Approving or denying a pending transaction by hand
- Store health checks

Usage:
    python -m web3pago_connector.cli show-authorization PAYMENT_ID
    python -m web3pago_connector.cli show-pending CORRELATION_ID
    python -m web3pago_connector.cli approve CORRELATION_ID
    python -m web3pago_connector.cli deny CORRELATION_ID
    python -m web3pago_connector.cli health
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from web3pago_connector.config import get_settings
from web3pago_connector.connector import Web3PagoConnector, connector_config_from_settings
from web3pago_connector.database import create_session_factory, create_tables, get_engine
from web3pago_connector.services.reconciliation import ConfirmationResult
from web3pago_connector.store.sql import SqlKeyValueStore

CommandHandler = Callable[[Web3PagoConnector, argparse.Namespace], Awaitable[int]]


class ConnectorCli:
    """Connector Command Line Interface."""

    def __init__(self, connector: Web3PagoConnector | None = None) -> None:
        self.parser = self._build_parser()
        self._connector = connector

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m web3pago_connector.cli",
            description="Web3Pago connector operational tools",
        )
        parser.add_argument(
            "--database-url",
            type=str,
            help="Override DATABASE_URL for this invocation",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # show-authorization command
        show_auth = subparsers.add_parser(
            "show-authorization",
            help="Print the persisted response for a payment",
        )
        show_auth.add_argument("payment_id", help="Payment ID")

        # show-pending command
        show_pending = subparsers.add_parser(
            "show-pending",
            help="Print a pending payment-app transaction",
        )
        show_pending.add_argument("correlation_id", help="Correlation ID")

        # approve / deny commands
        approve = subparsers.add_parser(
            "approve",
            help="Approve a pending payment-app transaction",
        )
        approve.add_argument("correlation_id", help="Correlation ID")

        deny = subparsers.add_parser(
            "deny",
            help="Deny a pending payment-app transaction",
        )
        deny.add_argument("correlation_id", help="Correlation ID")

        # health command
        subparsers.add_parser("health", help="Check store health")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, CommandHandler] = {
            "show-authorization": self._cmd_show_authorization,
            "show-pending": self._cmd_show_pending,
            "approve": self._cmd_approve,
            "deny": self._cmd_deny,
            "health": self._cmd_health,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        return asyncio.run(self._dispatch(handler, parsed))

    async def _dispatch(self, handler: CommandHandler, args: argparse.Namespace) -> int:
        if self._connector is not None:
            return await handler(self._connector, args)

        settings = get_settings()
        engine = get_engine(args.database_url or settings.database_url)
        try:
            await create_tables(engine)
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
                connector = Web3PagoConnector.create(
                    SqlKeyValueStore(create_session_factory(engine)),
                    config=connector_config_from_settings(settings),
                    http_client=client,
                )
                return await handler(connector, args)
        finally:
            await engine.dispose()

    async def _cmd_show_authorization(
        self, connector: Web3PagoConnector, args: argparse.Namespace
    ) -> int:
        """Print a persisted authorization response."""
        response = await connector.get_authorization(args.payment_id)
        if response is None:
            print(f"No authorization stored for payment {args.payment_id}", file=sys.stderr)
            return 1
        _print_json(response.to_dict())
        return 0

    async def _cmd_show_pending(
        self, connector: Web3PagoConnector, args: argparse.Namespace
    ) -> int:
        """Print a pending transaction."""
        record = await connector.get_pending_transaction(args.correlation_id)
        if record is None:
            print(f"No pending transaction {args.correlation_id}", file=sys.stderr)
            return 1
        _print_json(record.to_dict())
        return 0

    async def _cmd_approve(self, connector: Web3PagoConnector, args: argparse.Namespace) -> int:
        return _report(await connector.approve_payment(args.correlation_id))

    async def _cmd_deny(self, connector: Web3PagoConnector, args: argparse.Namespace) -> int:
        return _report(await connector.deny_payment(args.correlation_id))

    async def _cmd_health(self, connector: Web3PagoConnector, args: argparse.Namespace) -> int:
        """Check store health."""
        healthy = await connector.store_healthy()
        print(f"store: {'OK' if healthy else 'FAIL'}")
        return 0 if healthy else 1


def _print_json(data: dict[str, Any]) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def _report(result: ConfirmationResult) -> int:
    print(f"{result.correlation_id}: {result.status.value}")
    if result.response is not None:
        _print_json(result.response.to_dict())
    elif result.message:
        print(result.message, file=sys.stderr)
    return 0 if result.success else 1


def main() -> int:
    """CLI entry point."""
    cli = ConnectorCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
