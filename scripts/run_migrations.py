"""Run the startup migrations against the configured local storage."""

from __future__ import annotations

import asyncio
from typing import Iterable

from closet.bootstrap import startup
from closet.migrations import MigrationResult
from closet.monitoring import configure_logging


def _format_result(result: MigrationResult) -> str:
    status = "✅" if result.success else "❌"
    if not result.success:
        return f"{status} {result.name}: {result.error}"
    return f"{status} {result.name}: {result.migrated_count}/{result.total_count} updated"


def print_results(results: Iterable[MigrationResult]) -> None:
    for result in results:
        print(_format_result(result))


def main() -> None:
    configure_logging()
    report = asyncio.run(startup())
    print_results(report.migrations)
    raise SystemExit(0 if report.success else 1)


if __name__ == "__main__":
    main()
