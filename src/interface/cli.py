from __future__ import annotations

import argparse
import json
from datetime import datetime

from application.engine import FinanceEngine
from application.insights_cache import InsightsCache
from domain.date_labels import month_label
from infrastructure.llm.llm_client import LLMClient
from infrastructure.persistence.json_file_gateway import JsonFileGateway
from llm.insights_llm import InsightsLLM


def build_engine(data_path: str | None = None) -> FinanceEngine:
    return FinanceEngine(
        gateway=JsonFileGateway(data_path),
        insights_cache=InsightsCache(InsightsLLM(LLMClient())),
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Inspect or update the FinTrack snapshot.")
    parser.add_argument("--data", help="Snapshot JSON path (defaults to FINTRACK_DATA_PATH).")
    parser.add_argument("--add", nargs=3, metavar=("PAYEE", "CATEGORY", "AMOUNT"), help="Record a transaction dated today.")
    parser.add_argument("--insights", action="store_true", help="Show insights, refreshing them when stale.")
    parser.add_argument("--force", action="store_true", help="Force an insights refresh.")
    args = parser.parse_args(argv)

    engine = build_engine(args.data)
    snapshot = engine.load()

    if args.add:
        payee, category, amount = args.add
        now = datetime.now()
        next_id = max((t.id for t in snapshot.transactions), default=0) + 1
        result = engine.record_transaction(
            {"id": next_id, "date": f"{month_label(now)} {now.day}", "payee": payee, "category": category, "amount": amount}
        )
        print(json.dumps({"ok": result.ok, "milestone_crossed": result.milestone_crossed, "errors": result.errors}))

    if args.insights or args.force:
        insights = engine.get_insights(force_refresh=args.force)
        print(json.dumps([entry.model_dump() for entry in insights.entries], indent=2))
        if insights.errors:
            print({"errors": insights.errors})
        return

    print(json.dumps(engine.snapshot.profile.model_dump(mode="json", by_alias=True), indent=2))


if __name__ == "__main__":
    main()
