from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from src.adapters.aws import AwsRuntimeConfig, dynamodb_client
from src.app.ports.output import IReportRepository
from src.domain.models import StopReport


def _item_to_report(item: Mapping[str, Any]) -> StopReport:
    stop_ids: tuple[str, ...] = ()
    if "stop_ids" in item:
        attr = item["stop_ids"]
        if "SS" in attr:
            stop_ids = tuple(sorted(attr["SS"]))
        elif "L" in attr:
            stop_ids = tuple(v["S"] for v in attr["L"] if "S" in v)
    if not stop_ids and "stop_id" in item:
        stop_ids = (item["stop_id"]["S"],)

    severity = None
    if "severity" in item and "N" in item["severity"]:
        severity = int(float(item["severity"]["N"]))

    return StopReport(
        report_id=item["report_id"]["S"],
        stop_ids=stop_ids,
        severity=severity,
        status=item.get("status", {}).get("S", "active"),
        net_votes=int(float(item.get("net_votes", {}).get("N", "0"))),
    )


@dataclass(slots=True)
class DynamoDbReportRepository(IReportRepository):
    """Reads rider reports from DynamoDB.

    One item per (stop_id, report_id); a report touching several stops is
    written once per stop and de-duplicated on read.

    Env vars:
      - REPORTS_TABLE (default: commute-stop-reports)
      - ENDPOINT_URL (preferred for LocalStack)
      - AWS_REGION
    """

    table_name: str | None = None

    def _table(self) -> str:
        return self.table_name or AwsRuntimeConfig.from_env().reports_table

    def reports_for_stops(self, stop_ids: Sequence[str]) -> tuple[StopReport, ...]:
        ddb = dynamodb_client()
        by_id: dict[str, StopReport] = {}

        for stop_id in dict.fromkeys(stop_ids):
            kwargs: dict[str, Any] = {
                "TableName": self._table(),
                "KeyConditionExpression": "stop_id = :s",
                "ExpressionAttributeValues": {":s": {"S": stop_id}},
            }
            while True:
                resp = ddb.query(**kwargs)
                for item in resp.get("Items", []):
                    report = _item_to_report(item)
                    by_id.setdefault(report.report_id, report)
                last = resp.get("LastEvaluatedKey")
                if not last:
                    break
                kwargs["ExclusiveStartKey"] = last

        return tuple(by_id.values())
