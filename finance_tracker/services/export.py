import csv
import io
from datetime import date
from typing import Iterable

from finance_tracker.db.core import TransactionDB, TransactionType

EXPORT_LABELS = {
    "en": {
        "header": ["Date", "Type", "Description", "Category", "Amount"],
        TransactionType.INCOME: "Income",
        TransactionType.EXPENSE: "Expense",
        "uncategorized": "Uncategorized",
    },
    "th": {
        "header": ["วันที่", "ประเภท", "รายละเอียด", "หมวดหมู่", "จำนวนเงิน"],
        TransactionType.INCOME: "รายรับ",
        TransactionType.EXPENSE: "รายจ่าย",
        "uncategorized": "ไม่ระบุ",
    },
}
DEFAULT_LOCALE = "en"


def export_filename(today: date) -> str:
    return f"transactions-{today.isoformat()}.csv"


def transactions_to_csv(transactions: Iterable[TransactionDB], locale: str = DEFAULT_LOCALE) -> str:
    """Render transactions as CSV text, one row each, in the order given."""
    if locale not in EXPORT_LABELS:
        raise ValueError(f"Unsupported locale '{locale}'. Use one of: {', '.join(EXPORT_LABELS)}")
    labels = EXPORT_LABELS[locale]

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(labels["header"])
    for t in transactions:
        writer.writerow([
            t.transaction_date.isoformat(),
            labels[t.transaction_type],
            t.description,
            t.category.name if t.category else labels["uncategorized"],
            t.amount,
        ])
    return output.getvalue()
